"""
Repository for User and ApiToken database operations
"""

import secrets

from sqlalchemy.exc import SQLAlchemyError

from questlog.db import db
from questlog.models.apitoken import ApiToken
from questlog.models.user import User
from questlog.utils import now_utc


class UserRepository:
    """Repository for User database operations"""

    @staticmethod
    def get_by_id(id):
        """Get User by ID"""
        return db.session.get(User, id)

    @staticmethod
    def get_by_username(username):
        """Get User by login name"""
        return User.query.filter_by(username=username).first()

    @staticmethod
    def create(**kwargs):
        """Create new User record"""
        try:
            item = User(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update(id, **kwargs):
        """Update User record"""
        item = db.session.get(User, id)
        if not item:
            return None

        for key, value in kwargs.items():
            if hasattr(item, key):
                setattr(item, key, value)

        db.session.commit()
        return item

    @staticmethod
    def count():
        """Count total User records"""
        return User.query.count()


class ApiTokenRepository:
    """Repository for ApiToken database operations"""

    @staticmethod
    def get_by_token(token):
        return ApiToken.query.filter_by(token=token).first()

    @staticmethod
    def create_for_user(user_id, name="default"):
        """Issue a new random token for the user"""
        try:
            item = ApiToken(user_id=user_id, name=name, token=secrets.token_hex(32))
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def touch(item):
        """Record token usage"""
        item.last_used = now_utc()
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
