"""
Repository for CollectionEntry database operations
"""

from sqlalchemy.exc import SQLAlchemyError

from questlog.db import db
from questlog.models.collection import CollectionEntry


class CollectionRepository:
    """Repository for CollectionEntry database operations"""

    @staticmethod
    def get_all_by_user(user_id):
        """Get all entries of a user, newest first"""
        return (
            CollectionEntry.query.filter_by(user_id=user_id)
            .order_by(CollectionEntry.added_at.desc(), CollectionEntry.id.desc())
            .all()
        )

    @staticmethod
    def get_by_user_and_game(user_id, game_id):
        """Get the entry of a game in a user's collection"""
        return CollectionEntry.query.filter_by(user_id=user_id, game_id=game_id).first()

    @staticmethod
    def create(**kwargs):
        """Create new CollectionEntry record"""
        try:
            item = CollectionEntry(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update(item, **kwargs):
        """Update CollectionEntry record (last write wins)"""
        for key, value in kwargs.items():
            if hasattr(item, key):
                setattr(item, key, value)

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return item

    @staticmethod
    def delete(item):
        """Delete CollectionEntry record"""
        try:
            db.session.delete(item)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return True

    @staticmethod
    def delete_all_by_user(user_id):
        """Delete every entry of a user; returns the number removed"""
        try:
            count = CollectionEntry.query.filter_by(user_id=user_id).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return count

    @staticmethod
    def count_by_user(user_id):
        return CollectionEntry.query.filter_by(user_id=user_id).count()
