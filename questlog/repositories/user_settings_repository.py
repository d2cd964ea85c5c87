"""
Repository for UserSettings database operations
"""

from sqlalchemy.exc import SQLAlchemyError

from questlog.db import db
from questlog.models.user_settings import UserSettings


class UserSettingsRepository:
    """Repository for UserSettings database operations"""

    @staticmethod
    def get_by_user(user_id):
        return db.session.get(UserSettings, user_id)

    @staticmethod
    def upsert(user_id, **kwargs):
        """Create the settings row if missing, then apply kwargs"""
        item = db.session.get(UserSettings, user_id)
        if item is None:
            item = UserSettings(user_id=user_id)
            db.session.add(item)

        for key, value in kwargs.items():
            if hasattr(item, key):
                setattr(item, key, value)

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return item
