"""
Model: UserSettings
"""

from questlog.constants import DEFAULT_FONT, DEFAULT_THEME
from questlog.db import db
from questlog.utils import now_utc


class UserSettings(db.Model):
    __tablename__ = "user_settings"

    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    hide_mature = db.Column(db.Boolean, default=True, nullable=False)
    min_rating = db.Column(db.Float, default=0, nullable=False)
    tag_filters = db.Column(db.JSON, default=list)
    theme = db.Column(db.String(32), default=DEFAULT_THEME, nullable=False)
    font = db.Column(db.String(32), default=DEFAULT_FONT, nullable=False)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    user = db.relationship("User", backref=db.backref("settings", uselist=False, cascade="all, delete-orphan"))
