"""
Model: User
"""

from flask_login import UserMixin

from questlog.db import db
from questlog.utils import now_utc


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    display_name = db.Column(db.String(24))
    email = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=now_utc)
