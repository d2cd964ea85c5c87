"""
Model: CollectionEntry
One row per (user, game); display fields are copied from the IGDB record
when the game is added.
"""

from questlog.db import db
from questlog.utils import now_utc


class CollectionEntry(db.Model):
    __tablename__ = "collection_entry"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    game_id = db.Column(db.Integer, nullable=False)

    # Denormalized from the catalog record
    title = db.Column(db.String)
    name = db.Column(db.String)
    summary = db.Column(db.Text)
    first_release_date = db.Column(db.Integer)  # unix seconds
    cover_url = db.Column(db.String)
    cover_image_id = db.Column(db.String)
    added_at = db.Column(db.DateTime, default=now_utc)

    rating = db.Column(db.Integer)  # 0-10
    rating_updated_at = db.Column(db.DateTime)

    # Playthrough
    status = db.Column(db.String(16))
    completion_percent = db.Column(db.Float)  # 0-100
    achievements_unlocked = db.Column(db.Integer)
    achievements_total = db.Column(db.Integer)
    hours_played = db.Column(db.Float)
    notes = db.Column(db.Text)
    playthrough_updated_at = db.Column(db.DateTime)

    user = db.relationship("User", backref=db.backref("collection", lazy=True, cascade="all, delete-orphan"))

    __table_args__ = (
        db.UniqueConstraint("user_id", "game_id", name="uq_collection_user_game"),
    )
