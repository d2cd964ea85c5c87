"""
Models package

- user.py: User accounts
- apitoken.py: Bearer tokens identifying a user
- collection.py: Per-user collection entries
- user_settings.py: Per-user browse/display preferences
"""

from .user import User
from .apitoken import ApiToken
from .collection import CollectionEntry
from .user_settings import UserSettings

__all__ = [
    "User",
    "ApiToken",
    "CollectionEntry",
    "UserSettings",
]
