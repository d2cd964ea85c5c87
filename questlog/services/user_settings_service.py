"""
Per-user preferences that seed the browse/search filters and the UI theme.
"""
import logging

from questlog.constants import DEFAULT_FONT, DEFAULT_THEME, FONTS, THEMES, USERNAME_MAX_LENGTH
from questlog.exceptions import ValidationException
from questlog.repositories.user_repository import UserRepository
from questlog.repositories.user_settings_repository import UserSettingsRepository
from questlog.utils import to_number

logger = logging.getLogger("main")

THEME_IDS = [t["id"] for t in THEMES]

DEFAULT_USER_SETTINGS = {
    "hideMature": True,
    "tagFilters": [],
    "minRating": 0,
    "theme": DEFAULT_THEME,
    "font": DEFAULT_FONT,
}


def normalize_theme(value):
    return value if isinstance(value, str) and value in THEME_IDS else DEFAULT_THEME


def normalize_font(value):
    return value if isinstance(value, str) and value in FONTS else DEFAULT_FONT


def normalize_min_rating(value):
    number = to_number(value)
    return number if number is not None and number > 0 else 0


def normalize_tag_list(value):
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        return []
    return [t for t in (str(v).strip() for v in value if v is not None) if t]


def get_settings(user):
    """Current settings of a user; defaults fill anything never saved"""
    row = UserSettingsRepository.get_by_user(user.id)
    settings = dict(DEFAULT_USER_SETTINGS)
    if row is not None:
        settings.update({
            "hideMature": bool(row.hide_mature),
            "tagFilters": normalize_tag_list(row.tag_filters),
            "minRating": normalize_min_rating(row.min_rating),
            "theme": normalize_theme(row.theme),
            "font": normalize_font(row.font),
        })
    return {"username": user.display_name or "", "settings": settings}


def update_settings(user, data):
    """Merge the given keys into the stored settings"""
    if not isinstance(data, dict):
        raise ValidationException("Settings payload must be an object")

    if "username" in data:
        username = data.get("username")
        username = username.strip() if isinstance(username, str) else ""
        if len(username) > USERNAME_MAX_LENGTH:
            raise ValidationException(f"Username must be {USERNAME_MAX_LENGTH} characters or less.")
        UserRepository.update(user.id, display_name=username or None)

    incoming = data.get("settings", data)
    if not isinstance(incoming, dict):
        raise ValidationException("Settings payload must be an object")

    fields = {}
    if "hideMature" in incoming:
        fields["hide_mature"] = incoming["hideMature"] is not False
    if "minRating" in incoming:
        fields["min_rating"] = normalize_min_rating(incoming["minRating"])
    if "tagFilters" in incoming:
        fields["tag_filters"] = normalize_tag_list(incoming["tagFilters"])
    if "theme" in incoming:
        fields["theme"] = normalize_theme(incoming["theme"])
    if "font" in incoming:
        fields["font"] = normalize_font(incoming["font"])

    if fields:
        UserSettingsRepository.upsert(user.id, **fields)
        logger.info(f"Updated settings for user {user.id}: {sorted(fields)}")

    return get_settings(user)


def catalog_defaults(user):
    """Filter defaults for catalog requests; anonymous callers get the global defaults"""
    if user is None or not getattr(user, "is_authenticated", False):
        return dict(DEFAULT_USER_SETTINGS)
    return get_settings(user)["settings"]
