"""
Per-user game collection: add, rate, track playthroughs, remove.
"""
import logging

from sqlalchemy.exc import IntegrityError

from questlog.constants import (
    COMPLETION_MAX,
    COUNTER_MAX,
    PLAYTHROUGH_STATUSES,
    USER_RATING_MAX,
    USER_RATING_MIN,
)
from questlog.exceptions import ConflictException, NotFoundException, ValidationException
from questlog.repositories.collection_repository import CollectionRepository
from questlog.utils import clamp_number, iso_timestamp, now_utc, to_number

logger = logging.getLogger("main")


def parse_game_id(value):
    """IGDB ids are positive integers; anything else is rejected"""
    if isinstance(value, bool):
        raise ValidationException("Game id must be a positive integer")
    try:
        game_id = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationException("Game id must be a positive integer")
    if game_id <= 0:
        raise ValidationException("Game id must be a positive integer")
    return game_id


def entry_to_dict(entry):
    return {
        "id": entry.game_id,
        "title": entry.title,
        "name": entry.name,
        "summary": entry.summary,
        "first_release_date": entry.first_release_date,
        "coverUrl": entry.cover_url,
        "coverImageId": entry.cover_image_id,
        "addedAt": iso_timestamp(entry.added_at) if entry.added_at else None,
        "rating": entry.rating,
        "playthrough": {
            "status": entry.status,
            "completionPercent": entry.completion_percent,
            "achievementsUnlocked": entry.achievements_unlocked,
            "achievementsTotal": entry.achievements_total,
            "hoursPlayed": entry.hours_played,
            "notes": entry.notes,
        },
    }


def list_entries(user_id):
    return [entry_to_dict(e) for e in CollectionRepository.get_all_by_user(user_id)]


def _get_entry_or_404(user_id, game_id):
    entry = CollectionRepository.get_by_user_and_game(user_id, game_id)
    if entry is None:
        raise NotFoundException(f"Game {game_id} is not in your collection")
    return entry


def get_entry(user_id, game_id):
    return entry_to_dict(_get_entry_or_404(user_id, parse_game_id(game_id)))


def add_entry(user_id, game):
    """Copy the display fields of a catalog record into the user's collection"""
    if not isinstance(game, dict):
        raise ValidationException("Game payload must be an object")

    game_id = parse_game_id(game.get("id"))
    if CollectionRepository.get_by_user_and_game(user_id, game_id):
        raise ConflictException("That game is already in your collection")

    title = game.get("name") or game.get("title") or ""
    release = to_number(game.get("first_release_date"))

    try:
        entry = CollectionRepository.create(
            user_id=user_id,
            game_id=game_id,
            title=title,
            name=title,
            summary=game.get("summary"),
            first_release_date=int(release) if release is not None else None,
            cover_url=game.get("coverUrl"),
            cover_image_id=game.get("coverImageId"),
            added_at=now_utc(),
        )
    except IntegrityError:
        # Lost a race against a concurrent add of the same game
        raise ConflictException("That game is already in your collection")

    logger.info(f"User {user_id} added game {game_id} to collection")
    return entry_to_dict(entry)


def set_rating(user_id, game_id, rating):
    """Set the user's 0-10 rating; None clears it"""
    game_id = parse_game_id(game_id)
    if rating is not None:
        value = to_number(rating)
        if value is None or not value.is_integer() or not USER_RATING_MIN <= value <= USER_RATING_MAX:
            raise ValidationException(
                f"Rating must be a whole number between {USER_RATING_MIN} and {USER_RATING_MAX}"
            )
        rating = int(value)

    entry = _get_entry_or_404(user_id, game_id)
    CollectionRepository.update(entry, rating=rating, rating_updated_at=now_utc())
    return entry_to_dict(entry)


def _clamp_count(value):
    number = clamp_number(value, 0, COUNTER_MAX)
    return int(number) if number is not None else None


def normalize_playthrough(data):
    if not isinstance(data, dict):
        raise ValidationException("Playthrough payload must be an object")

    status = data.get("status")
    if status is not None:
        status = str(status).strip().lower() or None
        if status is not None and status not in PLAYTHROUGH_STATUSES:
            raise ValidationException(f"Status must be one of: {', '.join(PLAYTHROUGH_STATUSES)}")

    notes = data.get("notes")
    notes = notes.strip() or None if isinstance(notes, str) else None

    return {
        "status": status,
        "completion_percent": clamp_number(data.get("completionPercent"), 0, COMPLETION_MAX),
        "achievements_unlocked": _clamp_count(data.get("achievementsUnlocked")),
        "achievements_total": _clamp_count(data.get("achievementsTotal")),
        "hours_played": clamp_number(data.get("hoursPlayed"), 0, COUNTER_MAX),
        "notes": notes,
    }


def save_playthrough(user_id, game_id, data):
    """Replace the playthrough record of a collection entry"""
    game_id = parse_game_id(game_id)
    fields = normalize_playthrough(data)
    entry = _get_entry_or_404(user_id, game_id)
    CollectionRepository.update(entry, playthrough_updated_at=now_utc(), **fields)
    return entry_to_dict(entry)


def remove_entry(user_id, game_id):
    game_id = parse_game_id(game_id)
    entry = _get_entry_or_404(user_id, game_id)
    CollectionRepository.delete(entry)
    logger.info(f"User {user_id} removed game {game_id} from collection")
    return True


def wipe_collection(user_id):
    count = CollectionRepository.delete_all_by_user(user_id)
    logger.info(f"Wiped {count} collection entries for user {user_id}")
    return count
