"""
Collection Routes - the signed-in user's games
"""

from flask import Blueprint, request
from flask_login import current_user, login_required

from questlog.api_responses import handle_api_errors, success_response, validation_error_response
from questlog.repositories.collection_repository import CollectionRepository
from questlog.services import collection_service

collection_bp = Blueprint("collection", __name__, url_prefix="/api/collection")


@collection_bp.route("", methods=["GET"])
@login_required
@handle_api_errors
def list_collection():
    items = collection_service.list_entries(current_user.id)
    return success_response(data={"items": items, "total": CollectionRepository.count_by_user(current_user.id)})


@collection_bp.route("", methods=["POST"])
@login_required
@handle_api_errors
def add_game():
    """Add a catalog record to the collection"""
    entry = collection_service.add_entry(current_user.id, request.get_json(silent=True))
    return success_response(data=entry, message=f"{entry['name'] or 'Game'} added to your collection.",
                            status_code=201)


@collection_bp.route("", methods=["DELETE"])
@login_required
@handle_api_errors
def wipe_collection():
    removed = collection_service.wipe_collection(current_user.id)
    return success_response(data={"removed": removed}, message="Your collection data has been removed.")


@collection_bp.route("/<game_id>", methods=["GET"])
@login_required
@handle_api_errors
def get_game(game_id):
    return success_response(data=collection_service.get_entry(current_user.id, game_id))


@collection_bp.route("/<game_id>", methods=["DELETE"])
@login_required
@handle_api_errors
def remove_game(game_id):
    collection_service.remove_entry(current_user.id, game_id)
    return success_response(message="Game removed from your collection.")


@collection_bp.route("/<game_id>/rating", methods=["PUT"])
@login_required
@handle_api_errors
def rate_game(game_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or "rating" not in data:
        return validation_error_response("rating", "A rating value (or null) is required")
    return success_response(data=collection_service.set_rating(current_user.id, game_id, data["rating"]))


@collection_bp.route("/<game_id>/playthrough", methods=["PUT"])
@login_required
@handle_api_errors
def save_playthrough(game_id):
    entry = collection_service.save_playthrough(current_user.id, game_id, request.get_json(silent=True))
    return success_response(data=entry)
