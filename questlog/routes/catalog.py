"""
Catalog Routes - top games and new releases from IGDB
"""
import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from questlog.constants import MODE_NEW_RELEASES, MODE_TOP_GAMES
from questlog.services.user_settings_service import catalog_defaults
from questlog.utils import to_number

logger = logging.getLogger("main")
catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/igdb")


def parse_catalog_args(args, defaults):
    """Turn query-string arguments into fetch_games keyword arguments.

    Filters that are absent from the query string fall back to ``defaults``
    (the caller's saved settings).
    """
    min_rating = args.get("minRating")
    tags = args.get("tags")
    hide_mature = args.get("hideMature")

    return {
        "q": args.get("q"),
        "page": to_number(args.get("page", "1")),
        "page_size": to_number(args.get("pageSize", "20")),
        "min_rating": (to_number(min_rating) or 0) if min_rating is not None else defaults["minRating"],
        "tag_filters": (
            [t.strip() for t in tags.split(",") if t.strip()] if tags is not None else defaults["tagFilters"]
        ),
        # Mature content stays hidden unless explicitly disabled with "0"
        "hide_mature": hide_mature != "0" if hide_mature is not None else defaults["hideMature"],
    }


def _catalog_response(mode, failure_message):
    service = current_app.extensions["catalog_service"]
    if not service.client.configured:
        logger.error("IGDB credentials are not configured")
        return jsonify({"error": "IGDB API not configured"}), 500

    try:
        payload = service.fetch_games(mode, **parse_catalog_args(request.args, catalog_defaults(current_user)))
    except Exception as e:
        logger.error(f"IGDB {mode} request failed: {e}")
        return jsonify({"error": str(e) or failure_message}), 500

    return jsonify(payload)


@catalog_bp.route("/top-games")
def top_games():
    """Weighted top-games board (or rating-ordered search results)"""
    return _catalog_response(MODE_TOP_GAMES, "Failed to fetch IGDB top games")


@catalog_bp.route("/new-releases")
def new_releases():
    """Already released games, newest first"""
    return _catalog_response(MODE_NEW_RELEASES, "Failed to fetch IGDB new releases")
