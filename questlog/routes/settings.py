"""
Settings Routes - per-user preferences
"""

from flask import Blueprint, request
from flask_login import current_user, login_required

from questlog.api_responses import handle_api_errors, success_response
from questlog.constants import FONTS, THEMES
from questlog.services import user_settings_service

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.route("", methods=["GET"])
@login_required
@handle_api_errors
def get_settings_api():
    return success_response(data=user_settings_service.get_settings(current_user))


@settings_bp.route("", methods=["PATCH", "PUT"])
@login_required
@handle_api_errors
def update_settings_api():
    """Merge the posted keys into the stored settings"""
    data = user_settings_service.update_settings(current_user, request.get_json(silent=True))
    return success_response(data=data, message="Settings updated.")


@settings_bp.route("/themes", methods=["GET"])
def list_themes():
    return success_response(data={"themes": THEMES, "fonts": FONTS})
