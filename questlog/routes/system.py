"""
System Routes - health and catalog cache maintenance
"""
import socket

from flask import Blueprint, current_app, jsonify
from flask_login import login_required
from sqlalchemy import text

from questlog.api_responses import handle_api_errors, success_response
from questlog.constants import BUILD_VERSION
from questlog.db import db
from questlog.utils import iso_timestamp

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


@system_bp.route("/health", methods=["GET"])
def health_check_api():
    """Health check endpoint for monitoring"""
    overall_status = "healthy"
    checks = {
        "timestamp": iso_timestamp(),
        "version": BUILD_VERSION,
        "hostname": socket.gethostname(),
        "database": "unknown",
        "igdb": "configured" if current_app.extensions["catalog_service"].client.configured else "not_configured",
    }

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {str(e)}"
        overall_status = "unhealthy"

    if checks["igdb"] != "configured" and overall_status == "healthy":
        overall_status = "degraded"

    checks["status"] = overall_status
    return jsonify(checks), 200 if overall_status != "unhealthy" else 503


@system_bp.route("/cache", methods=["GET"])
@login_required
@handle_api_errors
def cache_stats_api():
    return success_response(data=current_app.extensions["catalog_cache"].stats())


@system_bp.route("/cache/clear", methods=["POST"])
@login_required
@handle_api_errors
def clear_cache_api():
    removed = current_app.extensions["catalog_cache"].clear()
    return success_response(data={"removed": removed}, message="Catalog cache cleared.")
