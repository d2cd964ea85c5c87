"""
QuestLog - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class QuestLogException(Exception):
    """Base exception for QuestLog"""
    status_code = 400

    def __init__(self, message: str, code: str = "QUESTLOG_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'success': False,
            'code': self.code,
            'message': self.message
        }


class ValidationException(QuestLogException):
    """Validation-related exceptions"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")
        logger.warning(f"Validation error: {message}")


class NotFoundException(QuestLogException):
    """Requested resource does not exist"""
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, code="NOT_FOUND")


class ConflictException(QuestLogException):
    """Resource already exists"""
    status_code = 409

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message, code="CONFLICT")


class AuthenticationException(QuestLogException):
    """Authentication-related exceptions"""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHORIZED")
        logger.warning(f"Authentication error: {message}")


class UpstreamException(QuestLogException):
    """Base for failures reported by the IGDB / Twitch services.

    ``body`` holds the upstream response body (parsed JSON when possible).
    """
    status_code = 502

    def __init__(self, message: str, body=None, status=None, code: str = "UPSTREAM_ERROR"):
        super().__init__(message, code=code)
        self.body = body
        self.status = status
        logger.error(f"Upstream error: {message}")


class IGDBAuthException(UpstreamException):
    """Twitch token request rejected"""

    def __init__(self, message: str, body=None, status=None):
        super().__init__(message, body=body, status=status, code="UPSTREAM_AUTH_ERROR")


class IGDBQueryException(UpstreamException):
    """IGDB query rejected (malformed query, rate limit, ...)"""

    def __init__(self, message: str, body=None, status=None):
        super().__init__(message, body=body, status=status, code="UPSTREAM_QUERY_ERROR")


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'success': False,
            'code': e.name.upper().replace(' ', '_'),
            'message': e.description
        }), e.code

    @app.errorhandler(QuestLogException)
    def handle_questlog_exception(e):
        """Handle QuestLog custom exceptions"""
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'code': 'INTERNAL_ERROR',
            'message': 'An unexpected error occurred'
        }), 500
