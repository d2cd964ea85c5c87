"""
API Response Utilities - Standardized error handling and responses
"""

from flask import jsonify
from functools import wraps
import logging

from questlog.exceptions import QuestLogException

logger = logging.getLogger(__name__)


# API Error Codes
class ErrorCode:
    SUCCESS = "SUCCESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"


DEFAULT_MESSAGES = {
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.VALIDATION_ERROR: "Invalid request parameters",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred",
    ErrorCode.UNAUTHORIZED: "Authentication required",
    ErrorCode.CONFLICT: "Resource conflict",
}


def success_response(data=None, message=None, status_code=200):
    """
    Standard success response format for API endpoints
    """
    response = {"code": ErrorCode.SUCCESS, "success": True}

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    return jsonify(response), status_code


def error_response(error_code=ErrorCode.INTERNAL_ERROR, message=None, details=None, status_code=400):
    """
    Standard error response format for API endpoints
    """
    response = {"code": error_code, "success": False}
    response["message"] = message or DEFAULT_MESSAGES.get(error_code, "Request failed")

    if details:
        response["details"] = details

    if error_code == ErrorCode.INTERNAL_ERROR:
        logger.error(f"{error_code}: {message} | Details: {details}")

    return jsonify(response), status_code


def handle_api_errors(f):
    """
    Decorator to standardize error handling for API endpoints
    Automatically catches exceptions and returns consistent error responses
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except QuestLogException as e:
            return error_response(e.code, message=e.message, status_code=e.status_code)
        except ValueError as e:
            return error_response(ErrorCode.VALIDATION_ERROR, message=str(e), status_code=400)
        except KeyError as e:
            return error_response(
                ErrorCode.VALIDATION_ERROR, message=f"Missing required parameter: {str(e)}", status_code=400
            )
        except Exception as e:
            logger.error(f"Unhandled exception in {f.__name__}: {e}", exc_info=True)
            return error_response(ErrorCode.INTERNAL_ERROR, status_code=500)

    return wrapper


def validation_error_response(field, message):
    """
    Convenience function for validation errors
    """
    return error_response(
        ErrorCode.VALIDATION_ERROR,
        message=f"Validation failed for field: {field}",
        details={"field": field, "error": message},
        status_code=400,
    )
