"""
Request identity: a bearer API token maps to one user.

Sign-up and login flows are handled by the identity provider in front of
this service; here a token is only resolved to its user.
"""
import logging

from flask_login import LoginManager

from questlog.api_responses import ErrorCode, error_response
from questlog.repositories.user_repository import ApiTokenRepository, UserRepository

# Retrieve main logger
logger = logging.getLogger("main")

login_manager = LoginManager()


def check_api_token(request):
    """
    Validate Bearer token from Authorization header.

    Returns:
        (success, error, user)
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer ") or len(auth_header.split(" ")) != 2:
        return False, "Missing or invalid token", None

    token_str = auth_header.split(" ")[1]
    token = ApiTokenRepository.get_by_token(token_str)
    if token:
        try:
            ApiTokenRepository.touch(token)
        except Exception as e:
            logger.warning(f"Could not record token usage: {e}")
        return True, None, token.user

    logger.warning("Rejected request with unknown API token")
    return False, "Invalid token", None


@login_manager.user_loader
def load_user(user_id):
    """Load user for Flask-Login"""
    return UserRepository.get_by_id(int(user_id))


@login_manager.request_loader
def load_user_from_request(request):
    success, _, user = check_api_token(request)
    return user if success else None


@login_manager.unauthorized_handler
def unauthorized_json():
    return error_response(
        error_code=ErrorCode.UNAUTHORIZED,
        message="Authentication required",
        status_code=401,
    )


def create_user_with_token(username, display_name=None, email=None, token_name="default"):
    """Create (or reuse) a user and issue a fresh API token for it"""
    user = UserRepository.get_by_username(username)
    if user is None:
        user = UserRepository.create(username=username, display_name=display_name, email=email)
        logger.info(f"Created user {username}")
    token = ApiTokenRepository.create_for_user(user.id, name=token_name)
    return user, token.token
