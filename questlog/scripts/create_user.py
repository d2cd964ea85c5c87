import argparse
import logging
import sys

from questlog.app import create_app
from questlog.auth import create_user_with_token

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def issue_token(username, display_name=None, email=None, token_name="default"):
    """Create the user if needed and print a new API token for it."""
    logger.info(f"Issuing API token for user: {username}")

    with create_app().app_context():
        try:
            user, token = create_user_with_token(username, display_name=display_name, email=email,
                                                 token_name=token_name)
        except Exception as e:
            logger.error(f"Failed to issue token: {e}")
            return None

    logger.info(f"Token issued for user id {user.id}.")
    return token


def main():
    parser = argparse.ArgumentParser(description="Create a user and issue an API token")
    parser.add_argument("username", help="Login name of the user")
    parser.add_argument("--display-name", help="Name shown in the UI (24 characters max)")
    parser.add_argument("--email", help="Contact e-mail")
    parser.add_argument("--token-name", default="default", help="Label stored with the token")

    args = parser.parse_args()

    token = issue_token(args.username, args.display_name, args.email, args.token_name)
    if token:
        print(token)
        sys.exit(0)
    else:
        print("FAILURE")
        sys.exit(1)


if __name__ == "__main__":
    main()
