"""
Grant the admin role to an email address, creating the account if needed.
Run: python -m scripts.setup_admin admin@company.com
"""
import sys
import os
import argparse

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import SessionLocal
from app.db.init_db import init_db
from app.db.models.app_user import Role
from app.services.identity_service import set_role, normalize_email
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_user_admin(email: str) -> bool:
    """Create or update the user with ``email`` so that they are an admin."""
    db = SessionLocal()
    try:
        app_user = set_role(db, normalize_email(email), Role.ADMIN)
        logger.info(f"User {email} is now an admin (profile ID: {app_user.id})")
        return True
    except Exception as e:
        logger.error(f"Error updating user: {e}", exc_info=True)
        return False
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Grant the admin role to a user")
    parser.add_argument("email", help="Email address of the admin")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables first")
    args = parser.parse_args(argv)

    if args.init_db:
        init_db()

    if make_user_admin(args.email):
        print(f"\n[SUCCESS] {args.email} is now an admin. Sign in with a magic link to continue.")
        return 0

    print(f"\n[ERROR] Failed to set up admin {args.email}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
