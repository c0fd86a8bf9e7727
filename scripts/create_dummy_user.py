# control-plane-api/scripts/create_dummy_user.py
import logging
import sys

from app.core.db import SessionLocal
from app.auth_service import crud_user

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DUMMY_USER_ID = "12345"
DUMMY_USERNAME = "testuser"


def create_dummy_user() -> int:
    """Upsert user test (không có token) để thử API ở local."""
    logger.info("Creating dummy user...")
    try:
        with SessionLocal() as db:
            db_user = crud_user.ensure_user(db, user_id=DUMMY_USER_ID, username=DUMMY_USERNAME)
            logger.info(f"User ID: {db_user.id} ({db_user.username})")
        return 0
    except Exception as e:
        logger.error(f"Error creating user: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(create_dummy_user())
