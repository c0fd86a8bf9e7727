# control-plane-api/scripts/init_db.py
import logging

from app.core.db import engine, create_tables

# Cấu hình logging cơ bản cho script
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def init_db() -> None:
    """
    Tạo các bảng users, apps, deployments nếu chưa tồn tại.
    Cột apps.env_vars được tạo với default {} (JSONB trên PostgreSQL).
    """
    logger.info(f"Initializing schema on: {engine.url.render_as_string(hide_password=True)}")
    try:
        created = create_tables(engine)
    except Exception as e:
        logger.error(f"Schema initialization failed: {e}", exc_info=True)
        raise

    if created:
        logger.info(f"Created tables: {', '.join(created)}")
    else:
        logger.info("All tables already exist. Nothing to do.")


if __name__ == "__main__":
    # Chạy từ thư mục gốc của repo: python -m scripts.init_db
    init_db()
