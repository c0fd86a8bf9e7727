import logging
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from app.core.config import settings

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> Dict[str, Any]:
    """Tham số create_engine theo dialect. SQLite (dev/test) cần dùng chung connection giữa các thread."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Một session cho mỗi request; commit/rollback do tầng CRUD quyết định."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = engine) -> list[str]:
    """Tạo các bảng còn thiếu (users, apps, deployments). Trả về tên các bảng vừa được tạo."""
    import app.models  # noqa: F401  (đăng ký model vào Base.metadata)

    existing_tables = set(inspect(bind).get_table_names())
    Base.metadata.create_all(bind=bind)
    return sorted(table for table in Base.metadata.tables if table not in existing_tables)


if __name__ == "__main__":
    try:
        with SessionLocal() as session:
            result = session.execute(text("SELECT 1"))
            print("DB Connection Test (SELECT 1):", result.scalar_one())
        print("Database connection successful and SessionLocal is working.")
    except Exception as e:
        print(f"Database connection failed: {e}")
        print(f"Please ensure your database server is reachable at: {engine.url.render_as_string(hide_password=True)}")
