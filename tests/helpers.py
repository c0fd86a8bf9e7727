# control-plane-api/tests/helpers.py
# Hạ tầng dùng chung cho test: SQLite in-memory + Settings/TokenCipher cố định
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.security import TokenCipher
from app.core.db import create_tables

TEST_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
TEST_DEPLOYMENT_SECRET = "test-deployment-secret"


def make_session_factory():
    """Một DB SQLite in-memory riêng cho mỗi test (StaticPool: mọi session dùng chung một connection)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "TOKEN_ENCRYPTION_KEY": TEST_ENCRYPTION_KEY,
        "DEPLOYMENT_SECRET": TEST_DEPLOYMENT_SECRET,
        "GITHUB_REPO_OWNER": "platform-org",
        "GITHUB_REPO_NAME": "platform-infra",
        "GITHUB_TOKEN": "platform-token",
        "ALLOWED_ORIGINS": "http://localhost:3000,https://dashboard.example.com",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_cipher() -> TokenCipher:
    return TokenCipher(TEST_ENCRYPTION_KEY)


def override_get_db(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()
    return _get_db
