# control-plane-api/app/models/app_model.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class App(Base):
    __tablename__ = "apps"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    repo_url = Column(String(255), nullable=False) # owner/repo
    branch = Column(String(255), nullable=False, default="main")

    # Không có FK sang users: user chỉ có row khi đã lưu token hoặc qua bootstrap script
    user_id = Column(String(255), nullable=False, index=True)

    env_vars = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict, server_default=text("'{}'"))

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Xóa deployment được làm tường minh trong crud_app.delete_app (trước khi xóa app)
    deployments = relationship("Deployment", back_populates="app", passive_deletes=True)

    def __repr__(self):
        return f"<App(id={self.id}, repo_url='{self.repo_url}', user_id={self.user_id})>"
