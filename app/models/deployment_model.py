import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models.app_model import _utcnow


class DeploymentStatus(str, enum.Enum):
    """Known statuses. The column is a plain string: the CI callback may report any value."""
    QUEUED = "QUEUED"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class Deployment(Base):
    __tablename__ = "deployments"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    app_id = Column(String(36), ForeignKey("apps.id"), nullable=False, index=True)

    status = Column(String(50), nullable=False, default=DeploymentStatus.QUEUED.value)
    url = Column(Text, nullable=True) # Được set bởi callback khi deploy thành công

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    app = relationship("App", back_populates="deployments")

    def __repr__(self):
        return f"<Deployment(id={self.id}, app_id={self.app_id}, status='{self.status}')>"
