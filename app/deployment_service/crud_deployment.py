from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import App, Deployment, DeploymentStatus


def create_deployment(db: Session, app_id: str) -> Deployment:
    """
    Tạo một bản ghi Deployment mới ở trạng thái QUEUED.
    """
    db_deployment = Deployment(app_id=app_id, status=DeploymentStatus.QUEUED.value)
    db.add(db_deployment)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_deployment)
    return db_deployment


def prune_deployments(db: Session, app_id: str, keep: int) -> int:
    """
    Xóa mọi deployment của app trừ `keep` bản ghi được tạo gần nhất.
    Trả về số bản ghi đã xóa.
    """
    newest_ids = (
        select(Deployment.id)
        .where(Deployment.app_id == app_id)
        .order_by(Deployment.created_at.desc())
        .limit(keep)
    )
    try:
        deleted = (
            db.query(Deployment)
            .filter(Deployment.app_id == app_id, Deployment.id.not_in(newest_ids))
            .delete(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return deleted


def get_deployment_for_user(db: Session, deployment_id: str, user_id: str) -> Deployment | None:
    """
    Lấy deployment chỉ khi app của nó thuộc về user_id (tránh dò deployment id của tenant khác).
    """
    return (
        db.query(Deployment)
        .join(App, Deployment.app_id == App.id)
        .filter(Deployment.id == deployment_id, App.user_id == user_id)
        .first()
    )


def update_deployment_status(
    db: Session,
    deployment_id: str,
    status: Optional[str] = None,
    url: Optional[str] = None,
) -> Deployment | None:
    """
    Coalescing update: status/url chỉ được ghi khi có giá trị, updated_at luôn được làm mới.
    Không kiểm tra thứ tự chuyển trạng thái: callback sau ghi đè callback trước.
    """
    values = {Deployment.updated_at: datetime.now(timezone.utc)}
    if status is not None:
        values[Deployment.status] = status
    if url is not None:
        values[Deployment.url] = url

    try:
        updated = (
            db.query(Deployment)
            .filter(Deployment.id == deployment_id)
            .update(values, synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    if not updated:
        return None
    return db.query(Deployment).filter(Deployment.id == deployment_id).first()


def has_successful_deployment(db: Session, app_id: str) -> bool:
    """True nếu app từng deploy thành công, tức là có thể đang tồn tại resource trên cloud."""
    return (
        db.query(Deployment.id)
        .filter(Deployment.app_id == app_id, Deployment.status == DeploymentStatus.SUCCESS.value)
        .first()
        is not None
    )
