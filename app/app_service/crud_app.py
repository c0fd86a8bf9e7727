import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import App, Deployment
from app.app_service.schemas import AppCreate

logger = logging.getLogger(__name__)

AppRow = Tuple[App, Optional[str], Optional[str]] # (app, last_status, last_url)


def _latest_deployment_value(column):
    """Correlated subquery: `column` of the most recently created deployment of App."""
    return (
        select(column)
        .where(Deployment.app_id == App.id)
        .order_by(Deployment.created_at.desc())
        .limit(1)
        .correlate(App)
        .scalar_subquery()
    )


def _app_with_last_deployment_query(db: Session):
    return db.query(
        App,
        _latest_deployment_value(Deployment.status).label("last_status"),
        _latest_deployment_value(Deployment.url).label("last_url"),
    )


def get_apps_by_user(db: Session, user_id: str) -> List[AppRow]:
    """
    Lấy tất cả app của một user (mới nhất trước), kèm status/url của deployment gần nhất.
    """
    rows = (
        _app_with_last_deployment_query(db)
        .filter(App.user_id == user_id)
        .order_by(App.created_at.desc())
        .all()
    )
    return [tuple(row) for row in rows]


def get_app_view(db: Session, app_id: str, user_id: str) -> AppRow | None:
    row = (
        _app_with_last_deployment_query(db)
        .filter(App.id == app_id, App.user_id == user_id)
        .first()
    )
    return tuple(row) if row else None


def get_app_by_id(db: Session, app_id: str, user_id: str) -> App | None:
    """
    Lấy một app theo ID, đảm bảo app đó thuộc về user_id được cung cấp.
    """
    return db.query(App).filter(App.id == app_id, App.user_id == user_id).first()


def create_app(db: Session, app_in: AppCreate, user_id: str) -> App:
    db_app = App(
        name=app_in.name,
        repo_url=app_in.repo_url,
        branch=app_in.branch,
        env_vars=dict(app_in.env_vars),
        user_id=user_id,
    )
    db.add(db_app)
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Exception creating app '{app_in.name}' for user {user_id}.", exc_info=True)
        raise
    db.refresh(db_app)
    logger.info(f"App '{db_app.name}' (ID: {db_app.id}) created for user {user_id} from repo {db_app.repo_url}@{db_app.branch}.")
    return db_app


def update_app(db: Session, app_id: str, user_id: str, changes: Dict[str, Any]) -> App | None:
    """
    Ghi các field trong `changes` bằng một câu UPDATE có tham số, scope theo (id, user_id).
    Tên cột là tập cố định do AppUpdate quyết định, không lấy từ client.
    """
    if not changes:
        return get_app_by_id(db, app_id=app_id, user_id=user_id)

    values = {getattr(App, key): value for key, value in changes.items()}
    try:
        updated = (
            db.query(App)
            .filter(App.id == app_id, App.user_id == user_id)
            .update(values, synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Exception updating app ID {app_id}.", exc_info=True)
        raise

    if not updated:
        return None
    logger.info(f"App ID {app_id} updated fields: {sorted(changes)}.")
    return get_app_by_id(db, app_id=app_id, user_id=user_id)


def delete_app(db: Session, app_id: str, user_id: str) -> bool:
    """
    Xóa deployments của app trước (FK), sau đó xóa app. Chỉ user sở hữu mới có thể xóa.
    """
    try:
        db.query(Deployment).filter(Deployment.app_id == app_id).delete(synchronize_session=False)
        deleted = (
            db.query(App)
            .filter(App.id == app_id, App.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return deleted > 0
