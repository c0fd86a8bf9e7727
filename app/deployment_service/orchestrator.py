"""Deployment lifecycle: resolve credentials, queue, prune, and dispatch to GitHub Actions.

A deployment is created in QUEUED and later overwritten by whatever the CI
callback reports (see ``crud_deployment.update_deployment_status``). Provisioning
itself happens in the platform's own workflows; this module only triggers them.
"""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.best_effort import best_effort
from app.core.security import TokenCipher, EncryptionKeyError
from app.common.github_client import GitHubAPIClient
from app.auth_service import crud_user
from app.app_service import crud_app
from app.deployment_service import crud_deployment
from app.models import Deployment

logger = logging.getLogger(__name__)


def resolve_stored_token(db: Session, cipher: Optional[TokenCipher], user_id: str) -> str:
    """
    Giải mã GitHub token đã lưu của user. Lỗi (lookup, giải mã, thiếu key) chỉ được log:
    repo public vẫn deploy được mà không cần token.
    """
    token = ""
    with best_effort("retrieve stored GitHub token for user %s", user_id, log=logger) as lookup:
        db_user = crud_user.get_user_by_id(db, user_id)
        if db_user and db_user.encrypted_token:
            if cipher is None:
                raise EncryptionKeyError("Encryption key not configured")
            token = cipher.decrypt(db_user.encrypted_token)
    if lookup.failed:
        db.rollback()
    return token


async def dispatch_workflow(settings: Settings, workflow_id: str, inputs: Dict[str, Any]) -> bool:
    try:
        client = GitHubAPIClient(settings.GITHUB_TOKEN, timeout=settings.GITHUB_API_TIMEOUT)
    except ValueError as e:
        logger.error(f"Cannot dispatch workflow '{workflow_id}': {e}")
        return False
    return await client.create_workflow_dispatch(
        owner=settings.GITHUB_REPO_OWNER,
        repo=settings.GITHUB_REPO_NAME,
        workflow_id=workflow_id,
        ref=settings.WORKFLOW_REF,
        inputs=inputs,
    )


async def request_deploy(
    db: Session,
    settings: Settings,
    cipher: Optional[TokenCipher],
    app_id: str,
    user_id: str,
    fallback_token: Optional[str] = None,
) -> Deployment:
    """
    Tạo deployment QUEUED và trigger workflow deploy.

    Raises HTTPException 404 nếu app không tồn tại hoặc không thuộc về user, 500 nếu
    chưa cấu hình repo CI hoặc dispatch thất bại. Ở cả hai trường hợp 500, bản ghi
    QUEUED vẫn được giữ lại (không rollback).
    """
    db_app = crud_app.get_app_by_id(db, app_id=app_id, user_id=user_id)
    if not db_app:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="App not found")

    repo_token = resolve_stored_token(db, cipher, user_id)
    if not repo_token:
        # Backward compatibility: token gửi kèm header X-Github-Token
        repo_token = fallback_token or ""

    deployment = crud_deployment.create_deployment(db, app_id=db_app.id)
    deployment_id = deployment.id
    logger.info(f"Deployment {deployment_id} queued for app {db_app.id} ({db_app.repo_url}@{db_app.branch}).")

    with best_effort("cleanup old deployments for app %s", db_app.id, log=logger):
        pruned = crud_deployment.prune_deployments(db, app_id=db_app.id, keep=settings.DEPLOYMENT_RETENTION)
        if pruned:
            logger.info(f"Pruned {pruned} old deployment(s) for app {db_app.id}.")

    if not settings.ci_target_configured:
        logger.critical("GITHUB_REPO_OWNER and GITHUB_REPO_NAME must be set to dispatch deployments.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error: GitHub repository not configured",
        )

    inputs = {
        "app_id": db_app.id,
        "repo_url": db_app.repo_url,
        "branch": db_app.branch,
        "deployment_id": deployment_id,
        "env_vars": json.dumps(db_app.env_vars or {}),
        "user_repo_token": repo_token,
    }
    dispatched = await dispatch_workflow(settings, settings.DEPLOY_WORKFLOW_ID, inputs)
    if not dispatched:
        logger.error(f"Failed to trigger deploy workflow for deployment {deployment_id}; it stays QUEUED.")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to trigger deployment")

    return deployment


async def signal_teardown(db: Session, settings: Settings, app_id: str) -> bool:
    """
    Trigger workflow destroy nếu app từng deploy thành công (resource cloud có thể còn tồn tại).
    Best-effort: lỗi không được chặn việc xóa app, resource có thể dọn thủ công sau.
    Trả về True nếu workflow đã được trigger.
    """
    if not crud_deployment.has_successful_deployment(db, app_id):
        return False
    if not settings.ci_target_configured:
        logger.warning(f"App {app_id} has deployed resources but the CI repository is not configured; skipping destroy workflow.")
        return False

    dispatched = False
    with best_effort("trigger destroy workflow for app %s", app_id, log=logger):
        dispatched = await dispatch_workflow(settings, settings.DESTROY_WORKFLOW_ID, {"app_id": app_id})
    if dispatched:
        logger.info(f"Triggered destroy workflow for app {app_id}")
    return dispatched
