import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.db import get_db
from app.core.dependencies import get_token_cipher
from app.core.security import TokenCipher
from app.auth_service.auth_bearer import get_current_user_id, verify_deployment_secret
from app.deployment_service import crud_deployment, orchestrator
from app.deployment_service import schemas as deployment_schemas

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/apps/{app_id}/deploy",
    response_model=deployment_schemas.DeployAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue a deployment and trigger the deploy workflow",
)
async def deploy_app(
    app_id: str,
    x_github_token: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    cipher: Optional[TokenCipher] = Depends(get_token_cipher),
    user_id: str = Depends(get_current_user_id),
):
    logger.info(f"User {user_id} requesting deployment of app {app_id}")
    deployment = await orchestrator.request_deploy(
        db,
        settings=settings,
        cipher=cipher,
        app_id=app_id,
        user_id=user_id,
        fallback_token=x_github_token,
    )
    return {"message": "Deployment queued", "deployment_id": deployment.id}


@router.get("/deployments/{deployment_id}", response_model=deployment_schemas.DeploymentPublic)
async def read_deployment(
    deployment_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    db_deployment = crud_deployment.get_deployment_for_user(db, deployment_id=deployment_id, user_id=user_id)
    if db_deployment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deployment not found")
    return db_deployment


@router.patch(
    "/deployments/{deployment_id}",
    response_model=deployment_schemas.DeploymentPublic,
    dependencies=[Depends(verify_deployment_secret)],
    summary="Deployment status callback (GitHub Actions)",
)
async def update_deployment(
    deployment_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    # Body chỉ được đọc sau khi secret đã được xác thực (qua dependency)
    raw_body = await request.body()
    try:
        payload = json.loads(raw_body) if raw_body else {}
        status_in = deployment_schemas.DeploymentStatusUpdate.model_validate(payload)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Invalid deployment callback body for {deployment_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request body")

    db_deployment = crud_deployment.update_deployment_status(
        db, deployment_id=deployment_id, status=status_in.status, url=status_in.url
    )
    if db_deployment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deployment not found")

    logger.info(f"Deployment {deployment_id} updated: status={db_deployment.status}, url={db_deployment.url}")
    return db_deployment
