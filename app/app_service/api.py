import json
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.db import get_db
from app.core.errors import format_validation_errors
from app.auth_service.auth_bearer import get_current_user_id
from app.app_service import crud_app
from app.app_service import schemas as app_schemas
from app.deployment_service import orchestrator

router = APIRouter()
logger = logging.getLogger(__name__)

APP_NOT_FOUND = "App not found"


@router.get("", response_model=List[app_schemas.AppPublic])
async def read_user_apps(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    rows = crud_app.get_apps_by_user(db, user_id=user_id)
    logger.info(f"Found {len(rows)} apps for user {user_id}.")
    return [app_schemas.AppPublic.from_row(*row) for row in rows]


@router.post("", response_model=app_schemas.AppPublic, status_code=status.HTTP_201_CREATED)
async def create_new_app(
    app_in: app_schemas.AppCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    logger.info(f"User {user_id} creating app '{app_in.name}' for repo {app_in.repo_url}")
    try:
        db_app = crud_app.create_app(db, app_in=app_in, user_id=user_id)
    except Exception:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create app")
    return app_schemas.AppPublic.from_row(db_app)


@router.get("/{app_id}", response_model=app_schemas.AppPublic)
async def read_app_details(
    app_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    row = crud_app.get_app_view(db, app_id=app_id, user_id=user_id)
    if row is None:
        logger.warning(f"App ID {app_id} not found or not owned by user {user_id}.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=APP_NOT_FOUND)
    return app_schemas.AppPublic.from_row(*row)


@router.patch("/{app_id}", response_model=app_schemas.AppPublic)
async def update_existing_app(
    app_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    # Kiểm tra quyền sở hữu TRƯỚC khi đọc body: user khác luôn nhận 404, kể cả khi body sai
    if crud_app.get_app_by_id(db, app_id=app_id, user_id=user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=APP_NOT_FOUND)

    raw_body = await request.body()
    try:
        payload = json.loads(raw_body) if raw_body else {}
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")
    try:
        app_in = app_schemas.AppUpdate.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=format_validation_errors(e.errors()))

    changes = app_in.changes()
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    logger.info(f"User {user_id} updating app ID {app_id} with fields: {sorted(changes)}")
    updated_app = crud_app.update_app(db, app_id=app_id, user_id=user_id, changes=changes)
    if updated_app is None:
        # App bị xóa giữa lúc kiểm tra và lúc update
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=APP_NOT_FOUND)
    return app_schemas.AppPublic.from_row(updated_app)


@router.delete("/{app_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_app(
    app_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user_id: str = Depends(get_current_user_id),
):
    logger.info(f"User {user_id} attempting to delete app ID: {app_id}")
    if crud_app.get_app_by_id(db, app_id=app_id, user_id=user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=APP_NOT_FOUND)

    # Trigger destroy workflow TRƯỚC KHI xóa deployments (cần biết app đã từng deploy thành công chưa)
    await orchestrator.signal_teardown(db, settings=settings, app_id=app_id)

    crud_app.delete_app(db, app_id=app_id, user_id=user_id)
    logger.info(f"App ID {app_id} and its deployments deleted by user {user_id}.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
