import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.dependencies import get_token_cipher
from app.core.security import TokenCipher
from app.auth_service import crud_user, schemas
from app.auth_service.auth_bearer import get_current_user_id

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/token", response_model=schemas.UserTokenStored)
async def store_user_token(
    token_in: schemas.UserTokenStore,
    db: Session = Depends(get_db),
    cipher: Optional[TokenCipher] = Depends(get_token_cipher),
    user_id: str = Depends(get_current_user_id),
):
    """Mã hóa và lưu GitHub token của user (upsert theo GitHub user id)."""
    if not token_in.token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing token in request body")

    if cipher is None:
        logger.error(f"Cannot store token for user {user_id}: encryption is not configured.")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to store token")

    encrypted_token = cipher.encrypt(token_in.token)
    try:
        db_user = crud_user.upsert_user_token(db, user_id=user_id, encrypted_token=encrypted_token, username=token_in.username)
    except Exception as e:
        logger.error(f"Error storing user token for user {user_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to store token")

    logger.info(f"Stored encrypted GitHub token for user {user_id}.")
    return {"message": "Token stored securely", "user_id": db_user.id}


@router.delete("/token", response_model=schemas.MessageResponse)
async def delete_user_token(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        crud_user.clear_user_token(db, user_id=user_id)
    except Exception as e:
        logger.error(f"Error deleting user token for user {user_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete token")

    logger.info(f"Removed stored GitHub token for user {user_id}.")
    return {"message": "Token removed"}
