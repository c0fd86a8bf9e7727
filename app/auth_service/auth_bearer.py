import hmac
import logging

from fastapi import Depends, Header, HTTPException, status

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


async def get_current_user_id(
    x_user_id: str | None = Header(None),
) -> str:
    """
    Dependency để lấy user id (GitHub user id) từ header X-User-Id.

    Header này được front-end set sau khi user đã đăng nhập GitHub OAuth.
    Đây không phải là bằng chứng mật mã về danh tính: API tin vào session
    đã được xác thực ở phía front-end.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID",
        )
    return user_id


async def verify_deployment_secret(
    x_deployment_secret: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Xác thực callback từ GitHub Actions bằng shared secret (header X-Deployment-Secret).
    Trust domain này tách biệt hoàn toàn với X-User-Id.
    """
    invalid_secret = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid deployment secret",
    )
    if not settings.DEPLOYMENT_SECRET:
        logger.critical("DEPLOYMENT_SECRET is not configured. Rejecting deployment callback.")
        raise invalid_secret

    if x_deployment_secret is None or not hmac.compare_digest(
        x_deployment_secret.encode("utf-8"), settings.DEPLOYMENT_SECRET.encode("utf-8")
    ):
        logger.warning("Deployment callback rejected: invalid X-Deployment-Secret")
        raise invalid_secret
