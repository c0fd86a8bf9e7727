import logging
from typing import Optional

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.core.security import TokenCipher, EncryptionKeyError

logger = logging.getLogger(__name__)


def get_token_cipher(settings: Settings = Depends(get_settings)) -> Optional[TokenCipher]:
    """
    Tạo TokenCipher từ TOKEN_ENCRYPTION_KEY. Trả về None nếu key thiếu hoặc sai độ dài:
    endpoint lưu token sẽ từ chối (500), còn deploy thì tiếp tục không có token.
    """
    try:
        return TokenCipher(settings.TOKEN_ENCRYPTION_KEY)
    except EncryptionKeyError as e:
        logger.critical(f"Token cipher unavailable: {e}")
        return None
