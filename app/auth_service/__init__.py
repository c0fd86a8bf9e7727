# control-plane-api/app/auth_service/__init__.py

from . import crud_user
from . import schemas
from . import auth_bearer
from .api import router as user_router

__all__ = [
    "user_router",
    "crud_user",
    "schemas",
    "auth_bearer",
]
