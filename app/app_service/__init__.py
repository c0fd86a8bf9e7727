# control-plane-api/app/app_service/__init__.py
from . import crud_app
from . import schemas
from . import api
from .api import router as app_router

__all__ = ["crud_app", "schemas", "api", "app_router"]
