# control-plane-api/app/deployment_service/__init__.py
from . import crud_deployment
from . import schemas
from . import orchestrator
from .api import router as deployment_router

__all__ = ["crud_deployment", "schemas", "orchestrator", "deployment_router"]
