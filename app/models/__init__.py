# control-plane-api/app/models/__init__.py
from app.core.db import Base

# Import các class model trực tiếp
from .user_model import User
from .app_model import App
from .deployment_model import Deployment, DeploymentStatus


__all__ = [
    "Base",
    "User",
    "App",
    "Deployment",
    "DeploymentStatus",
]
