import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import format_validation_errors
from app.core.middleware import AllowListCORSMiddleware
from app.core.security import TokenCipher, EncryptionKeyError
from app.auth_service.api import router as user_api_router
from app.app_service.api import router as app_api_router
from app.deployment_service.api import router as deployment_api_router


package_logger = logging.getLogger("app")
if not package_logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(levelname)s [%(name)s:%(lineno)s] - %(message)s')
    handler.setFormatter(formatter)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Control Plane API",
    version="0.1.0",
    description="Register GitHub repositories, trigger deployments through GitHub Actions and track their status.",
    debug=settings.DEBUG
)

app.add_middleware(AllowListCORSMiddleware, allowed_origins=settings.allowed_origins_list)

app.include_router(user_api_router, prefix="/user", tags=["User Token"])
app.include_router(app_api_router, prefix="/apps", tags=["Apps"])
app.include_router(deployment_api_router, tags=["Deployments"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Lỗi validate body trả về 400 (không phải 422 mặc định của FastAPI)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": format_validation_errors(exc.errors())},
    )


@app.on_event("startup")
async def on_startup_event():
    logger.info("Application is starting up...")
    for name in settings.missing_required():
        logger.critical(f"CRITICAL: {name} environment variable is not set")
    if settings.TOKEN_ENCRYPTION_KEY:
        try:
            TokenCipher(settings.TOKEN_ENCRYPTION_KEY)
        except EncryptionKeyError as e:
            logger.critical(f"CRITICAL: TOKEN_ENCRYPTION_KEY is invalid: {e}")
    if not settings.GITHUB_TOKEN:
        logger.warning("GITHUB_TOKEN is not set. Workflow dispatch will fail.")


@app.on_event("shutdown")
async def on_shutdown_event():
    logger.info("Application is shutting down...")


@app.get("/", tags=["Health"])
async def health_check():
    return {"message": "Control Plane API is running!"}
