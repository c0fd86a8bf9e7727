import logging
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "OPTIONS, POST, GET, PATCH, DELETE"
ALLOWED_HEADERS = "Content-Type, Authorization, X-User-Id, X-Deployment-Secret, X-Github-Token"


class AllowListCORSMiddleware(BaseHTTPMiddleware):
    """
    Outermost boundary of the API:

    - answers every OPTIONS preflight with 204;
    - adds CORS headers to every response, errors included. The request Origin is
      echoed back when it is in the allow-list, otherwise the first allowed origin is used;
    - turns any unhandled exception into a generic 500 (message only goes to the log).
    """

    def __init__(self, app, allowed_origins: List[str]):
        super().__init__(app)
        if not allowed_origins:
            raise ValueError("At least one allowed origin is required.")
        self.allowed_origins = allowed_origins

    def cors_headers(self, request: Request) -> Dict[str, str]:
        origin = request.headers.get("origin", "")
        allowed_origin = origin if origin in self.allowed_origins else self.allowed_origins[0]
        return {
            "Access-Control-Allow-Origin": allowed_origin,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Access-Control-Allow-Credentials": "true",
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Chỉ log method + path, không log header (có token/secret)
        logger.info(f"Request: {request.method} {request.url.path}")
        headers = self.cors_headers(request)

        if request.method == "OPTIONS":
            return Response(status_code=204, headers=headers)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}")
            response = JSONResponse(status_code=500, content={"message": "Internal Server Error"})

        response.headers.update(headers)
        return response
