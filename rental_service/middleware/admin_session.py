"""
Rental Service — Admin session middleware
Every /api/admin route requires the X-Admin-Session header to carry the
configured admin token; anything else gets a 401.
"""
import hmac
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from rental_service.core.config import get_settings

settings = get_settings()

ADMIN_PREFIX = "/api/admin"
ADMIN_HEADER = "X-Admin-Session"


class AdminSessionMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS" or not request.url.path.startswith(ADMIN_PREFIX):
            return await call_next(request)

        token = request.headers.get(ADMIN_HEADER, "")
        if not token or not hmac.compare_digest(token, settings.ADMIN_SESSION_TOKEN):
            return JSONResponse(
                status_code=401,
                content={"detail": f"Admin session required. Send the {ADMIN_HEADER} header."},
            )

        return await call_next(request)
