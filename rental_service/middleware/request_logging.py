"""
Rental Service — API request logging
"""
import logging
import time
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("rental_service.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs `METHOD /api/... STATUS in Nms` for API calls."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if not request.url.path.startswith("/api"):
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s %d in %.0fms", request.method, request.url.path, response.status_code, duration_ms)
        return response
