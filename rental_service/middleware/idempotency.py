"""
Rental Service — Idempotency-Key replay for reservations

A client that resubmits POST /api/rentals with the same Idempotency-Key gets
the first response back instead of a second reservation. While the first
request is still running, a duplicate is answered with 409 so the two can
never both decrement the ledger. 5xx responses are not stored: storage
failures and timeouts stay retryable under the same key.
"""
import json
import logging
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from rental_service.core.config import get_settings
from rental_service.core.redis_client import get_redis

settings = get_settings()
logger = logging.getLogger(__name__)

KEY_HEADER = "Idempotency-Key"
REPLAY_HEADER = "X-Idempotency-Replay"
GUARDED_ROUTES = {("POST", "/api/rentals"), ("POST", "/api/rentals/")}
IN_FLIGHT_TTL_SECONDS = 30


def cache_key_for(path: str, idem_key: str) -> str:
    return f"rental-idem:{path.rstrip('/')}:{idem_key}"


def _replay(idem_key: str, stored: str) -> Response:
    data = json.loads(stored)
    logger.info("Replaying %s response for Idempotency-Key %s", data["status_code"], idem_key)
    return Response(
        content=data["body"],
        status_code=data["status_code"],
        media_type=data.get("content_type"),
        headers={REPLAY_HEADER: "true"},
    )


class IdempotencyMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        idem_key = request.headers.get(KEY_HEADER)
        if not idem_key or (request.method, request.url.path) not in GUARDED_ROUTES:
            return await call_next(request)

        redis = get_redis()
        cache_key = cache_key_for(request.url.path, idem_key)
        lock_key = f"{cache_key}:lock"

        stored = await redis.get(cache_key)
        if stored:
            return _replay(idem_key, stored)

        if not await redis.set(lock_key, "1", nx=True, ex=IN_FLIGHT_TTL_SECONDS):
            logger.warning("Duplicate submit while Idempotency-Key %s is in flight", idem_key)
            return JSONResponse(
                status_code=409,
                content={
                    "detail": "A request with this Idempotency-Key is still being processed.",
                    "error": "IdempotencyConflict",
                },
            )

        try:
            # The first request may have finished between the lookup and the lock
            stored = await redis.get(cache_key)
            if stored:
                return _replay(idem_key, stored)

            response = await call_next(request)
            body = b"".join([chunk async for chunk in response.body_iterator])

            if response.status_code < 500:
                await redis.setex(
                    cache_key,
                    settings.IDEMPOTENCY_KEY_TTL_SECONDS,
                    json.dumps({
                        "status_code": response.status_code,
                        "content_type": response.headers.get("content-type"),
                        "body": body.decode("utf-8", errors="replace"),
                    }),
                )
        finally:
            await redis.delete(lock_key)

        return Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
        )
