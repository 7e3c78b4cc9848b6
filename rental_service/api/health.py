"""
Rental Service — Health endpoint

Probes the database, and Redis when idempotency is enabled. Any failed probe
turns the response into a 503 "degraded".
"""
import asyncio
from typing import Awaitable, Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from rental_service.core.config import get_settings
from rental_service.core.redis_client import get_redis
from rental_service.db.database import engine

settings = get_settings()
router = APIRouter(tags=["health"])


async def _ping_database() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _ping_redis() -> None:
    await get_redis().ping()


async def _probe(name: str, check: Callable[[], Awaitable[None]], results: dict[str, str]) -> bool:
    try:
        await asyncio.wait_for(check(), timeout=settings.HEALTH_CHECK_TIMEOUT)
    except Exception as e:
        results[name] = f"error: {str(e)[:100]}"
        return False
    results[name] = "ok"
    return True


@router.get("/health")
async def health_check():
    deps: dict[str, str] = {}
    healthy = await _probe("database", _ping_database, deps)
    if settings.IDEMPOTENCY_ENABLED:
        healthy = await _probe("redis", _ping_redis, deps) and healthy

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "degraded",
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "dependencies": deps,
        },
    )
