"""
Rental Service — FastAPI entrypoint
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from rental_service.core.config import get_settings
from rental_service.core.exceptions import RentalServiceError
from rental_service.core.redis_client import close_redis
from rental_service.db.database import AsyncSessionLocal, engine, Base
from rental_service.middleware.admin_session import AdminSessionMiddleware
from rental_service.middleware.idempotency import IdempotencyMiddleware
from rental_service.middleware.request_logging import RequestLoggingMiddleware
from rental_service.api import admin, health, impact, inventory, products, rentals
from rental_service.seed import seed_catalog

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables (no migration tool; schema follows the models)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.SEED_CATALOG:
        async with AsyncSessionLocal() as session:
            await seed_catalog(session)
    yield
    # Shutdown
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Tableware Rental Service",
    description="Date-indexed inventory ledger and all-or-nothing reservations for tableware rentals.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)


@app.exception_handler(RentalServiceError)
async def rental_service_error_handler(request: Request, exc: RentalServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors()), "error": "ValidationError"},
    )


# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production via env var
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Added last = outermost: request logging sees every response
if settings.IDEMPOTENCY_ENABLED:
    app.add_middleware(IdempotencyMiddleware)
app.add_middleware(AdminSessionMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# ── Prometheus Metrics ────────────────────────────────────────────────────────
if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(products.router)
app.include_router(inventory.router)
app.include_router(rentals.router)
app.include_router(admin.router)
app.include_router(impact.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
