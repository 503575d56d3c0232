import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging

from app.api.v1.router import router as api_v1_router
from app.core.exceptions import (
    NotAuthenticatedError,
    NotificationNotFoundError,
    OrderCreationError,
    OutcomeRecordingError,
    SweepQueryError,
    TaskNotFoundError,
)
from app.core.config import settings as app_settings
from app.core.rate_limit import limiter
from app.services.escalation_sweep import start_escalation_sweep_loop
from app.core.database import AsyncSessionLocal

# Configure logging
logging.basicConfig(level=app_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application-level background tasks."""
    if not app_settings.SWEEP_ENABLED:
        logger.info("Escalation sweep loop disabled")
        yield
        return

    from app.core.cache import CacheService
    from app.dependencies import get_redis_client

    redis_client = await get_redis_client()
    cache = CacheService(redis_client=redis_client)
    sweep_task = asyncio.create_task(
        start_escalation_sweep_loop(AsyncSessionLocal, cache=cache)
    )
    logger.info("Background escalation sweep task scheduled")
    yield
    # Shutdown: cancel the background task
    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        logger.info("Background escalation sweep task stopped")
    if redis_client is not None:
        await redis_client.aclose()


app = FastAPI(
    title="DualLine Operations",
    description="Field-sales follow-up tasks, visit outcomes and overdue escalation",
    version="0.1.0",
    lifespan=lifespan,
)

# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.exception_handler(TaskNotFoundError)
async def task_not_found_handler(request: Request, exc: TaskNotFoundError):
    logger.warning("Task not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "task_not_found"},
    )


@app.exception_handler(NotificationNotFoundError)
async def notification_not_found_handler(
    request: Request, exc: NotificationNotFoundError
):
    logger.warning("Notification not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "notification_not_found"},
    )


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    logger.warning("Unauthenticated request to %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=401,
        content={"detail": exc.detail, "type": "not_authenticated"},
    )


@app.exception_handler(OrderCreationError)
async def order_creation_handler(request: Request, exc: OrderCreationError):
    logger.error("Order creation failed: %s", exc.detail)
    return JSONResponse(
        status_code=500,
        content={"detail": exc.detail, "type": "order_creation_failed"},
    )


@app.exception_handler(OutcomeRecordingError)
async def outcome_recording_handler(request: Request, exc: OutcomeRecordingError):
    logger.error("Outcome recording failed: %s", exc.detail)
    return JSONResponse(
        status_code=500,
        content={"detail": exc.detail, "type": "outcome_recording_failed"},
    )


@app.exception_handler(SweepQueryError)
async def sweep_query_handler(request: Request, exc: SweepQueryError):
    # The scheduler reads a bare {"error": ...} body
    logger.error("Escalation sweep failed: %s", exc.detail)
    return JSONResponse(status_code=500, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_encoder(exc.errors()),
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected internal error occurred. Please try again later.",
            "type": "internal_server_error",
        },
    )
