"""
FastAPI Application - Trust Engine
Report intake, moderation queue, sanctions and appeals
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from trust_engine.config import settings
from trust_engine.core.exceptions import install_error_handlers
from trust_engine.core.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)
from trust_engine.services.sweeper import SuspensionSweeper, get_sweeper, set_sweeper
from trust_engine.tasks.queue import close_queue

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    configure_logging()
    logger.info(
        "app_starting",
        environment=settings.ENVIRONMENT,
        sweep_mode=settings.SUSPENSION_SWEEP_MODE,
    )

    if settings.SUSPENSION_SWEEP_MODE == "api":
        sweeper = SuspensionSweeper()
        set_sweeper(sweeper)
        sweeper.start()

    yield

    # Shutdown
    sweeper = get_sweeper()
    if sweeper is not None:
        await sweeper.stop()
        set_sweeper(None)
    await close_queue()
    logger.info("app_shutdown")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Content reporting, moderation queue, sanctions and appeals",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every log line and response with a request ID."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    set_request_context(request_id)
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


install_error_handlers(app)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - API information"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint"""
    return {"status": "healthy"}


# Import and include routers
from trust_engine.api.v1 import router as api_v1_router  # noqa: E402

app.include_router(api_v1_router, prefix=settings.API_V1_STR)
