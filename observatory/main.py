"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from observatory.api.middleware import RequestContextMiddleware
from observatory.api.routes import api_router
from observatory.core.errors import ObservabilityError, StoreFailure
from observatory.logging_config import setup_logging
from observatory.persistence.database import dispose_engine
from observatory.settings import settings
from observatory.workers import scheduled_checks_worker

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    if not settings.is_backend_configured:
        logger.warning("DATABASE_URL is not set; storage endpoints will return 500")
    yield
    # Shutdown
    await dispose_engine()


# Create FastAPI app
app = FastAPI(
    title="Observatory API",
    description="Service health probing, error logs, metrics, and alert incidents",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestContextMiddleware)


@app.exception_handler(ObservabilityError)
async def observability_error_handler(request: Request, exc: ObservabilityError) -> JSONResponse:
    """Map domain errors to their status code with a plain error body."""
    if isinstance(exc, StoreFailure):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed query parameters as 400."""
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": problems or "Invalid request"})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Log and report data store failures as 500."""
    logger.error(
        f"Database error on {request.method} {request.url.path}: {type(exc).__name__}",
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Database operation failed"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all so unexpected failures still return the plain error body."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)

# Include worker routes (for the cron scheduler)
app.include_router(scheduled_checks_worker.router, prefix="/workers", tags=["workers"])


@app.get("/health")
async def health_check():
    """Liveness endpoint for the hosting platform."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Observatory API",
        "version": "0.1.0",
        "docs": "/docs",
    }
