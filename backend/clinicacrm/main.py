"""
Clinica CRM Backend - FastAPI Application Entry Point

Lead management API for medical clinics: cases, notes, CSV export,
dialer feed, phone lookup for call-center screen-pops and API keys for
machine callers.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .core.config import settings
from .core.database import check_db_connection, engine
from .core.exceptions import ClinicCRMError
from .schemas.common import ErrorResponse
from .api import (
    health_router,
    auth_router,
    cases_router,
    notes_router,
    lookup_router,
    export_router,
    dialer_router,
    api_keys_router,
)


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Performance Monitoring Middleware
# =============================================================================

class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track API response times and log slow requests.

    Logs warnings for requests exceeding 500ms.
    Adds X-Response-Time header to all responses.
    """

    SLOW_REQUEST_THRESHOLD_MS = 500

    async def dispatch(self, request: Request, call_next):
        """Process request with timing."""
        start_time = time.time()

        response = await call_next(request)

        process_time_ms = (time.time() - start_time) * 1000
        response.headers["X-Response-Time"] = f"{process_time_ms:.2f}ms"

        if process_time_ms > self.SLOW_REQUEST_THRESHOLD_MS:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {process_time_ms:.2f}ms"
            )

        if settings.debug:
            logger.debug(
                f"{request.method} {request.url.path} - {process_time_ms:.2f}ms"
            )

        return response


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Refuses to start in production with the development JWT secret.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment})")

    if settings.secret_key == "dev-secret-key-change-in-production":
        if settings.is_production:
            logger.critical("SECRET_KEY still uses the development default. Refusing to start.")
            sys.exit(1)
        logger.warning("Dev-default SECRET_KEY in use; set SECRET_KEY before deploying.")

    if not check_db_connection():
        logger.warning("Database is not reachable at startup")

    yield

    logger.info("Shutting down...")
    engine.dispose()


# =============================================================================
# Exception Handlers
# =============================================================================

def _error(status_code: int, error: str, message: str, details=None, headers=None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def clinic_error_handler(request: Request, exc: ClinicCRMError) -> JSONResponse:
    """Render domain errors (validation, not found, authorization)."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _error(exc.status_code, exc.error_code, exc.message, exc.details, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and query parameters are validation errors (400)."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return _error(
        status.HTTP_400_BAD_REQUEST,
        "validation_error",
        "Invalid request data",
        {"fields": fields},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = "internal_error" if exc.status_code >= 500 else "http_error"
    return _error(exc.status_code, error, str(exc.detail), headers=getattr(exc, "headers", None))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unhandled exceptions.

    Logs error and returns generic message (never expose internals).
    """
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {type(exc).__name__}", exc_info=exc)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred. Please try again later.",
    )


# =============================================================================
# Application Factory
# =============================================================================

def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Lead management API for medical clinics.",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(PerformanceMonitoringMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Response-Time", "Content-Disposition"],
    )

    app.add_exception_handler(ClinicCRMError, clinic_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Register routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(cases_router)
    app.include_router(notes_router)
    app.include_router(lookup_router)
    app.include_router(export_router)
    app.include_router(dialer_router)
    app.include_router(api_keys_router)

    return app


app = create_application()


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict:
    """
    Root endpoint returning API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs" if settings.is_development else "disabled",
    }


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clinicacrm.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
