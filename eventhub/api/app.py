"""FastAPI application configuration module."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Internal imports
from ..config.environment import IS_PRODUCTION_ENVIRONMENT # Environment must be imported first
from ..config.auth import AuthConfig
from ..config.cors import CORS_CONFIG
from ..utils.logging_config import setup_logging
from ..db import Database, DatabaseConfig
from ..schemas import field_errors
from ..services.errors import ServiceError
from .routes import auth, events, health, users

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    try:
        app.state.db.ensure_tables_exist()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise
    yield
    # Shutdown
    app.state.db.dispose()

async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map service errors to their status code and a user-safe body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body and query validation failures as per-field errors."""
    return JSONResponse(
        status_code=400,
        content={
            "message": "Validation failed",
            "errors": [error.to_dict() for error in field_errors(exc.errors())],
        },
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)

async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})

def create_application(
    database: Optional[Database] = None,
    auth_config: Optional[AuthConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="EventHub API",
        description="API for listing, discovering and managing community events",
        version="1.0.0",
        docs_url=None if IS_PRODUCTION_ENVIRONMENT else '/api/docs',
        redoc_url=None if IS_PRODUCTION_ENVIRONMENT else '/api/redoc',
        lifespan=lifespan
    )
    app.state.db = database or Database(DatabaseConfig())
    app.state.auth_config = auth_config or AuthConfig()

    # Configure CORS
    app.add_middleware(CORSMiddleware, **CORS_CONFIG)

    # Error mapping
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include health check router without prefix
    app.include_router(health.router)

    # Include routers with prefix
    app.include_router(auth.router, prefix="/api")
    app.include_router(events.router, prefix="/api")
    app.include_router(users.router, prefix="/api")

    return app
