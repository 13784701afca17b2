"""Main FastAPI application for the Phone Forward Registry."""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from .api import (
    forward_router,
    reverse_router,
    health_router,
    metrics_router,
)
from .config import get_settings
from .engine_instance import registry
from .models.response import ErrorResponse

settings = get_settings()

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Phone Forward Registry service", version=settings.app_version)

    if settings.seed_rules:
        loaded = registry.load_rules(settings.seed_rules)
        logger.info(
            "Seed rules loaded",
            total_rules=len(settings.seed_rules),
            accepted_rules=loaded
        )

    yield

    # Shutdown
    registry.clear()
    logger.info("Shutting down Phone Forward Registry service")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Prefix redirection registry for phone numbers",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next) -> Response:
    """Log all HTTP requests."""
    start_time = time.time()

    logger.info(
        "Request started",
        method=request.method,
        url=str(request.url),
        client_ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        "Request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        process_time_ms=round(process_time * 1000, 2)
    )

    return response


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle global exceptions."""
    logger.error(
        "Unhandled exception",
        method=request.method,
        url=str(request.url),
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            message="An unexpected error occurred",
            details={"exception": str(exc)} if settings.debug else None
        ).dict()
    )


# Include API routers
app.include_router(forward_router)
app.include_router(reverse_router)
app.include_router(health_router)
app.include_router(metrics_router)


# Root endpoint
@app.get("/", summary="Root endpoint", description="Get basic information about the API")
async def root() -> dict:
    """Root endpoint with basic API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Prefix redirection registry for phone numbers",
        "docs_url": "/docs",
        "health_url": "/api/v1/health",
        "status": "running"
    }


# API info endpoint
@app.get("/api", summary="API information", description="Get detailed API information")
async def api_info() -> dict:
    """Get detailed API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Prefix redirection registry for phone numbers",
        "endpoints": {
            "add_rule": "POST /api/v1/forwards",
            "list_rules": "GET /api/v1/forwards",
            "remove_rules": "DELETE /api/v1/forwards/{prefix}",
            "forward": "/api/v1/forward/{number}",
            "reverse": "/api/v1/reverse/{number}",
            "consistent_reverse": "/api/v1/reverse/{number}/consistent",
            "health": "/api/v1/health",
            "metrics": "/api/v1/metrics"
        },
        "features": [
            "Longest-prefix redirection",
            "Cascading removal of rules under a prefix",
            "Reverse lookup of candidate numbers",
            "Reverse lookup checked against forward redirection",
            "Numbers over digits, '*' and '#' ('#' must be sent as %23)"
        ],
        "limits": {
            "max_number_length": settings.max_number_length,
            "max_nodes": settings.max_nodes
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "phone_forward.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
        log_level=settings.log_level.lower()
    )
