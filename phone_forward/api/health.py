"""Health check and monitoring API endpoints."""

import time
from datetime import datetime

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ..models.response import HealthResponse
from ..config import get_settings

router = APIRouter(prefix="/api/v1", tags=["health"])
settings = get_settings()

# Import the global registry instance
from ..engine_instance import registry

# Track application start time
app_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the registry service"
)
async def health_check() -> HealthResponse:
    """
    Perform a health check on the registry service.

    Runs a forward and a reverse query against the live registry.
    """
    try:
        uptime = time.time() - app_start_time

        dependencies = {
            "forward_index": "healthy",
            "reverse_index": "healthy"
        }

        # Query the indexes directly so health checks stay out of the query stats
        index_manager = registry.index_manager

        try:
            if index_manager.get("0").get(0) is None:
                dependencies["forward_index"] = "degraded"
        except Exception:
            dependencies["forward_index"] = "unhealthy"

        try:
            if "0" not in index_manager.reverse_lookup("0"):
                dependencies["reverse_index"] = "degraded"
        except Exception:
            dependencies["reverse_index"] = "unhealthy"

        # Determine overall status
        if all(status == "healthy" for status in dependencies.values()):
            status = "healthy"
        elif any(status == "unhealthy" for status in dependencies.values()):
            status = "unhealthy"
        else:
            status = "degraded"

        return HealthResponse(
            status=status,
            version=settings.app_version,
            uptime=uptime,
            dependencies=dependencies
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Health check failed: {str(e)}"
        )


@router.get(
    "/health/ready",
    summary="Readiness check",
    description="Check if the service is ready to accept requests"
)
async def readiness_check() -> JSONResponse:
    """Check if the registry is initialized and can report statistics."""
    try:
        stats = registry.get_stats()

        return JSONResponse(
            status_code=200,
            content={
                "status": "ready",
                "timestamp": datetime.utcnow().isoformat(),
                "index_stats": stats.get("index_stats", {})
            }
        )

    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "error": str(e),
                "timestamp": datetime.utcnow().isoformat()
            }
        )


@router.get(
    "/health/live",
    summary="Liveness check",
    description="Check if the service is alive and responding"
)
async def liveness_check() -> JSONResponse:
    """Check if the service process is alive."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "alive",
            "timestamp": datetime.utcnow().isoformat(),
            "uptime": time.time() - app_start_time
        }
    )


@router.get(
    "/status",
    summary="Service status",
    description="Get detailed status information about the service"
)
async def service_status() -> JSONResponse:
    """
    Get detailed status information about the service.

    Includes registry statistics and the active configuration.
    """
    try:
        stats = registry.get_stats()

        config_info = {
            "max_nodes": settings.max_nodes,
            "max_number_length": settings.max_number_length,
            "debug": settings.debug
        }

        return JSONResponse(
            status_code=200,
            content={
                "service": {
                    "name": settings.app_name,
                    "version": settings.app_version,
                    "status": "running",
                    "uptime": time.time() - app_start_time,
                    "start_time": datetime.fromtimestamp(app_start_time).isoformat()
                },
                "configuration": config_info,
                "statistics": stats,
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get service status: {str(e)}"
        )
