"""Metrics and monitoring API endpoints."""

import psutil

from fastapi import APIRouter, HTTPException

from ..models.response import MetricsResponse

router = APIRouter(prefix="/api/v1", tags=["metrics"])

# Import the global registry instance
from ..engine_instance import registry


@router.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Get performance metrics",
    description="Get query, index and memory metrics for the registry"
)
async def get_metrics() -> MetricsResponse:
    """
    Get performance metrics for the registry.

    Failures count invalid numbers and allocation failures across all
    operations.
    """
    try:
        stats = registry.get_stats()
        index_stats = stats["index_stats"]

        memory_usage_mb = psutil.Process().memory_info().rss / (1024 * 1024)

        total_operations = stats["total_adds"] + stats["total_removes"] + stats["total_queries"]
        failures = stats["invalid_arguments"] + stats["allocation_failures"]
        error_rate = failures / total_operations if total_operations > 0 else 0.0

        return MetricsResponse(
            total_queries=stats["total_queries"],
            total_rules=index_stats["forward_index"]["total_rules"],
            total_nodes=index_stats["total_nodes"],
            average_response_time_ms=stats["average_execution_time_ms"],
            error_rate=error_rate,
            memory_usage_mb=memory_usage_mb
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get metrics: {str(e)}"
        )
