"""API endpoints for the phone forward registry."""

from .forward import router as forward_router
from .reverse import router as reverse_router
from .health import router as health_router
from .metrics import router as metrics_router

__all__ = [
    "forward_router",
    "reverse_router",
    "health_router",
    "metrics_router",
]
