"""Global registry instance to avoid circular imports."""

from .core.engine import PhoneForward
from .config import get_settings

# Global registry instance
settings = get_settings()
registry = PhoneForward(max_nodes=settings.max_nodes)
