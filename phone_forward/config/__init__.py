"""Configuration management for the phone forward registry."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
