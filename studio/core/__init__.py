"""Core configuration and factory components."""

from studio.core.config import Settings, get_settings
from studio.core.factory import ComponentFactory, get_factory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "get_factory",
]
