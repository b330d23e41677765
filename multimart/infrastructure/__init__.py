"""Infrastructure - configuration and logging."""

from multimart.infrastructure.config import Settings, settings
from multimart.infrastructure.logging import configure_logging

__all__ = ["Settings", "configure_logging", "settings"]
