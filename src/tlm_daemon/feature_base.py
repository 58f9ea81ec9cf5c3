"""
Base class for daemon features (core or optional).

A feature is a piece of the daemon with its own lifecycle, started and stopped
with the FastAPI application, that reports a short health string. Line sources
are features.
"""

from typing import Any, Dict, Optional

DISABLED = "disabled"
UNKNOWN = "unknown"
HEALTHY = "healthy"


class Feature:
    """
    Base class for daemon features.
    Subclass this and implement startup/shutdown and health as needed.
    """

    name: str
    enabled: bool
    core: bool
    config: dict

    def __init__(
        self, name: str, enabled: bool = False, core: bool = False, config: Optional[dict] = None
    ):
        self.name = name
        self.enabled = enabled
        self.core = core
        self.config = config or {}

    async def startup(self):
        """Called on application startup if the feature is enabled."""

    async def shutdown(self):
        """Called on application shutdown if the feature is enabled."""

    @property
    def health(self) -> str:
        if not self.enabled:
            return DISABLED
        return UNKNOWN

    def describe(self) -> Dict[str, Any]:
        """Summary used by the status endpoints and the features WebSocket."""
        return {
            "name": self.name,
            "enabled": self.enabled,
            "core": self.core,
            "config": self.config,
            "health": self.health,
        }
