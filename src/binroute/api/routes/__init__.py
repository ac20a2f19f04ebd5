"""Route group exports."""

from . import collector, health, routing, supervisor

__all__ = ["collector", "health", "routing", "supervisor"]
