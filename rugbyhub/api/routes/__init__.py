"""API routes."""

from rugbyhub.api.routes import events, health

__all__ = ["events", "health"]
