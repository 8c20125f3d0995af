"""HTTP layer: app factory, dispatcher and response assembly."""

from rugbyhub.api.app import create_app
from rugbyhub.api.dispatcher import RequestDispatcher, RequestPlan

__all__ = ["RequestDispatcher", "RequestPlan", "create_app"]
