"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from rugbyhub.api.dispatcher import RequestDispatcher
from rugbyhub.config import ProxyConfig


def get_dispatcher(request: Request) -> RequestDispatcher:
    """Dispatcher built by the lifespan handler for this app."""
    return request.app.state.dispatcher


def get_config(request: Request) -> ProxyConfig:
    return request.app.state.config
