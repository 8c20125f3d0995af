"""Health check endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from rugbyhub.api.dependencies import get_config, get_dispatcher
from rugbyhub.api.dispatcher import RequestDispatcher
from rugbyhub.config import VERSION, ProxyConfig

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health status.

    cache carries response hits/misses, league directory hits/misses and the
    store's own counters.
    """

    status: str
    version: str
    mode: str
    cache: dict


@router.get("/health", response_model=HealthResponse)
def health_check(
    config: ProxyConfig = Depends(get_config),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> HealthResponse:
    """Health check endpoint with response cache statistics."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        mode=config.mode,
        cache=dispatcher.cache.stats(),
    )
