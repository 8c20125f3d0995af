"""Proxy endpoint - aggregated upcoming events and CORS preflight."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import Response

from rugbyhub.api.dependencies import get_dispatcher
from rugbyhub.api.dispatcher import RequestDispatcher
from rugbyhub.api.responses import preflight_response

router = APIRouter()


@router.api_route("/", methods=["GET", "HEAD"])
async def get_events(
    request: Request,
    background_tasks: BackgroundTasks,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Response:
    """Serve events from cache, or aggregate upstream and cache the result.

    Cache writes run as background tasks: after the reply is sent, but
    before the request is finished.
    """
    return await dispatcher.handle(
        str(request.url), request.query_params, background_tasks.add_task
    )


@router.options("/{full_path:path}")
def preflight(request: Request) -> Response:
    """CORS preflight for any path."""
    return preflight_response(request.headers)
