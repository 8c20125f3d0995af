"""Response assembly: JSON bodies, CORS and freshness headers."""

import json
from collections.abc import Mapping

from fastapi.responses import JSONResponse, Response

from rugbyhub.core.types import CachedResponse

ALLOWED_METHODS = "GET, HEAD, OPTIONS"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Allow-Headers": "Content-Type",
}

_PREFLIGHT_HEADERS = ("origin", "access-control-request-method", "access-control-request-headers")


def render_json(payload: dict) -> bytes:
    """Serialize compactly, the same way JSONResponse does."""
    return json.dumps(
        payload, ensure_ascii=False, allow_nan=False, indent=None, separators=(",", ":")
    ).encode("utf-8")


def assemble(payload: dict, cache_control: str) -> CachedResponse:
    """Build the cacheable form of a successful proxy response."""
    return CachedResponse(
        status_code=200,
        body=render_json(payload),
        headers={
            "Content-Type": "application/json",
            "Cache-Control": cache_control,
            **CORS_HEADERS,
        },
    )


def to_response(cached: CachedResponse, cache_status: str) -> Response:
    """Turn a cached/assembled response into a Starlette response.

    cache_status is reported in X-Cache ("HIT" or "MISS").
    """
    return Response(
        content=cached.body,
        status_code=cached.status_code,
        headers={**cached.headers, "X-Cache": cache_status},
    )


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    """JSON error body with CORS headers. Never cached."""
    return JSONResponse({"error": message}, status_code=status_code, headers=CORS_HEADERS)


def preflight_response(headers: Mapping[str, str]) -> Response:
    """Answer an OPTIONS request.

    A full CORS preflight (Origin plus both Access-Control-Request-* headers)
    gets the CORS headers; anything else is a plain OPTIONS and gets Allow.
    """
    if all(headers.get(name) is not None for name in _PREFLIGHT_HEADERS):
        return Response(status_code=200, headers=CORS_HEADERS)
    return Response(status_code=200, headers={"Allow": ALLOWED_METHODS})
