"""Core types and errors."""

from rugbyhub.core.errors import AggregationError, DirectoryUnavailable, SingleDayUnavailable
from rugbyhub.core.types import (
    AggregationMeta,
    AggregationResult,
    CachedResponse,
    EventPayload,
    Json,
    League,
    UpstreamFailure,
)

__all__ = [
    "AggregationError",
    "AggregationMeta",
    "AggregationResult",
    "CachedResponse",
    "DirectoryUnavailable",
    "EventPayload",
    "Json",
    "League",
    "SingleDayUnavailable",
    "UpstreamFailure",
]
