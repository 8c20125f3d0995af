"""Aggregation strategies.

Each strategy turns a request into an AggregationResult; the dispatcher
picks one per request.
"""

from rugbyhub.consumers.base import (
    AggregationContext,
    AggregationStrategy,
    Defer,
    dedupe_events,
    extract_events,
)
from rugbyhub.consumers.date_range import DateRangeStrategy, build_date_window
from rugbyhub.consumers.league_filtered import LeagueFilteredStrategy

__all__ = [
    "AggregationContext",
    "AggregationStrategy",
    "DateRangeStrategy",
    "Defer",
    "LeagueFilteredStrategy",
    "build_date_window",
    "dedupe_events",
    "extract_events",
]
