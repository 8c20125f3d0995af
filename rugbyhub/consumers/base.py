"""Aggregation strategy interface and shared helpers."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from rugbyhub.core.types import AggregationResult, EventPayload, Json

# Schedules a coroutine function to run after the reply is sent
# (FastAPI BackgroundTasks.add_task in production).
Defer = Callable[..., Any]


@dataclass(frozen=True)
class AggregationContext:
    """Per-request inputs handed to a strategy.

    day_count is only read by the date-range strategy.
    """

    defer: Defer
    day_count: int | None = None


class AggregationStrategy(Protocol):
    """Turns one request into an aggregated event list."""

    name: str

    async def aggregate(self, context: AggregationContext) -> AggregationResult: ...


def extract_events(payload: Json) -> list[EventPayload]:
    """Pull the events list out of a TSDB payload.

    TSDB answers "no events" with `{"events": null}`.
    """
    events = payload.get("events")
    if not isinstance(events, list):
        return []
    return [e for e in events if isinstance(e, dict)]


def event_identity(event: EventPayload) -> str | None:
    event_id = event.get("idEvent")
    return str(event_id) if event_id is not None else None


def dedupe_events(events: Iterable[EventPayload]) -> list[EventPayload]:
    """Drop repeated events by idEvent, keeping the first occurrence.

    Events without an id cannot be matched and are always kept.
    """
    seen: set[str] = set()
    unique: list[EventPayload] = []
    for event in events:
        key = event_identity(event)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        unique.append(event)
    return unique
