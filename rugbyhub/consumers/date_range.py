"""Date-range aggregation.

Fetches every event for today and the following days concurrently, keeps
whatever dates succeeded and deduplicates by event id.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from rugbyhub.consumers.base import AggregationContext, dedupe_events, extract_events
from rugbyhub.core.types import AggregationMeta, AggregationResult
from rugbyhub.providers.tsdb.client import TSDBClient

logger = logging.getLogger(__name__)


def build_date_window(start: date, day_count: int) -> list[str]:
    """ISO dates start, start+1, ... start+(day_count-1)."""
    if day_count < 1:
        raise ValueError(f"day_count must be at least 1, got {day_count}")
    return [(start + timedelta(days=i)).isoformat() for i in range(day_count)]


class DateRangeStrategy:
    """All events across a window of calendar days starting today.

    No single date is fatal: a date that fails simply contributes nothing and
    is reflected in meta.sources_succeeded. If every date fails the result is
    empty, not an error.
    """

    name = "date_range"

    def __init__(
        self,
        client: TSDBClient,
        default_days: int = 7,
        today: Callable[[], date] = date.today,
    ):
        self._client = client
        self._default_days = default_days
        self._today = today

    async def aggregate(self, context: AggregationContext) -> AggregationResult:
        day_count = context.day_count or self._default_days
        days = build_date_window(self._today(), day_count)
        logger.info(f"Fetching events for {day_count} days starting {days[0]}")

        # gather preserves issue order, so output follows date order
        outcomes = await asyncio.gather(
            *(self._client.fetch_json(self._client.events_by_date_url(day)) for day in days),
            return_exceptions=True,
        )

        events = []
        succeeded = 0
        for day, outcome in zip(days, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Unexpected error fetching events for {day}: {outcome!r}")
            elif isinstance(outcome, dict):
                events.extend(extract_events(outcome))
                succeeded += 1
            else:
                logger.warning(f"Could not fetch events for {day}: {outcome}")

        unique = dedupe_events(events)

        if succeeded == 0:
            logger.warning(f"All {day_count} date fetches failed, returning empty result")
        else:
            logger.info(
                f"Fetched {len(events)} events ({len(unique)} unique) "
                f"from {succeeded}/{day_count} days"
            )

        return AggregationResult(
            events=tuple(unique),
            meta=AggregationMeta(
                total_fetched=len(events),
                unique_count=len(unique),
                sources_attempted=day_count,
                sources_succeeded=succeeded,
                generated_at=datetime.now(UTC),
                source_kind="days",
            ),
        )
