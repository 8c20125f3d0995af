import asyncio
from datetime import date

import pytest

from rugbyhub.consumers.base import AggregationContext, dedupe_events
from rugbyhub.consumers.date_range import DateRangeStrategy, build_date_window
from rugbyhub.core.types import UpstreamFailure
from rugbyhub.providers.tsdb.client import TSDBClient

from conftest import API_KEY, NETWORK_ERROR

TODAY = date(2024, 5, 1)


class SlowClient:
    """Per-date outcomes with per-date latency, to separate arrival from issue order."""

    def __init__(self, outcomes: dict[str, object], delays: dict[str, float] | None = None):
        self._outcomes = outcomes
        self._delays = delays or {}

    def events_by_date_url(self, day: str) -> str:
        return day

    async def fetch_json(self, url: str, *, delay_after: float = 0.0):
        await asyncio.sleep(self._delays.get(url, 0.0))
        outcome = self._outcomes.get(url, {"events": None})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _aggregate(strategy, deferred, day_count=None):
    return asyncio.run(strategy.aggregate(AggregationContext(defer=deferred, day_count=day_count)))


def test_build_date_window() -> None:
    assert build_date_window(date(2024, 2, 27), 4) == [
        "2024-02-27",
        "2024-02-28",
        "2024-02-29",
        "2024-03-01",
    ]
    with pytest.raises(ValueError):
        build_date_window(TODAY, 0)


def test_dedupe_keeps_first_occurrence_and_unidentified_events() -> None:
    events = [
        {"idEvent": "E1", "src": "a"},
        {"strEvent": "no id"},
        {"idEvent": "E1", "src": "b"},
        {"strEvent": "no id"},
    ]
    assert dedupe_events(events) == [
        {"idEvent": "E1", "src": "a"},
        {"strEvent": "no id"},
        {"strEvent": "no id"},
    ]


def test_duplicate_event_taken_from_earlier_date(upstream, deferred) -> None:
    upstream.day_events["2024-05-01"] = {"events": [{"idEvent": "E1", "dateEvent": "2024-05-01"}]}
    upstream.day_events["2024-05-02"] = {
        "events": [
            {"idEvent": "E1", "dateEvent": "2024-05-02"},
            {"idEvent": "E2", "dateEvent": "2024-05-02"},
        ]
    }
    client = TSDBClient(api_key=API_KEY, transport=upstream.transport)
    strategy = DateRangeStrategy(client, today=lambda: TODAY)

    result = _aggregate(strategy, deferred, day_count=3)

    assert [e["idEvent"] for e in result.events] == ["E1", "E2"]
    assert result.events[0]["dateEvent"] == "2024-05-01"
    assert result.meta.total_fetched == 3
    assert result.meta.unique_count == 2
    assert len(upstream.calls_to("eventsday.php")) == 3


def test_partial_failures_are_counted(upstream, deferred) -> None:
    upstream.day_events["2024-05-01"] = {"events": [{"idEvent": "1"}]}
    upstream.day_events["2024-05-02"] = 500
    upstream.day_events["2024-05-03"] = NETWORK_ERROR
    upstream.day_events["2024-05-04"] = {"events": None}
    client = TSDBClient(api_key=API_KEY, transport=upstream.transport)
    strategy = DateRangeStrategy(client, today=lambda: TODAY)

    result = _aggregate(strategy, deferred, day_count=4)

    assert result.meta.sources_attempted == 4
    assert result.meta.sources_succeeded == 2
    assert result.meta.unique_count <= result.meta.total_fetched
    meta = result.meta.to_dict()
    assert meta["daysRequested"] == 4
    assert meta["daysFetched"] == 2
    assert meta["uniqueEvents"] == 1


def test_all_dates_failed_is_empty_result(upstream, deferred) -> None:
    for day in build_date_window(TODAY, 7):
        upstream.day_events[day] = 502
    client = TSDBClient(api_key=API_KEY, transport=upstream.transport)
    strategy = DateRangeStrategy(client, today=lambda: TODAY)

    result = _aggregate(strategy, deferred)

    assert result.events == ()
    assert result.meta.sources_attempted == 7
    assert result.meta.sources_succeeded == 0
    assert result.meta.total_fetched == 0


def test_output_follows_date_order_not_arrival_order(deferred) -> None:
    client = SlowClient(
        outcomes={
            "2024-05-01": {"events": [{"idEvent": "A"}]},
            "2024-05-02": {"events": [{"idEvent": "B"}, {"idEvent": "C"}]},
            "2024-05-03": {"events": [{"idEvent": "D"}]},
        },
        delays={"2024-05-01": 0.05, "2024-05-02": 0.02},
    )
    strategy = DateRangeStrategy(client, today=lambda: TODAY)

    result = _aggregate(strategy, deferred, day_count=3)

    assert [e["idEvent"] for e in result.events] == ["A", "B", "C", "D"]


def test_unexpected_exception_only_fails_its_own_date(deferred) -> None:
    client = SlowClient(
        outcomes={
            "2024-05-01": RuntimeError("boom"),
            "2024-05-02": {"events": [{"idEvent": "B"}]},
            "2024-05-03": UpstreamFailure(url="u", cause="timeout"),
        }
    )
    strategy = DateRangeStrategy(client, today=lambda: TODAY)

    result = _aggregate(strategy, deferred, day_count=3)

    assert [e["idEvent"] for e in result.events] == ["B"]
    assert result.meta.sources_succeeded == 1


def test_default_day_count_used_without_context_override(deferred) -> None:
    client = SlowClient(outcomes={})
    strategy = DateRangeStrategy(client, default_days=5, today=lambda: TODAY)

    result = _aggregate(strategy, deferred)

    assert result.meta.sources_attempted == 5
    assert deferred.tasks == []


# =============================================================================
# Real socket server
# =============================================================================


async def _start_slow_server(latency: float) -> asyncio.Server:
    """Keep-alive HTTP server answering every request with an empty event list."""
    body = b'{"events": null}'

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            while True:
                await reader.readuntil(b"\r\n\r\n")
                await asyncio.sleep(latency)
                writer.write(
                    b"HTTP/1.1 200 OK\r\n"
                    b"Content-Type: application/json\r\n"
                    b"Connection: keep-alive\r\n"
                    b"Content-Length: " + str(len(body)).encode() + b"\r\n\r\n" + body
                )
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()

    return await asyncio.start_server(handle, "127.0.0.1", 0)


def test_every_date_fetched_when_window_exceeds_connection_pool(deferred) -> None:
    # 30 dates through 5 connections: later dates queue for a connection far
    # longer than the per-call timeout but must still succeed
    async def run():
        server = await _start_slow_server(latency=0.2)
        port = server.sockets[0].getsockname()[1]
        try:
            async with TSDBClient(
                api_key=API_KEY,
                base_url=f"http://127.0.0.1:{port}/api/v1/json",
                timeout=0.5,
                max_connections=5,
            ) as client:
                strategy = DateRangeStrategy(client, today=lambda: TODAY)
                return await strategy.aggregate(AggregationContext(defer=deferred, day_count=30))
        finally:
            server.close()
            await server.wait_closed()

    result = asyncio.run(run())

    assert result.meta.sources_attempted == 30
    assert result.meta.sources_succeeded == 30
    assert result.meta.to_dict()["daysFetched"] == 30
