"""Shared fixtures: fake TSDB upstream and deferred-task capture."""

import time

import httpx
import pytest

from rugbyhub.config import ProxyConfig

API_KEY = "testkey"

NETWORK_ERROR = "network-error"


class FakeUpstream:
    """Canned TheSportsDB responses served through httpx.MockTransport.

    Values are a JSON payload (200), an int status code, or NETWORK_ERROR.
    Dates without an entry answer {"events": null} like TSDB does.
    """

    def __init__(self):
        self.directory: dict | int | str = {"leagues": []}
        self.league_events: dict[str, dict | int | str] = {}
        self.day_events: dict[str, dict | int | str] = {}
        self.requests: list[httpx.Request] = []
        self.request_times: list[float] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.request_times.append(time.monotonic())

        endpoint = request.url.path.rsplit("/", 1)[-1]
        if endpoint == "all_leagues.php":
            value = self.directory
        elif endpoint == "eventsnextleague.php":
            value = self.league_events.get(request.url.params["id"], {"events": None})
        elif endpoint == "eventsday.php":
            value = self.day_events.get(request.url.params["d"], {"events": None})
        else:
            value = 404

        if value == NETWORK_ERROR:
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(value, int):
            return httpx.Response(value, json={"error": "upstream error"})
        return httpx.Response(200, json=value)

    def calls_to(self, endpoint: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(endpoint)]


class DeferredTasks:
    """Stands in for BackgroundTasks.add_task; run() drains the queue."""

    def __init__(self):
        self.tasks = []

    def __call__(self, func, *args, **kwargs):
        self.tasks.append((func, args, kwargs))

    async def run(self):
        while self.tasks:
            func, args, kwargs = self.tasks.pop(0)
            await func(*args, **kwargs)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def deferred():
    return DeferredTasks()


@pytest.fixture
def config():
    """Date-range deployment with no league delay."""
    return ProxyConfig(api_key=API_KEY, league_call_delay_seconds=0.0)
