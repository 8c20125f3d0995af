"""TheSportsDB API HTTP client.

Handles raw HTTP requests to TSDB endpoints. No data transformation - just
fetch and return JSON. Caching lives in the response cache, not here.

Failure isolation:
- Every call returns either the decoded JSON object or an UpstreamFailure
- Non-2xx, timeouts, network errors and bad JSON never raise past this client
- Callers that must serialize calls pass delay_after, which is honored after
  every call whether it succeeded or not

Endpoints used:
- all_leagues.php: league directory
- eventsnextleague.php?id=: upcoming events for one league
- eventsday.php?d=: all events on one calendar date
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date
from urllib.parse import urlencode

import httpx

from rugbyhub.core.types import Json, UpstreamFailure

logger = logging.getLogger(__name__)

TSDB_BASE_URL = "https://www.thesportsdb.com/api/v1/json"


class TSDBClient:
    """Low-level async TheSportsDB client.

    One pooled httpx.AsyncClient is opened lazily (or via open()) and reused
    for all calls. The API key is part of the URL path, so every URL that
    reaches a log line goes through redact() first.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = TSDB_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        max_connections: int = 30,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self._max_connections = max_connections
        self._client: httpx.AsyncClient | None = None

    # -------------------------------------------------------------------------
    # URL builders
    # -------------------------------------------------------------------------

    def _url(self, endpoint: str, params: dict | None = None) -> str:
        url = f"{self._base_url}/{self._api_key}/{endpoint}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def all_leagues_url(self) -> str:
        return self._url("all_leagues.php")

    def league_next_events_url(self, league_id: str) -> str:
        return self._url("eventsnextleague.php", {"id": league_id})

    def events_by_date_url(self, day: date | str) -> str:
        """URL for every event on one date (YYYY-MM-DD)."""
        day_str = day.isoformat() if isinstance(day, date) else day
        return self._url("eventsday.php", {"d": day_str})

    def redact(self, url: str) -> str:
        """Strip the API key out of a URL for logging."""
        if not self._api_key:
            return url
        return url.replace(f"/{self._api_key}/", "/***/")

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def open(self) -> None:
        if self._client is None:
            # Waiting for a pooled connection is not an upstream failure, so
            # only connect/read/write are bounded by the per-call timeout
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, pool=None),
                limits=httpx.Limits(
                    max_connections=self._max_connections,
                    max_keepalive_connections=self._max_connections,
                ),
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TSDBClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def fetch_json(self, url: str, *, delay_after: float = 0.0) -> Json | UpstreamFailure:
        """GET a URL and decode its JSON object body.

        Args:
            url: Fully built upstream URL
            delay_after: Seconds to wait after the call (success or failure)

        Returns:
            Decoded JSON object, or UpstreamFailure describing what went wrong
        """
        try:
            return await self._get(url)
        finally:
            if delay_after > 0:
                await self._sleep(delay_after)

    async def _get(self, url: str) -> Json | UpstreamFailure:
        await self.open()
        safe_url = self.redact(url)

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP {e.response.status_code} for {safe_url}")
            return UpstreamFailure(
                url=safe_url, cause="bad status", status_code=e.response.status_code
            )
        except httpx.TimeoutException:
            logger.warning(f"Request timed out after {self._timeout}s for {safe_url}")
            return UpstreamFailure(url=safe_url, cause="timeout")
        except httpx.RequestError as e:
            logger.warning(f"Request failed for {safe_url}: {type(e).__name__}")
            return UpstreamFailure(url=safe_url, cause=type(e).__name__)

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Response was not valid JSON for {safe_url}")
            return UpstreamFailure(url=safe_url, cause="invalid json")

        if not isinstance(data, dict):
            logger.warning(f"Expected JSON object, got {type(data).__name__} for {safe_url}")
            return UpstreamFailure(url=safe_url, cause="unexpected json shape")

        return data
