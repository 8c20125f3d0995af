"""League-filtered aggregation.

Walks the TSDB league directory, keeps leagues whose sport is on a fixed
allow-list and fetches each league's upcoming events one at a time.

Rate limit contract: league calls are strictly sequential with a fixed delay
after every call. Never fan these out concurrently.
"""

import json
import logging
from datetime import UTC, datetime

from rugbyhub.consumers.base import AggregationContext, extract_events
from rugbyhub.core.errors import DirectoryUnavailable
from rugbyhub.core.types import AggregationMeta, AggregationResult, CachedResponse, League
from rugbyhub.providers.tsdb.client import TSDBClient
from rugbyhub.services.response_cache import DIRECTORY_LOOKUP, CacheGateway, normalize_cache_key

logger = logging.getLogger(__name__)


class LeagueFilteredStrategy:
    """Upcoming events for every allow-listed league, in directory order."""

    name = "league_filtered"

    def __init__(
        self,
        client: TSDBClient,
        cache: CacheGateway,
        sports: tuple[str, ...],
        directory_ttl: int = 24 * 60 * 60,
        call_delay: float = 0.1,
    ):
        self._client = client
        self._cache = cache
        self._sports = frozenset(sports)
        self._directory_ttl = directory_ttl
        self._call_delay = call_delay

    async def aggregate(self, context: AggregationContext) -> AggregationResult:
        leagues = await self.get_leagues(context)
        logger.info(f"Found {len(leagues)} leagues. Fetching upcoming events for each match...")

        matching = self.filter_leagues(leagues)

        events = []
        succeeded = 0
        for league in matching:
            url = self._client.league_next_events_url(league.id)
            result = await self._client.fetch_json(url, delay_after=self._call_delay)
            if isinstance(result, dict):
                events.extend(extract_events(result))
                succeeded += 1
            else:
                logger.warning(f"Could not fetch events for league {league.id}: {result}")

        logger.info(
            f"Fetched {len(events)} events from {succeeded}/{len(matching)} leagues"
        )

        return AggregationResult(
            events=tuple(events),
            meta=AggregationMeta(
                total_fetched=len(events),
                unique_count=len(events),
                sources_attempted=len(matching),
                sources_succeeded=succeeded,
                generated_at=datetime.now(UTC),
                source_kind="leagues",
            ),
        )

    def filter_leagues(self, leagues: list[League]) -> list[League]:
        """Keep leagues whose sport is on the allow-list (exact match)."""
        return [league for league in leagues if league.sport_name in self._sports]

    async def get_leagues(self, context: AggregationContext) -> list[League]:
        """Fetch the league directory, cached for a long time.

        Raises:
            DirectoryUnavailable: Upstream failed or the directory was empty
        """
        url = self._client.all_leagues_url()
        cache_key = normalize_cache_key(url)

        cached = await self._cache.lookup(cache_key, kind=DIRECTORY_LOOKUP)
        if cached is not None:
            logger.debug("LEAGUES: Cache hit.")
            try:
                leagues = _parse_leagues(json.loads(cached.body))
            except ValueError:
                logger.warning("LEAGUES: Cached directory is not valid JSON, refetching.")
                leagues = []
            if leagues:
                return leagues

        logger.debug("LEAGUES: Cache miss. Fetching from API.")
        payload = await self._client.fetch_json(url)
        if not isinstance(payload, dict):
            raise DirectoryUnavailable(f"Could not retrieve the list of leagues: {payload}")

        leagues = _parse_leagues(payload)
        if not leagues:
            raise DirectoryUnavailable("Upstream returned an empty league directory")

        context.defer(
            self._cache.store,
            cache_key,
            CachedResponse(
                status_code=200,
                body=json.dumps(payload).encode(),
                headers={
                    "Content-Type": "application/json",
                    "Cache-Control": f"s-maxage={self._directory_ttl}",
                },
            ),
            self._directory_ttl,
        )
        return leagues


def _parse_leagues(payload: dict) -> list[League]:
    raw = payload.get("leagues")
    if not isinstance(raw, list):
        return []
    leagues = (League.from_payload(item) for item in raw if isinstance(item, dict))
    return [league for league in leagues if league is not None]
