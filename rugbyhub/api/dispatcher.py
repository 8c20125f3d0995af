"""Request dispatcher - cache check, path resolution, aggregation, caching.

Flow per request:
1. Normalize the request URL and check the response cache (hit -> reply)
2. Resolve exactly one path from the query parameters
3. Run it; request-level failures become a 500 JSON error (never cached)
4. Assemble the JSON response and defer the cache write
"""

import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import date

from fastapi.responses import Response

from rugbyhub.api.responses import assemble, error_response, to_response
from rugbyhub.config import MODE_LEAGUE_FILTERED, ProxyConfig
from rugbyhub.consumers.base import AggregationContext, AggregationStrategy, Defer
from rugbyhub.consumers.date_range import DateRangeStrategy
from rugbyhub.consumers.league_filtered import LeagueFilteredStrategy
from rugbyhub.core.errors import AggregationError, SingleDayUnavailable
from rugbyhub.providers.tsdb.client import TSDBClient
from rugbyhub.services.response_cache import CacheGateway, normalize_cache_key

logger = logging.getLogger(__name__)

UPSTREAM_ERROR_MESSAGE = "Failed to fetch data from the upstream API."

_DAY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class RequestPlan:
    """One resolved path: how to produce the payload and how long to keep it."""

    name: str
    run: Callable[[AggregationContext], Awaitable[dict]]
    ttl: int
    cache_control: str
    day_count: int | None = None


def parse_day(value: str | None) -> date | None:
    """Strict YYYY-MM-DD parse; anything else is treated as absent."""
    if not value or not _DAY_PATTERN.fullmatch(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class RequestDispatcher:
    """Single entry point for proxied GET/HEAD requests."""

    def __init__(
        self,
        config: ProxyConfig,
        client: TSDBClient,
        cache: CacheGateway,
        strategies: Mapping[str, AggregationStrategy] | None = None,
    ):
        self._config = config
        self._client = client
        self._cache = cache
        self._strategies = dict(strategies) if strategies else self._default_strategies()

    def _default_strategies(self) -> dict[str, AggregationStrategy]:
        config = self._config
        return {
            DateRangeStrategy.name: DateRangeStrategy(self._client, config.default_days),
            LeagueFilteredStrategy.name: LeagueFilteredStrategy(
                self._client,
                self._cache,
                sports=config.sports,
                directory_ttl=config.leagues_cache_ttl,
                call_delay=config.league_call_delay_seconds,
            ),
        }

    @property
    def cache(self) -> CacheGateway:
        return self._cache

    async def handle(self, url: str, params: Mapping[str, str], defer: Defer) -> Response:
        """Serve one request.

        Args:
            url: Full request URL (used as the cache identity)
            params: Query parameters
            defer: Schedules post-reply work (BackgroundTasks.add_task)

        Returns:
            Cached, freshly assembled or error response
        """
        cache_key = normalize_cache_key(url)

        cached = await self._cache.lookup(cache_key)
        if cached is not None:
            logger.info(f"CACHE HIT: {cache_key}")
            return to_response(cached, "HIT")

        plan = self.resolve(params)
        logger.info(f"CACHE MISS: {cache_key} -> {plan.name}")

        context = AggregationContext(defer=defer, day_count=plan.day_count)
        try:
            payload = await plan.run(context)
            assembled = assemble(payload, plan.cache_control)
        except AggregationError as e:
            logger.error(f"Failed to fetch and process events ({plan.name}): {e}")
            return error_response(UPSTREAM_ERROR_MESSAGE)
        except Exception:
            logger.exception(f"Unexpected error while running {plan.name}")
            return error_response(UPSTREAM_ERROR_MESSAGE)

        defer(self._cache.store, cache_key, assembled, plan.ttl)
        return to_response(assembled, "MISS")

    def resolve(self, params: Mapping[str, str]) -> RequestPlan:
        """Pick exactly one path for the request."""
        config = self._config

        if config.mode == MODE_LEAGUE_FILTERED:
            return RequestPlan(
                name=LeagueFilteredStrategy.name,
                run=self._strategy_runner(LeagueFilteredStrategy.name),
                ttl=config.league_events_cache_ttl,
                cache_control=f"s-maxage={config.league_events_cache_ttl}",
            )

        day = parse_day(params.get("day"))
        if day is not None:
            return RequestPlan(
                name="single_day",
                run=lambda context: self._fetch_single_day(day),
                ttl=config.single_day_cache_ttl,
                cache_control=f"public, max-age={config.single_day_cache_ttl}",
            )

        day_count = config.max_variety_days if params.get("variety") == "max" else config.default_days
        return RequestPlan(
            name=DateRangeStrategy.name,
            run=self._strategy_runner(DateRangeStrategy.name),
            ttl=config.date_range_cache_ttl,
            cache_control=f"public, max-age={config.date_range_cache_ttl}",
            day_count=day_count,
        )

    def _strategy_runner(self, name: str) -> Callable[[AggregationContext], Awaitable[dict]]:
        strategy = self._strategies[name]

        async def run(context: AggregationContext) -> dict:
            result = await strategy.aggregate(context)
            return result.to_dict()

        return run

    async def _fetch_single_day(self, day: date) -> dict:
        """One direct upstream call; the payload is passed through verbatim."""
        payload = await self._client.fetch_json(self._client.events_by_date_url(day))
        if not isinstance(payload, dict):
            raise SingleDayUnavailable(f"Events for {day.isoformat()} unavailable: {payload}")
        return payload
