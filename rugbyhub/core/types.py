"""Core data types for Rugby Hub.

All data structures are pure dataclasses with attribute access.
Upstream events stay as raw JSON objects - the proxy never reshapes them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

Json = dict[str, Any]
EventPayload = dict[str, Any]


@dataclass(frozen=True)
class League:
    """A league from the upstream directory (all_leagues.php)."""

    id: str
    sport_name: str
    name: str = ""

    @classmethod
    def from_payload(cls, data: Json) -> "League | None":
        """Parse a directory entry, or None if it lacks an id."""
        league_id = data.get("idLeague")
        if not league_id:
            return None
        return cls(
            id=str(league_id),
            sport_name=data.get("strSport") or "",
            name=data.get("strLeague") or "",
        )


@dataclass(frozen=True)
class UpstreamFailure:
    """A single upstream call that did not produce a JSON object.

    Returned (never raised) by the upstream client. `url` has the API key
    redacted so it is safe to log.
    """

    url: str
    cause: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code} for {self.url}"
        return f"{self.cause} for {self.url}"


@dataclass(frozen=True)
class AggregationMeta:
    """Counters describing one aggregation pass.

    `source_kind` names the fan-out unit ("days" or "leagues") and is used to
    label the attempted/succeeded counters on the wire.
    """

    total_fetched: int
    unique_count: int
    sources_attempted: int
    sources_succeeded: int
    generated_at: datetime
    source_kind: str = "days"

    def to_dict(self) -> dict:
        """Convert to dict for API responses."""
        return {
            "totalFetched": self.total_fetched,
            "uniqueEvents": self.unique_count,
            f"{self.source_kind}Requested": self.sources_attempted,
            f"{self.source_kind}Fetched": self.sources_succeeded,
            "generatedAt": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class AggregationResult:
    """Events produced by a strategy plus the counters behind them."""

    events: tuple[EventPayload, ...]
    meta: AggregationMeta

    def to_dict(self) -> dict:
        return {"events": list(self.events), "meta": self.meta.to_dict()}


@dataclass(frozen=True)
class CachedResponse:
    """Serialized HTTP response as held by the response cache."""

    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)
