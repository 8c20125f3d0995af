"""Application configuration.

Single source of truth for all configuration values.
Loads from environment variables with .env file support, and is handed
explicitly to the app factory and dispatcher (no module-level settings).
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from rugbyhub import __version__

VERSION = __version__

# Load .env file from project root
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

MODE_DATE_RANGE = "date_range"
MODE_LEAGUE_FILTERED = "league_filtered"
MODES = (MODE_DATE_RANGE, MODE_LEAGUE_FILTERED)

DEFAULT_SPORTS = (
    "American Football",
    "Rugby Union",
    "Rugby League",
    "Australian Football",
)


class ConfigError(RuntimeError):
    """Startup configuration is missing or invalid."""


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable proxy configuration.

    TTLs are in seconds. The league-filtered deployment always aggregates by
    league; the date-range deployment serves single days and day windows.
    """

    api_key: str
    base_url: str = "https://www.thesportsdb.com/api/v1/json"
    mode: str = MODE_DATE_RANGE

    # Upstream
    request_timeout_seconds: float = 10.0
    league_call_delay_seconds: float = 0.1

    # League-filtered strategy
    sports: tuple[str, ...] = DEFAULT_SPORTS
    leagues_cache_ttl: int = 24 * 60 * 60  # 24 hours - league directory
    league_events_cache_ttl: int = 2 * 60 * 60  # 2 hours

    # Date-range strategy
    default_days: int = 7
    max_variety_days: int = 30
    date_range_cache_ttl: int = 60 * 60  # 1 hour
    single_day_cache_ttl: int = 30 * 60  # 30 minutes

    # Logging
    log_level: str = "INFO"
    log_dir: str | None = None

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError(
                "THE_SPORTS_DB_API_KEY is not set. Set it in the environment or .env file."
            )
        if self.mode not in MODES:
            raise ConfigError(f"Unknown mode {self.mode!r}, expected one of {', '.join(MODES)}")
        if self.default_days < 1 or self.max_variety_days < 1:
            raise ConfigError("Day counts must be at least 1")

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "ProxyConfig":
        """Build configuration from environment variables.

        Args:
            env_file: Optional .env path (defaults to the project root .env)

        Returns:
            ProxyConfig

        Raises:
            ConfigError: If the API key is missing or a value is malformed
        """
        load_dotenv(env_file or _ENV_FILE)

        api_key = os.getenv("THE_SPORTS_DB_API_KEY") or os.getenv("TSDB_API_KEY") or ""

        try:
            timeout = float(os.getenv("RUGBYHUB_TIMEOUT_SECONDS", "10"))
            delay_ms = int(os.getenv("RUGBYHUB_LEAGUE_DELAY_MS", "100"))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        return cls(
            api_key=api_key,
            base_url=os.getenv("TSDB_BASE_URL", cls.base_url),
            mode=os.getenv("RUGBYHUB_MODE", MODE_DATE_RANGE).strip().lower(),
            request_timeout_seconds=timeout,
            league_call_delay_seconds=delay_ms / 1000.0,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR") or None,
        )
