"""TheSportsDB upstream provider."""

from rugbyhub.providers.tsdb.client import TSDB_BASE_URL, TSDBClient

__all__ = ["TSDB_BASE_URL", "TSDBClient"]
