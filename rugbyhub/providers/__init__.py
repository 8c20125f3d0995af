"""Upstream data providers."""

from rugbyhub.providers.tsdb import TSDBClient

__all__ = ["TSDBClient"]
