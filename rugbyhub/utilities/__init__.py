"""Shared utilities."""

from rugbyhub.utilities.logging import setup_logging

__all__ = ["setup_logging"]
