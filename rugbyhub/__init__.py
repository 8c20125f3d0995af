"""Rugby Hub - caching proxy for TheSportsDB upcoming events."""

__version__ = "2.1.0"
