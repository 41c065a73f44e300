"""Job listing aggregation: source extractors, dedup, health tracking and caching."""

__version__ = "0.1.0"
