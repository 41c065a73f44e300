"""Engine components: fetch → parse → date filter → link check → dedup."""

from .date_filter import (
    filter_between,
    filter_by_age,
    filter_last_24_hours,
    filter_last_week_excluding_24_hours,
)
from .dedup import DeduplicationEngine
from .fetcher import FetchRequest, FetchResponse, Fetcher
from .link_verifier import LinkVerifier
from .parser import CardParser
from .thread_pool import ThreadPoolManager

__all__ = [
    "CardParser",
    "DeduplicationEngine",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "LinkVerifier",
    "ThreadPoolManager",
    "filter_between",
    "filter_by_age",
    "filter_last_24_hours",
    "filter_last_week_excluding_24_hours",
]
