"""Posting-date windows applied to aggregated listings."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Mapping

from ..models import Listing, SourceIdentity, utcnow


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def filter_by_age(
    listings: Iterable[Listing],
    max_age: timedelta,
    now: datetime | None = None,
    *,
    overrides: Mapping[SourceIdentity, timedelta] | None = None,
    include_undated: bool = True,
) -> list[Listing]:
    """Keep listings posted within ``max_age`` of ``now``.

    Listings without a posting date are kept unless ``include_undated`` is
    off. ``overrides`` swaps the window for individual sources.
    """

    now = _aware(now or utcnow())
    overrides = overrides or {}
    kept: list[Listing] = []
    for listing in listings:
        if listing.posted_at is None:
            if include_undated:
                kept.append(listing)
            continue
        window = overrides.get(listing.source, max_age) if listing.source else max_age
        if _aware(listing.posted_at) >= now - window:
            kept.append(listing)
    return kept


def filter_between(
    listings: Iterable[Listing],
    start: datetime | None,
    end: datetime | None,
) -> list[Listing]:
    """Inclusive range filter; undated listings are dropped."""

    start = _aware(start) if start else None
    end = _aware(end) if end else None
    kept = []
    for listing in listings:
        if listing.posted_at is None:
            continue
        posted = _aware(listing.posted_at)
        if start is not None and posted < start:
            continue
        if end is not None and posted > end:
            continue
        kept.append(listing)
    return kept


def filter_last_24_hours(listings: Iterable[Listing], now: datetime | None = None) -> list[Listing]:
    now = _aware(now or utcnow())
    return [
        listing
        for listing in listings
        if listing.posted_at is not None and _aware(listing.posted_at) > now - timedelta(days=1)
    ]


def filter_last_week_excluding_24_hours(
    listings: Iterable[Listing], now: datetime | None = None
) -> list[Listing]:
    now = _aware(now or utcnow())
    day_ago = now - timedelta(days=1)
    week_ago = now - timedelta(days=7)
    return [
        listing
        for listing in listings
        if listing.posted_at is not None and week_ago < _aware(listing.posted_at) < day_ago
    ]


__all__ = [
    "filter_between",
    "filter_by_age",
    "filter_last_24_hours",
    "filter_last_week_excluding_24_hours",
]
