"""Fuzzy duplicate detection over aggregated listings."""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import urlsplit

from ..config import DeduplicationConfig
from ..models import Listing

_NON_ALNUM_RE = re.compile(r"[^\w\s]|_")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_url(url: str | None) -> str:
    """Reduce a URL to ``scheme://host/path`` in lower case."""

    if not url:
        return ""
    text = url.strip()
    try:
        parts = urlsplit(text)
    except ValueError:
        parts = None
    if parts is None or not parts.scheme or not parts.netloc:
        return text.lower().split("?", 1)[0].split("#", 1)[0].rstrip("/")
    normalized = f"{parts.scheme}://{parts.hostname or ''}{parts.path}"
    return normalized.lower().rstrip("/")


def normalize_text(text: str | None) -> str:
    if not text:
        return ""
    cleaned = _NON_ALNUM_RE.sub("", text.casefold())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def levenshtein(first: str, second: str) -> int:
    """Edit distance using a rolling two-row table."""

    if len(first) < len(second):
        first, second = second, first
    previous = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j], current[j - 1], previous[j - 1]) + 1)
        previous = current
    return previous[-1]


def similarity(first: str | None, second: str | None) -> float:
    if first is None or second is None:
        return 0.0
    if first == second:
        return 1.0
    if not first.strip() or not second.strip():
        return 0.0
    longest = max(len(first), len(second))
    return 1.0 - levenshtein(first, second) / longest


def field_similarity(first: str | None, second: str | None) -> float:
    """Similarity of two raw fields; a field that normalises to nothing scores 0."""

    first, second = normalize_text(first), normalize_text(second)
    if not first or not second:
        return 0.0
    return similarity(first, second)


class DeduplicationEngine:
    """Order-preserving duplicate removal; the first occurrence wins.

    Each candidate is compared against every listing kept so far, so the cost
    grows quadratically with the kept set. That is fine for a few thousand
    listings per refresh.
    """

    def __init__(self, config: DeduplicationConfig | None = None) -> None:
        self.config = config or DeduplicationConfig()

    def is_duplicate(self, first: Listing, second: Listing) -> bool:
        url_a = normalize_url(first.target_url)
        url_b = normalize_url(second.target_url)
        if url_a and url_a == url_b:
            return True

        title_score = field_similarity(first.title, second.title)
        company_score = field_similarity(first.company, second.company)
        if (
            title_score >= self.config.title_threshold
            and company_score >= self.config.company_threshold
        ):
            return True

        combined = (
            title_score * self.config.title_weight + company_score * self.config.company_weight
        )
        if combined >= self.config.combined_threshold:
            description_score = field_similarity(first.description, second.description)
            if description_score > self.config.description_threshold:
                return True
        return False

    def remove_duplicates(self, listings: Iterable[Listing]) -> list[Listing]:
        kept: list[Listing] = []
        seen_urls: set[str] = set()
        for listing in listings:
            if listing is None:
                continue
            url = normalize_url(listing.target_url)
            if url and url in seen_urls:
                continue
            if any(self.is_duplicate(listing, existing) for existing in kept):
                continue
            kept.append(listing)
            if url:
                seen_urls.add(url)
        return kept

    def group_similar(self, listings: Iterable[Listing]) -> dict[str, list[Listing]]:
        """Bucket listings under the first member of each duplicate cluster."""

        groups: dict[str, list[Listing]] = {}
        for listing in listings:
            for members in groups.values():
                if self.is_duplicate(listing, members[0]):
                    members.append(listing)
                    break
            else:
                key = f"{normalize_text(listing.title)}|{normalize_text(listing.company)}"
                groups.setdefault(key, []).append(listing)
        return groups


__all__ = [
    "DeduplicationEngine",
    "field_similarity",
    "levenshtein",
    "normalize_text",
    "normalize_url",
    "similarity",
]
