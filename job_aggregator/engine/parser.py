"""DOM parsing helpers shared by the card extractors."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Iterable, Sequence
from urllib.parse import urljoin

from selectolax.parser import HTMLParser, Node

from ..models import utcnow

_RELATIVE_UNITS = {
    "minute": timedelta(minutes=1),
    "min": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "hr": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}
_RELATIVE_RE = re.compile(
    r"(?P<count>\d+|an?|few)\s*\+?\s*(?P<unit>minute|min|hour|hr|day|week|month)s?\b"
)
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}(?:[Tt ][\d:.]+(?:Z|[+-]\d{2}:?\d{2})?)?")
_EXPERIENCE_RE = re.compile(r"(\d+)\s*(?:-|to|–)?\s*(\d+)?\s*(?:\+\s*)?(?:yrs?|years?)", re.I)


class CardParser:
    """Wrap one result page and hand out its job cards."""

    def __init__(self, html: str) -> None:
        self.html = html
        self.tree = HTMLParser(html)

    def select_cards(self, selectors: Sequence[str]) -> list[Node]:
        """Return the nodes matched by the first selector that matches anything."""

        for selector in selectors:
            nodes = self.tree.css(selector)
            if nodes:
                return nodes
        return []

    def contains_any(self, markers: Iterable[str]) -> bool:
        body = self.tree.body
        text = body.text(separator=" ", strip=True) if body is not None else self.html
        lowered = text.lower()
        return any(marker.lower() in lowered for marker in markers)


def split_selector(selector: str) -> tuple[str, str]:
    """Split ``css::mode`` where mode is ``text`` (default), ``html`` or ``attr:<name>``."""

    if "::" in selector:
        css, mode = selector.split("::", 1)
        return css.strip(), mode.strip().lower()
    return selector.strip(), "text"


def field_value(node: Node, selectors: Sequence[str]) -> str | None:
    """Return the first non-blank value produced by ``selectors`` inside ``node``."""

    for selector in selectors:
        css_selector, mode = split_selector(selector)
        target = node if css_selector in ("", ":self") else node.css_first(css_selector)
        if target is None:
            continue
        if mode == "html":
            value = target.html
        elif mode.startswith("attr:"):
            value = target.attributes.get(mode.split(":", 1)[1])
        else:
            value = target.text(separator=" ", strip=True)
        if value and value.strip():
            return " ".join(value.split())
    return None


def resolve_link(base_url: str, href: str | None) -> str | None:
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("javascript:", "#", "mailto:")):
        return None
    if href.startswith("//"):
        return f"https:{href}"
    return urljoin(base_url, href)


def parse_posted_date(text: str | None, now: datetime | None = None) -> datetime | None:
    """Turn listing-site date labels into an aware datetime.

    Understands "just posted", "today", "yesterday", "3 days ago",
    "30+ days ago", "2 weeks ago", "an hour ago" and ISO dates. Returns
    ``None`` for anything else.
    """

    if not text:
        return None
    now = now or utcnow()
    stripped = text.strip()
    lowered = stripped.lower()
    iso = _ISO_DATE_RE.search(stripped)
    if iso:
        try:
            parsed = datetime.fromisoformat(iso.group(0).replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=now.tzinfo)
    if any(word in lowered for word in ("just posted", "just now", "today", "active today", "few hours")):
        return now
    if "yesterday" in lowered:
        return now - timedelta(days=1)
    match = _RELATIVE_RE.search(lowered)
    if match:
        raw_count = match.group("count")
        count = int(raw_count) if raw_count.isdigit() else 1
        return now - _RELATIVE_UNITS[match.group("unit")] * count
    return None


def parse_experience(text: str | None) -> int | None:
    """Minimum years of experience from labels like "0-2 Yrs" or "Fresher"."""

    if not text:
        return None
    if "fresher" in text.lower():
        return 0
    match = _EXPERIENCE_RE.search(text)
    if match:
        return int(match.group(1))
    return None


__all__ = [
    "CardParser",
    "field_value",
    "parse_experience",
    "parse_posted_date",
    "resolve_link",
    "split_selector",
]
