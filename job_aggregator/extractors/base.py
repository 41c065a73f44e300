"""Extractor contract and the shared card-scraping scaffolding."""

from __future__ import annotations

import re
import time
from datetime import datetime
from typing import Callable, ClassVar, Protocol, runtime_checkable

import structlog
from selectolax.parser import Node

from ..config import SourceConfig
from ..engine.fetcher import FetchRequest, Fetcher
from ..engine.parser import (
    CardParser,
    field_value,
    parse_experience,
    parse_posted_date,
    resolve_link,
)
from ..errors import FetchFailure, ParseFailure, ValidationFailure
from ..logging_conf import source_logger
from ..models import Listing, SourceIdentity, utcnow

DEFAULT_NO_RESULTS_MARKERS = (
    "did not match any jobs",
    "No jobs found",
    "No results found",
    "No matching jobs found",
)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return _SLUG_RE.sub("-", text.lower()).strip("-")


@runtime_checkable
class SourceExtractor(Protocol):
    """What the orchestrator needs from a source."""

    identity: SourceIdentity

    def scrape_jobs(self) -> list[Listing]: ...

    def portal_name(self) -> str: ...

    def is_enabled(self) -> bool: ...

    def request_delay(self) -> float: ...


class CardExtractor:
    """Paginate a search page and turn each job card into a ``Listing``.

    Subclasses only declare class constants (selectors, base URL, markers)
    and implement ``build_search_url``. Selector tuples are tried in order and
    accept the ``css::attr:name`` suffix for attribute values.
    """

    identity: ClassVar[SourceIdentity]
    display_name: ClassVar[str]
    base_url: ClassVar[str]
    render: ClassVar[bool] = False
    scroll_rounds: ClassVar[int] = 0

    card_selectors: ClassVar[tuple[str, ...]]
    title_selectors: ClassVar[tuple[str, ...]]
    company_selectors: ClassVar[tuple[str, ...]]
    link_selectors: ClassVar[tuple[str, ...]]
    location_selectors: ClassVar[tuple[str, ...]] = (".location", "[class*='location']")
    salary_selectors: ClassVar[tuple[str, ...]] = (".salary", "[class*='salary']")
    experience_selectors: ClassVar[tuple[str, ...]] = (".experience", "[class*='experience']")
    description_selectors: ClassVar[tuple[str, ...]] = (".job-description", ".description")
    date_selectors: ClassVar[tuple[str, ...]] = (".posted-date", ".job-date", "[class*='date']")
    no_results_markers: ClassVar[tuple[str, ...]] = DEFAULT_NO_RESULTS_MARKERS
    description_prefix: ClassVar[str] = "Entry-level position"

    def __init__(
        self,
        config: SourceConfig,
        fetcher: Fetcher,
        logger: structlog.BoundLogger | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if config.identity is not self.identity:
            raise ValueError(
                f"{type(self).__name__} cannot run config for '{config.identity.value}'"
            )
        self.config = config
        self.fetcher = fetcher
        self.logger = (logger or source_logger(self.identity.value)).bind(
            component="extractor", portal=self.display_name
        )
        self._sleep = sleep
        self._clock = clock

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------
    def portal_name(self) -> str:
        return self.display_name

    def is_enabled(self) -> bool:
        return self.config.enabled

    def request_delay(self) -> float:
        return self.config.request_delay

    def build_search_url(self, page: int) -> str:
        """Search URL for 1-based ``page``."""

        raise NotImplementedError

    def scrape_jobs(self) -> list[Listing]:
        """Walk result pages until ``max_pages`` or an empty page.

        A fetch failure on the first page propagates. On a later page it ends
        pagination and the listings gathered so far are returned.
        """

        listings: list[Listing] = []
        for page in range(1, self.config.max_pages + 1):
            if page > 1:
                self._sleep(self.request_delay())
            url = self.build_search_url(page)
            try:
                response = self.fetcher.fetch(self.config, self._request_for(url))
            except FetchFailure as exc:
                if page == 1:
                    raise
                self.logger.warning("page_fetch_failed", page=page, url=url, error=str(exc))
                break
            page_listings, exhausted = self.parse_page(response.text)
            listings.extend(page_listings)
            self.logger.info("page_fetched", page=page, url=url, listings=len(page_listings))
            if exhausted:
                break
        return listings

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    def _request_for(self, url: str) -> FetchRequest:
        return FetchRequest(
            url=url,
            timeout=self.config.request_timeout,
            force_browser=self.render,
            wait_selector=self.card_selectors[0] if self.render else None,
            scroll_rounds=self.scroll_rounds,
        )

    def parse_page(self, html: str) -> tuple[list[Listing], bool]:
        """Return the page's valid listings and whether pagination should stop."""

        parser = CardParser(html)
        if parser.contains_any(self.no_results_markers):
            self.logger.info("no_results_marker")
            return [], True
        cards = parser.select_cards(self.card_selectors)
        if not cards:
            self.logger.warning("no_cards_found")
            return [], True

        listings: list[Listing] = []
        skipped = 0
        for card in cards:
            try:
                listings.append(self.parse_card(card))
            except ValidationFailure:
                skipped += 1
            except ParseFailure as exc:
                skipped += 1
                self.logger.debug("card_parse_failed", error=str(exc))
        if skipped:
            self.logger.debug("cards_skipped", skipped=skipped, kept=len(listings))
        return listings, False

    def parse_card(self, card: Node) -> Listing:
        try:
            title = field_value(card, self.title_selectors)
            company = field_value(card, self.company_selectors)
            link = resolve_link(self.base_url, field_value(card, self.link_selectors))
            location = field_value(card, self.location_selectors)
            salary = field_value(card, self.salary_selectors)
            experience = parse_experience(field_value(card, self.experience_selectors))
            snippet = field_value(card, self.description_selectors)
            posted_at = parse_posted_date(field_value(card, self.date_selectors), self._clock())
        except (AttributeError, TypeError, ValueError) as exc:
            raise ParseFailure(f"{self.display_name} card: {exc}") from exc

        if not title:
            raise ValidationFailure("title")
        if not company:
            raise ValidationFailure("company")
        if not link:
            raise ValidationFailure("url")

        return Listing(
            title=title,
            company=company,
            target_url=link,
            description=snippet or self._summary(location, salary),
            location=location,
            salary_range=salary,
            experience_required=experience,
            posted_at=posted_at,
            source=self.identity,
        )

    def _summary(self, location: str | None, salary: str | None) -> str:
        parts = [f"{self.description_prefix} from {self.display_name}"]
        if location:
            parts.append(f"Location: {location}")
        if salary:
            parts.append(f"Salary: {salary}")
        return " | ".join(parts)


__all__ = ["CardExtractor", "DEFAULT_NO_RESULTS_MARKERS", "SourceExtractor", "slugify"]
