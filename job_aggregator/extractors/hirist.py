"""Hirist IT job search."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor


class HiristExtractor(CardExtractor):
    identity = SourceIdentity.HIRIST
    display_name = "Hirist"
    base_url = "https://www.hirist.com"
    description_prefix = "Entry-level IT position"

    card_selectors = (".job-card", ".vacancy", "div[class*='jobCard']", "li[class*='job']")
    title_selectors = (".job-title", "h3 a", ".title a", "a[class*='title']")
    company_selectors = (".company-name", ".recruiter-name", "div[class*='company']")
    location_selectors = (".job-location", ".location", "span[class*='location']")
    salary_selectors = (".salary", ".package", ".ctc", "span[class*='salary']")
    experience_selectors = (".experience", ".exp-req", "span[class*='experience']")
    description_selectors = (".job-description", ".desc")
    link_selectors = (
        "a[href*='/job/']::attr:href",
        ".job-title a::attr:href",
        "a[class*='job-link']::attr:href",
    )

    def build_search_url(self, page: int) -> str:
        query = urlencode(
            {"q": self.config.search_query, "loc": self.config.location, "exp": "0-1", "page": page}
        )
        return f"{self.base_url}/search?{query}"


__all__ = ["HiristExtractor"]
