"""Cutshort tech job search."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor, slugify


class CutshortExtractor(CardExtractor):
    identity = SourceIdentity.CUTSHORT
    display_name = "Cutshort"
    base_url = "https://cutshort.io"
    description_prefix = "Entry-level tech position"

    card_selectors = (".job-card", ".opportunity-card", "div[class*='JobCard']")
    title_selectors = (".job-title", "h3 a", ".title", "div[class*='title']")
    company_selectors = (".company-name", ".company", "div[class*='company']")
    location_selectors = (".job-location", ".location", "div[class*='location']")
    salary_selectors = (".salary", ".compensation", "div[class*='salary']")
    link_selectors = ("a[href*='/job/']::attr:href", "a.job-link::attr:href", "a::attr:href")

    def build_search_url(self, page: int) -> str:
        query = urlencode({"location": self.config.location, "experience": "0-1", "page": page})
        return f"{self.base_url}/jobs/{slugify(self.config.search_query)}?{query}"


__all__ = ["CutshortExtractor"]
