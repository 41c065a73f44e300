"""Wellfound startup jobs (rendered)."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor


class WellfoundExtractor(CardExtractor):
    identity = SourceIdentity.WELLFOUND
    display_name = "Wellfound"
    base_url = "https://wellfound.com"
    render = True
    scroll_rounds = 2
    description_prefix = "Entry-level startup position"

    card_selectors = (
        "div[data-test='StartupResult']",
        "[class*='JobResult']",
        ".search-result",
    )
    title_selectors = (
        "[data-test='JobTitle']",
        ".job-title",
        "a[class*='jobTitle']",
        "h2 a",
        "h3 a",
    )
    company_selectors = (
        "[data-test='CompanyName']",
        ".company-name",
        ".startup-name",
        "a[class*='companyName']",
        "h2",
    )
    location_selectors = ("[data-test='Location']", ".job-location", ".location")
    salary_selectors = (".compensation", ".salary", "[class*='salary']")
    description_selectors = ("[data-test='Description']", ".job-description", ".description")
    link_selectors = (
        "a[data-test='JobLink']::attr:href",
        "a[href*='/jobs/']::attr:href",
        "a[href]::attr:href",
    )
    date_selectors = ("[data-test='PostedDate']", ".posted-date", "[class*='date']")

    def build_search_url(self, page: int) -> str:
        query = urlencode(
            {"q": self.config.search_query, "location": self.config.location, "page": page}
        )
        return f"{self.base_url}/jobs?{query}"


__all__ = ["WellfoundExtractor"]
