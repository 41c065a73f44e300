"""LinkedIn public job search (rendered)."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor

PAGE_SIZE = 25


class LinkedInExtractor(CardExtractor):
    identity = SourceIdentity.LINKEDIN
    display_name = "LinkedIn"
    base_url = "https://www.linkedin.com"
    render = True
    scroll_rounds = 2

    card_selectors = (
        "ul.jobs-search__results-list li",
        ".base-search-card",
        ".job-search-card",
    )
    title_selectors = (".base-search-card__title", "h3", "h2", ".job-title")
    company_selectors = (".base-search-card__subtitle", "h4", ".company-name")
    location_selectors = (".job-search-card__location", "span[class*='location']")
    salary_selectors = (
        ".job-search-card__salary",
        ".base-search-card__salary",
        "span[class*='salary']",
    )
    description_selectors = (".job-search-card__snippet", ".base-card__full-description")
    link_selectors = ("a.base-card__full-link::attr:href", "a[href]::attr:href")
    date_selectors = (
        "time::attr:datetime",
        ".job-search-card__listdate",
        ".base-search-card__metadata time",
        "[class*='date']",
    )
    no_results_markers = (
        "No matching jobs found",
        "did not match any jobs",
        "No jobs found",
    )

    def build_search_url(self, page: int) -> str:
        query = urlencode(
            {
                "keywords": self.config.search_query,
                "location": self.config.location,
                "f_E": 2,
                "f_TPR": f"r{self.config.max_age_days * 86400}",
                "start": (page - 1) * PAGE_SIZE,
            }
        )
        return f"{self.base_url}/jobs/search?{query}"


__all__ = ["LinkedInExtractor"]
