"""Freshersworld job search."""

from __future__ import annotations

from ..models import SourceIdentity
from .base import CardExtractor, slugify

PAGE_SIZE = 20


class FreshersworldExtractor(CardExtractor):
    identity = SourceIdentity.FRESHERSWORLD
    display_name = "Freshersworld"
    base_url = "https://www.freshersworld.com"
    description_prefix = "Fresher position"

    card_selectors = (".job-container", ".job_listing", ".latest-jobs-container .job-container")
    title_selectors = (".job-tittle a", "h2.job-title", ".job-title a", ".job-title", "h3 a")
    company_selectors = (".company-name", ".job-company", ".comp-name", ".companyName")
    location_selectors = (".job-location", ".location", ".job_loc", ".jobLocation")
    salary_selectors = (".salary", ".package", ".salary_info", ".salaryText")
    description_selectors = (".qualification", ".desc", ".job-description")
    link_selectors = (
        ":self::attr:job_display_url",
        ".job-tittle a::attr:href",
        ".job-title a::attr:href",
        "a[href*='/jobs/']::attr:href",
    )
    date_selectors = (".posted-date", ".job-date", ".ago-text", "[class*='date']")

    def build_search_url(self, page: int) -> str:
        url = (
            f"{self.base_url}/jobs/jobsearch/{slugify(self.config.search_query)}"
            f"-jobs-in-{slugify(self.config.location)}"
        )
        if page > 1:
            url += f"?limit={PAGE_SIZE}&offset={(page - 1) * PAGE_SIZE}"
        return url


__all__ = ["FreshersworldExtractor"]
