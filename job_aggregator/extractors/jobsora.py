"""Jobsora India search results."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor, slugify


class JobsoraExtractor(CardExtractor):
    identity = SourceIdentity.JOBSORA
    display_name = "Jobsora"
    base_url = "https://in.jobsora.com"

    card_selectors = (".vacancy", ".c-job-list__item", ".job-item", ".job-card")
    title_selectors = (".vacancy__title", ".c-job-list__title", ".job-title a", "h2 a", "h3 a")
    company_selectors = (".vacancy__company", ".c-job-list__company", ".company-name", ".employer-name")
    location_selectors = (".vacancy__location", ".c-job-list__location", ".job-location", ".location")
    salary_selectors = (".vacancy__salary", ".c-job-list__salary", ".salary", ".wage")
    description_selectors = (".vacancy__description", ".c-job-list__desc", ".job-description")
    link_selectors = (
        "a.vacancy__title::attr:href",
        "a.c-job-list__title::attr:href",
        "a[href*='/job/']::attr:href",
        "a[href]::attr:href",
    )
    date_selectors = (".vacancy__date", ".c-job-list__date", ".posted-date", "[class*='date']")
    no_results_markers = ("No jobs found", "We couldn't find any jobs")

    def build_search_url(self, page: int) -> str:
        query = urlencode(
            {
                "experience": "entry_level",
                "date_posted": self.config.max_age_days,
                "page": page,
            }
        )
        return (
            f"{self.base_url}/jobs-in-{slugify(self.config.location)}/"
            f"{slugify(self.config.search_query)}?{query}"
        )


__all__ = ["JobsoraExtractor"]
