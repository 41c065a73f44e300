"""Naukri search results."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor, slugify

EXPERIENCE_MIN = 0
EXPERIENCE_MAX = 2


class NaukriExtractor(CardExtractor):
    identity = SourceIdentity.NAUKRI
    display_name = "Naukri"
    base_url = "https://www.naukri.com"

    card_selectors = (
        ".srp-jobtuple-wrapper",
        "article.jobTuple",
        ".jobTuple",
        "[data-job-id]",
    )
    title_selectors = ("a.title", ".title", ".jobTitle")
    company_selectors = ("a.comp-name", ".comp-name", ".companyInfo a", ".subTitle")
    location_selectors = (".locWdth", ".loc-wrap", ".location", "[class*='location']")
    salary_selectors = (".sal-wrap", ".salary", "[class*='salary']")
    experience_selectors = (".expwdth", ".exp-wrap", ".experience")
    description_selectors = (".job-desc", ".job-description")
    link_selectors = ("a.title::attr:href", "a[href*='job-listings']::attr:href")
    date_selectors = (".job-post-day", ".type br + span", "[class*='date']")
    no_results_markers = ("No results found", "No jobs found", "did not match any jobs")

    def build_search_url(self, page: int) -> str:
        path = f"{slugify(self.config.search_query)}-jobs"
        if self.config.location:
            path += f"-in-{slugify(self.config.location.replace('&', 'and'))}"
        if page > 1:
            path += f"-{page}"
        query = urlencode(
            {
                "k": self.config.search_query,
                "l": self.config.location,
                "experienceMin": EXPERIENCE_MIN,
                "experienceMax": EXPERIENCE_MAX,
                "jobAge": self.config.max_age_days,
            }
        )
        return f"{self.base_url}/{path}?{query}"


__all__ = ["NaukriExtractor"]
