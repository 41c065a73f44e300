"""Shine.com search results."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor, slugify


class ShineExtractor(CardExtractor):
    identity = SourceIdentity.SHINE
    display_name = "Shine"
    base_url = "https://www.shine.com"

    card_selectors = (
        "div[class*='jobCard']",
        ".jobCard",
        ".job_listing",
        ".search_listing",
        "div[itemtype='http://schema.org/JobPosting']",
    )
    title_selectors = (
        ".jobCard_pReplaceH2",
        ".job_title a",
        "h2 a",
        "h3 a",
        "h2",
        "h3",
    )
    company_selectors = (".jobCard_companyName", ".company_name", ".company-name", "[class*='company']")
    location_selectors = (".jobCard_location", ".job_location", ".location")
    salary_selectors = (".jobCard_salary", ".salary", ".package")
    experience_selectors = (".jobCard_experience", ".experience", ".exp-req")
    description_selectors = (".jobCard_jobDescription", ".job_description", ".description")
    link_selectors = (
        "a[href*='/job-detail/']::attr:href",
        ".job_title a::attr:href",
        "a[href*='/jobs/']::attr:href",
        "a[href]::attr:href",
    )
    date_selectors = (".jobCard_date", ".posted-date", ".job-date", "[class*='date']")

    def build_search_url(self, page: int) -> str:
        query = urlencode({"datePosted": self.config.max_age_days, "page": page})
        return f"{self.base_url}/job-search/{slugify(self.config.search_query)}-jobs?{query}"


__all__ = ["ShineExtractor"]
