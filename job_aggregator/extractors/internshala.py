"""Internshala fresher job listings."""

from __future__ import annotations

from ..models import SourceIdentity
from .base import CardExtractor, slugify


class InternshalaExtractor(CardExtractor):
    identity = SourceIdentity.INTERNSHALA
    display_name = "Internshala"
    base_url = "https://internshala.com"
    description_prefix = "Entry-level/Fresher position"

    card_selectors = (
        ".individual_internship",
        "div[id*='individual_internship']",
        ".job_card",
    )
    title_selectors = (".job-internship-name", ".profile a", "h3 a", ".job-title")
    company_selectors = (".company-name", ".company a", ".company_name")
    location_selectors = (".locations a", ".location_link", ".location")
    salary_selectors = (".stipend", ".salary", ".desktop-text")
    description_selectors = (".internship_other_details_container", ".job_description")
    link_selectors = (
        ":self::attr:data-href",
        "a.view_detail_button::attr:href",
        ".profile a::attr:href",
        "a[href*='/job/']::attr:href",
    )
    date_selectors = (".status-inactive", ".status-success", "[class*='date']", ".status-container")
    no_results_markers = ("No jobs found", "No internships found")

    def build_search_url(self, page: int) -> str:
        url = f"{self.base_url}/jobs/{slugify(self.config.search_query)}-jobs"
        if self.config.location and self.config.location.lower() != "india":
            url += f"-in-{slugify(self.config.location)}"
        if page > 1:
            url += f"/page-{page}"
        return url


__all__ = ["InternshalaExtractor"]
