"""Glassdoor India search results (rendered)."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor


class GlassdoorExtractor(CardExtractor):
    identity = SourceIdentity.GLASSDOOR
    display_name = "Glassdoor"
    base_url = "https://www.glassdoor.co.in"
    render = True

    card_selectors = (
        "li[data-test='job-listing']",
        "li[class*='JobsList_jobListItem']",
        ".jobContainer",
        ".jobListing",
    )
    title_selectors = (
        "a[data-test='job-title']",
        "a[class*='JobCard_jobTitle']",
        "a.job-title",
        ".job-title",
        ".jobTitle",
    )
    company_selectors = (
        "[data-test='employer-name']",
        "div[class*='EmployerProfile_employerName']",
        ".employerName",
    )
    location_selectors = (
        "[data-test='emp-location']",
        "[data-test='job-location']",
        "div[class*='JobCard_location']",
        ".jobLocation",
    )
    salary_selectors = (
        "[data-test='detailSalary']",
        "div[class*='JobCard_salaryEstimate']",
        ".salaryText",
    )
    description_selectors = (".jobDescriptionSnippet", "div[class*='JobCard_jobDescriptionSnippet']")
    link_selectors = (
        "a[data-test='job-link']::attr:href",
        "a[data-test='job-title']::attr:href",
        "a.job-title::attr:href",
    )
    date_selectors = ("[data-test='job-age']", ".jobAge", "[class*='date']")

    def build_search_url(self, page: int) -> str:
        query = urlencode(
            {
                "sc.keyword": self.config.search_query,
                "locT": "C",
                "locId": -1,
                "locKeyword": self.config.location,
                "fromAge": self.config.max_age_days,
                "seniorityType": "ENTRYLEVEL",
                "p": page,
            }
        )
        return f"{self.base_url}/Job/jobs.htm?{query}"


__all__ = ["GlassdoorExtractor"]
