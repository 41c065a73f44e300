"""Indeed India search results."""

from __future__ import annotations

from urllib.parse import urlencode

from ..models import SourceIdentity
from .base import CardExtractor


class IndeedExtractor(CardExtractor):
    identity = SourceIdentity.INDEED
    display_name = "Indeed"
    base_url = "https://www.indeed.co.in"

    card_selectors = (".job_seen_beacon", ".jobsearch-SerpJobCard", "div.result")
    title_selectors = ("h2.jobTitle a", ".jobTitle span", "a[id^='job_']")
    company_selectors = (".companyName", "[data-testid='company-name']", ".company")
    location_selectors = (".companyLocation", "[data-testid='text-location']")
    salary_selectors = (".salary-snippet-container", ".salaryOnly", "[class*='salary']")
    description_selectors = (".job-snippet", ".jobCardShelfContainer", ".job-description")
    link_selectors = ("h2.jobTitle a::attr:href", "a.jcs-JobTitle::attr:href")
    date_selectors = (".date", ".my-job-date", "[data-testid='myJobsStateDate']")

    def build_search_url(self, page: int) -> str:
        query = urlencode(
            {
                "q": self.config.search_query,
                "l": self.config.location,
                "start": (page - 1) * 10,
                "fromage": self.config.max_age_days,
            }
        )
        return f"{self.base_url}/jobs?{query}"


__all__ = ["IndeedExtractor"]
