"""ZipRecruiter listing adapter."""

from __future__ import annotations

from typing import List
from urllib.parse import urlencode, urljoin

from leadgen.domain.models import Lead

from .base import BaseSource


class ZipRecruiterSource(BaseSource):
    """Adapter for ZipRecruiter job search results.

    Result pages embed a JSON-LD ItemList of JobPosting objects, which is the
    preferred input. Job cards are parsed as a fallback when the page ships
    without structured data.

    Search Details:
        Endpoint: https://www.ziprecruiter.com/jobs-search
        Params: search, location, days (recency window), page (1-based)
        Authentication: None (public)
    """

    SOURCE_NAME = "ziprecruiter"
    BASE_URL = "https://www.ziprecruiter.com"
    SEARCH_PATH = "/jobs-search"

    CARD_SELECTORS = ["article.job_result", "div.job_result_two_pane", "li.job-listing"]
    COMPANY_SELECTORS = ["a.company_name", "[data-testid='job-card-company']", ".t_org_link", ".company"]
    LOCATION_SELECTORS = ["a.company_location", "[data-testid='job-card-location']", ".t_location_link", ".location"]
    POSTED_SELECTORS = [".job_age", "[data-testid='job-card-posted']", ".posted_time"]
    LINK_SELECTORS = ["a.job_link", "h2 a", "a[href*='/jobs/']", "a[href*='/c/']"]

    def _page_url(self, page: int, recency_days: int) -> str:
        params = {
            "search": self.source_config.query,
            "location": self.source_config.location,
            "days": str(recency_days),
            "page": str(page),
        }
        return f"{self.BASE_URL}{self.SEARCH_PATH}?{urlencode(params)}"

    def _parse_page(self, html: str) -> List[Lead]:
        soup = self._soup(html)

        candidates = self._job_postings_from_ld_json(soup)
        if candidates:
            return candidates

        for selector in self.CARD_SELECTORS:
            cards = soup.select(selector)
            if not cards:
                continue
            for card in cards:
                link = None
                for link_selector in self.LINK_SELECTORS:
                    found = card.select_one(link_selector)
                    if found and found.get("href"):
                        link = urljoin(self.BASE_URL, found["href"])
                        break

                lead = self._build_lead(
                    practice_name=self._select_text(card, self.COMPANY_SELECTORS),
                    location=self._parse_location(self._select_text(card, self.LOCATION_SELECTORS)),
                    posted_at_text=self._select_text(card, self.POSTED_SELECTORS),
                    source_url=link,
                )
                if lead is not None:
                    candidates.append(lead)
            break

        return candidates
