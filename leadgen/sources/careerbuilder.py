"""CareerBuilder listing adapter."""

from __future__ import annotations

from typing import List
from urllib.parse import urlencode, urljoin

from leadgen.domain.models import Lead

from .base import BaseSource


class CareerBuilderSource(BaseSource):
    """Adapter for CareerBuilder job search results.

    CareerBuilder renders results as ``li.data-results-content-parent`` cards
    whose details block lists company and location as sibling spans. Posting
    age is relative text ("Today", "2 days ago").

    Search Details:
        Endpoint: https://www.careerbuilder.com/jobs
        Params: keywords, location, posted (days), page_number (1-based)
        Authentication: None (public)
    """

    SOURCE_NAME = "careerbuilder"
    BASE_URL = "https://www.careerbuilder.com"
    SEARCH_PATH = "/jobs"

    CARD_SELECTOR = "li.data-results-content-parent"
    DETAIL_SELECTOR = ".data-details span"
    POSTED_SELECTORS = [".data-results-publish-time", ".job-posted-date"]
    LINK_SELECTORS = ["a.data-results-content", "a.job-listing-item", "a[href*='/job/']"]

    def _page_url(self, page: int, recency_days: int) -> str:
        params = {
            "keywords": self.source_config.query,
            "location": self.source_config.location,
            "posted": str(recency_days),
            "page_number": str(page),
        }
        return f"{self.BASE_URL}{self.SEARCH_PATH}?{urlencode(params)}"

    def _parse_page(self, html: str) -> List[Lead]:
        soup = self._soup(html)

        cards = soup.select(self.CARD_SELECTOR)
        if not cards:
            # Some result variants only ship structured data
            return self._job_postings_from_ld_json(soup)

        candidates = []
        for card in cards:
            details = [
                span.get_text(" ", strip=True)
                for span in card.select(self.DETAIL_SELECTOR)
                if span.get_text(strip=True)
            ]
            practice_name = details[0] if details else None
            location_text = details[1] if len(details) > 1 else None

            link = None
            for link_selector in self.LINK_SELECTORS:
                found = card.select_one(link_selector)
                if found and found.get("href"):
                    link = urljoin(self.BASE_URL, found["href"])
                    break

            lead = self._build_lead(
                practice_name=practice_name,
                location=self._parse_location(location_text),
                posted_at_text=self._select_text(card, self.POSTED_SELECTORS),
                source_url=link,
            )
            if lead is not None:
                candidates.append(lead)

        return candidates
