"""Base adapter class with shared functionality for all listing sources.

This module provides the abstract base class that listing-site adapters
implement, along with shared utilities for HTTP requests, HTML parsing,
schema.org JobPosting extraction and location parsing.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

import requests
from bs4 import BeautifulSoup

from leadgen.config.models import SourceConfig
from leadgen.domain.models import Lead, Location
from leadgen.logging import get_logger
from leadgen.utils.timestamps import parse_iso_datetime, parse_posted_text

from .exceptions import (
    SourceConfigurationError,
    SourceHTTPError,
    SourceResponseError,
    SourceTimeoutError,
)

logger = get_logger(__name__, component="source")

_LOCATION_RE = re.compile(
    r"^\s*(?P<city>[^,]+?)\s*,\s*(?P<state>[A-Za-z]{2})\b\s*(?P<zip>\d{5}(?:-\d{4})?)?"
)


@runtime_checkable
class CandidateSource(Protocol):
    """Anything the pipeline can fan out to.

    ``fetch_candidates`` is blocking; the pipeline runs it in a worker thread.
    It may raise; the fan-out isolates failures per source.
    """

    name: str

    def fetch_candidates(self, recency_days: int, max_pages: int) -> List[Lead]:
        ...


class BaseSource(ABC):
    """Base class for all listing-site adapters.

    Provides shared HTTP request handling, error mapping, HTML parsing and
    candidate construction. Subclasses implement ``_page_url`` and
    ``_parse_page``; pagination and truncation live here.

    Attributes:
        source_config: Search parameters (query, location) for this source
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
        max_candidates: Maximum candidates returned per fetch (0 = unlimited)
    """

    SOURCE_NAME = "base"

    def __init__(
        self,
        source_config: SourceConfig,
        timeout: int = 20,
        user_agent: str = "Mozilla/5.0 (compatible; DentalLeadAggregator/1.0)",
        max_candidates: int = 500,
    ) -> None:
        """Initialize adapter.

        Raises:
            SourceConfigurationError: If timeout is outside 5-300s or user_agent is empty
        """
        if not 5 <= timeout <= 300:
            raise SourceConfigurationError(
                f"Timeout must be between 5 and 300 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise SourceConfigurationError("user_agent cannot be empty")

        self.source_config = source_config
        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.max_candidates = max_candidates

        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-US,en;q=0.9",
        })

    @property
    def name(self) -> str:
        return self.SOURCE_NAME

    def fetch_candidates(self, recency_days: int, max_pages: int) -> List[Lead]:
        """Fetch up to ``max_pages`` result pages and return raw candidates.

        A failure on the first page propagates (the source is down). A failure
        on a later page ends pagination and keeps what was already collected.
        An empty page also ends pagination.

        Args:
            recency_days: Only ask the site for postings from the last N days
            max_pages: Number of result pages to walk

        Returns:
            Candidates in page order

        Raises:
            SourceError: When the first page cannot be fetched or parsed
        """
        candidates: List[Lead] = []

        for page in range(1, max_pages + 1):
            url = self._page_url(page, recency_days)
            try:
                html = self._make_request(url)
                page_candidates = self._parse_page(html)
            except (SourceHTTPError, SourceTimeoutError, SourceResponseError) as e:
                if page == 1:
                    raise
                logger.warning(
                    f"Stopping pagination for {self.name} after page {page - 1}",
                    extra={
                        "event": "source.page.failed",
                        "source": self.name,
                        "page": page,
                        "error": str(e),
                    },
                )
                break

            logger.debug(
                f"Parsed {len(page_candidates)} candidates from {self.name} page {page}",
                extra={"event": "source.page.parsed", "source": self.name, "page": page},
            )
            if not page_candidates:
                break
            candidates.extend(page_candidates)

        candidates = self._truncate(candidates)

        logger.info(
            f"Fetched {len(candidates)} candidates from {self.name}",
            extra={
                "event": "source.fetch.succeeded",
                "source": self.name,
                "count": len(candidates),
                "recency_days": recency_days,
                "max_pages": max_pages,
            },
        )
        return candidates

    @abstractmethod
    def _page_url(self, page: int, recency_days: int) -> str:
        """Build the search URL for a result page (1-based)."""

    @abstractmethod
    def _parse_page(self, html: str) -> List[Lead]:
        """Turn one result page into candidates."""

    def _make_request(self, url: str, params: Optional[Dict[str, str]] = None) -> str:
        """GET a page and return its body.

        Raises:
            SourceHTTPError: On 4xx/5xx status or connection failure
            SourceTimeoutError: On request timeout
        """
        logger.debug(
            f"HTTP GET {url}",
            extra={"event": "source.fetch.request", "url": url, "timeout": self.timeout},
        )

        try:
            response = self._session.request("GET", url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={"event": "source.fetch.retryable_error", "error_type": "Timeout", "url": url},
            )
            raise SourceTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Request to {url} failed: {e}",
                extra={"event": "source.fetch.error", "error_type": type(e).__name__, "url": url},
            )
            raise SourceHTTPError(f"Request to {url} failed: {e}", status_code=0, url=url) from e

        if response.status_code >= 400:
            is_retryable = response.status_code >= 500 or response.status_code == 429
            logger.log(
                logging.WARNING if is_retryable else logging.ERROR,
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "source.fetch.retryable_error" if is_retryable else "source.fetch.error",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise SourceHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        return response.text

    @staticmethod
    def _soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html or "", "html.parser")

    def _job_postings_from_ld_json(self, soup: BeautifulSoup) -> List[Lead]:
        """Extract candidates from schema.org JobPosting blocks.

        Listing sites embed ``<script type="application/ld+json">`` with either
        a single JobPosting, a list, an ``@graph`` or an ItemList wrapping them.
        Malformed blocks are skipped.
        """
        candidates = []
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            try:
                data = json.loads(script.string or script.get_text() or "")
            except (TypeError, ValueError):
                continue
            for posting in _iter_job_postings(data):
                lead = self._lead_from_job_posting(posting)
                if lead is not None:
                    candidates.append(lead)
        return candidates

    def _lead_from_job_posting(self, posting: Dict[str, Any]) -> Optional[Lead]:
        org = posting.get("hiringOrganization") or {}
        practice_name = org.get("name") if isinstance(org, dict) else org
        if not practice_name or not str(practice_name).strip():
            return None

        location = None
        job_location = posting.get("jobLocation")
        if isinstance(job_location, list):
            job_location = job_location[0] if job_location else None
        if isinstance(job_location, dict):
            address = job_location.get("address") or {}
            if isinstance(address, dict):
                location = Location(
                    city=_scalar_text(address.get("addressLocality")),
                    state=_scalar_text(address.get("addressRegion")),
                    zip=_scalar_text(address.get("postalCode")),
                )

        date_posted = posting.get("datePosted")
        posted_at = parse_iso_datetime(date_posted) if isinstance(date_posted, str) else None
        return self._build_lead(
            practice_name=str(practice_name),
            location=location,
            posted_at=posted_at,
            posted_at_text=date_posted if posted_at is None and isinstance(date_posted, str) else None,
            source_url=posting.get("url"),
        )

    def _build_lead(
        self,
        practice_name: Optional[str],
        location: Optional[Location] = None,
        posted_at=None,
        posted_at_text: Optional[str] = None,
        source_url: Optional[str] = None,
    ) -> Optional[Lead]:
        """Build a candidate, resolving relative posting text when no timestamp is given.

        Returns None (and logs) when the card is unusable, e.g. a blank name.
        """
        if posted_at is None and posted_at_text:
            posted_at = parse_posted_text(posted_at_text)

        try:
            return Lead(
                practice_name=practice_name or "",
                location=location,
                posted_at=posted_at,
                posted_at_text=posted_at_text,
                source_url=source_url,
                source=self.name,
            )
        except ValueError as e:
            logger.warning(
                f"Skipping unusable {self.name} listing",
                extra={"event": "source.listing.skipped", "source": self.name, "error": str(e)},
            )
            return None

    @staticmethod
    def _parse_location(text: Optional[str]) -> Optional[Location]:
        """Parse "Austin, TX 78701" style location strings.

        Returns None for remote/nationwide strings that carry no city/state.
        """
        if not text:
            return None
        match = _LOCATION_RE.match(text)
        if not match:
            return None
        return Location(city=match.group("city"), state=match.group("state"), zip=match.group("zip"))

    @staticmethod
    def _select_text(node, selectors: Iterable[str]) -> Optional[str]:
        """First non-empty text among CSS selectors."""
        for selector in selectors:
            found = node.select_one(selector)
            if found:
                text = found.get_text(" ", strip=True)
                if text:
                    return text
        return None

    def _truncate(self, candidates: List[Lead]) -> List[Lead]:
        if self.max_candidates > 0 and len(candidates) > self.max_candidates:
            logger.warning(
                "Truncating candidates to max_candidates limit",
                extra={
                    "source": self.name,
                    "total": len(candidates),
                    "max": self.max_candidates,
                },
            )
            return candidates[: self.max_candidates]
        return candidates


def _scalar_text(value: Any) -> Optional[str]:
    """JSON-LD address parts are sometimes numbers (postalCode: 78702)."""
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _iter_job_postings(data: Any) -> Iterable[Dict[str, Any]]:
    """Yield every JobPosting dict nested in a JSON-LD payload."""
    if isinstance(data, list):
        for item in data:
            yield from _iter_job_postings(item)
        return
    if not isinstance(data, dict):
        return

    kind = data.get("@type")
    if kind == "JobPosting" or (isinstance(kind, list) and "JobPosting" in kind):
        yield data
        return

    for key in ("@graph", "itemListElement"):
        if key in data:
            yield from _iter_job_postings(data[key])
    if "item" in data:
        yield from _iter_job_postings(data["item"])
