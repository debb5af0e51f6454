"""Website discovery and contact extraction over HTTP.

The enrichment pool depends only on the two protocols below; these classes
are the production implementations:

- SearchWebsiteFinder: searches the DuckDuckGo HTML endpoint for the
  practice and picks the first result that is not a directory, job board or
  social profile.
- WebsiteContactExtractor: fetches the practice homepage plus up to two
  contact/about pages and runs the heuristics in ``contacts``.

Both are blocking (requests); the pool calls them through asyncio.to_thread.
"""

import re
from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from leadgen.config.models import HttpConfig
from leadgen.domain.models import ContactDetails
from leadgen.logging import get_logger

from . import contacts
from .exceptions import ResolverHTTPError

logger = get_logger(__name__, component="enrichment")


@runtime_checkable
class WebsiteFinder(Protocol):
    def find_website(
        self, name: str, city: Optional[str] = None, state: Optional[str] = None
    ) -> Optional[str]:
        ...


@runtime_checkable
class ContactExtractor(Protocol):
    def extract_contacts(self, url: str) -> ContactDetails:
        ...


class HttpResolver:
    """Shared requests session, timeout and error mapping for resolvers."""

    def __init__(self, http_config: Optional[HttpConfig] = None):
        http_config = http_config or HttpConfig()
        self.timeout = http_config.timeout
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": http_config.user_agent,
            "Accept": "text/html,application/xhtml+xml",
        })

    def _get(self, url: str, params: Optional[dict] = None) -> str:
        """GET a page; raises ResolverHTTPError on transport or HTTP errors."""
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ResolverHTTPError(f"Request to {url} failed: {e}", status_code=0, url=url) from e

        if response.status_code >= 400:
            raise ResolverHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )
        return response.text


class SearchWebsiteFinder(HttpResolver):
    """Find a practice's own website through a web search."""

    SEARCH_URL = "https://html.duckduckgo.com/html/"

    # Hosts that mention practices but are never the practice's own site
    EXCLUDED_DOMAINS = {
        "yelp.com", "facebook.com", "instagram.com", "linkedin.com", "twitter.com",
        "x.com", "youtube.com", "tiktok.com", "pinterest.com", "google.com",
        "healthgrades.com", "zocdoc.com", "vitals.com", "webmd.com", "yellowpages.com",
        "bbb.org", "mapquest.com", "opencare.com", "ratemds.com", "doctor.com",
        "ziprecruiter.com", "careerbuilder.com", "indeed.com", "glassdoor.com",
        "simplyhired.com", "monster.com", "wikipedia.org", "nextdoor.com",
        "duckduckgo.com", "bing.com", "manta.com", "dentalplans.com",
    }

    def find_website(
        self, name: str, city: Optional[str] = None, state: Optional[str] = None
    ) -> Optional[str]:
        """Return the root URL of the practice website, or None.

        Raises:
            ResolverHTTPError: If the search request itself fails
        """
        query = " ".join(part for part in (f'"{name}"', city, state, "dentist") if part)
        html = self._get(self.SEARCH_URL, params={"q": query})
        candidates = self._result_urls(html)

        name_tokens = _name_tokens(name)
        best = None
        for url in candidates:
            host = _host(url)
            if not host or self._is_excluded(host):
                continue
            if best is None:
                best = url
            # A domain containing part of the practice name beats rank order
            if any(token in host.replace("-", "") for token in name_tokens):
                best = url
                break

        website = _site_root(best) if best else None
        logger.debug(
            "Website lookup finished",
            extra={
                "event": "enrichment.website.resolved" if website else "enrichment.website.missing",
                "practice_name": name,
                "website": website,
                "result_count": len(candidates),
            },
        )
        return website

    def _is_excluded(self, host: str) -> bool:
        return any(host == domain or host.endswith("." + domain) for domain in self.EXCLUDED_DOMAINS)

    @staticmethod
    def _result_urls(html: str) -> List[str]:
        soup = BeautifulSoup(html or "", "html.parser")
        urls = []
        for anchor in soup.select("a.result__a, a.result__url"):
            href = anchor.get("href") or ""
            # DuckDuckGo wraps results as //duckduckgo.com/l/?uddg=<target>
            if "uddg=" in href:
                target = parse_qs(urlparse(href).query).get("uddg", [""])[0]
                href = target or href
            if href.startswith(("http://", "https://")) and href not in urls:
                urls.append(href)
        return urls


class WebsiteContactExtractor(HttpResolver):
    """Extract phone, email, decision maker and size from a practice website."""

    def __init__(self, http_config: Optional[HttpConfig] = None, max_subpages: int = 2):
        super().__init__(http_config)
        self.max_subpages = max_subpages

    def extract_contacts(self, url: str) -> ContactDetails:
        """Scrape the homepage and a few contact/about pages.

        Subpage failures are logged and skipped; only a homepage failure raises.

        Raises:
            ResolverHTTPError: If the homepage cannot be fetched
        """
        homepage = BeautifulSoup(self._get(url), "html.parser")
        pages = [homepage]

        for link in contacts.contact_page_links(homepage, url, limit=self.max_subpages):
            try:
                pages.append(BeautifulSoup(self._get(link), "html.parser"))
            except ResolverHTTPError as e:
                logger.debug(
                    f"Skipping contact page {link}",
                    extra={"event": "enrichment.subpage.failed", "url": link, "error": str(e)},
                )

        combined = BeautifulSoup("", "html.parser")
        for page in pages:
            body = page.body or page
            combined.append(BeautifulSoup(str(body), "html.parser"))

        details = ContactDetails(
            phone=contacts.extract_phone(combined),
            email=contacts.extract_email(combined, website=url),
            decision_maker=contacts.extract_decision_maker(combined),
            size=contacts.estimate_practice_size(combined),
        )
        logger.debug(
            "Contacts extracted",
            extra={
                "event": "enrichment.contacts.extracted",
                "website": url,
                "pages": len(pages),
                "has_phone": details.phone is not None,
                "has_email": details.email is not None,
            },
        )
        return details


_STOPWORDS = {"dental", "dentistry", "family", "the", "and", "of", "care", "group", "dds", "pc", "llc", "smile", "smiles"}


def _name_tokens(name: str) -> List[str]:
    words = re.findall(r"[a-z0-9]+", name.lower())
    return [w for w in words if len(w) > 3 and w not in _STOPWORDS]


def _host(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def _site_root(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"
