"""Heuristics for pulling contact details out of practice website HTML.

All functions are pure: they take parsed HTML (BeautifulSoup) or text and
return the best guess or None. Network access lives in ``resolver``.
"""

import re
from typing import Iterable, List, Optional
from urllib.parse import unquote, urljoin, urlparse

from bs4 import BeautifulSoup

PHONE_RE = re.compile(
    r"(?<!\d)(?:\+?1[\s.\-]?)?\(?([2-9]\d{2})\)?[\s.\-]?(\d{3})[\s.\-]?(\d{4})(?!\d)"
)
EMAIL_RE = re.compile(r"[A-Z0-9._%+\-]+@[A-Z0-9.\-]+\.[A-Z]{2,}", re.IGNORECASE)
DOCTOR_RE = re.compile(
    r"\bDr\.?\s+([A-Z][a-zA-Z'\-]+(?:\s+[A-Z]\.)?(?:\s+[A-Z][a-zA-Z'\-]+)?)"
)
MANAGER_RE = re.compile(
    r"(?:Office Manager|Practice Manager|Owner)\s*[:\-–]\s*([A-Z][a-z]+(?:\s+[A-Z][a-zA-Z'\-]+){1,2})"
)

# Contact addresses from site builders, placeholders and throwaway inboxes
BLACKLIST_EMAIL_DOMAINS = {
    "example.com", "domain.com", "yourdomain.com", "email.com",
    "wixpress.com", "wix.com", "squarespace.com", "godaddy.com",
    "sentry.io", "sentry-next.wixpress.com", "mailinator.com",
}

ROLE_EMAIL_PRIORITY = [
    "frontdesk@", "office@", "info@", "contact@", "hello@", "appointments@",
    "scheduling@", "smile@", "admin@", "reception@",
]

ASSET_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp")

OBFUSCATION_PATTERNS = [
    (re.compile(r"\s*\[\s*at\s*\]\s*", re.IGNORECASE), "@"),
    (re.compile(r"\s*\(\s*at\s*\)\s*", re.IGNORECASE), "@"),
    (re.compile(r"\s*\[\s*dot\s*\]\s*", re.IGNORECASE), "."),
    (re.compile(r"\s*\(\s*dot\s*\)\s*", re.IGNORECASE), "."),
]

CONTACT_LINK_HINTS = ("contact", "about", "team", "our-office", "meet", "doctor")


def format_phone(area: str, prefix: str, line: str) -> str:
    return f"({area}) {prefix}-{line}"


def normalize_phone(raw: str) -> Optional[str]:
    """Normalize a US phone number to ``(AAA) PPP-LLLL``.

    Example:
        >>> normalize_phone("+1 512.555.0142")
        '(512) 555-0142'
    """
    match = PHONE_RE.search(raw or "")
    if not match:
        return None
    return format_phone(*match.groups())


def extract_phone(soup: BeautifulSoup) -> Optional[str]:
    """Prefer ``tel:`` links, then the first phone-shaped string in the text."""
    for anchor in soup.select("a[href^='tel:'], a[href^='TEL:']"):
        phone = normalize_phone(unquote(anchor["href"][4:]))
        if phone:
            return phone

    return normalize_phone(page_text(soup))


def deobfuscate(text: str) -> str:
    """Undo "name [at] domain [dot] com" style obfuscation."""
    for pattern, replacement in OBFUSCATION_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _usable_email(email: str) -> bool:
    lowered = email.lower()
    if lowered.endswith(ASSET_SUFFIXES):
        return False
    domain = lowered.rsplit("@", 1)[-1]
    return domain not in BLACKLIST_EMAIL_DOMAINS


def rank_emails(emails: Iterable[str], website: Optional[str] = None) -> Optional[str]:
    """Pick the best contact address.

    Order: same domain as the website first, then front-desk style role
    addresses, then first seen.
    """
    unique: List[str] = []
    for email in emails:
        cleaned = email.strip().strip(".").lower()
        if cleaned and _usable_email(cleaned) and cleaned not in unique:
            unique.append(cleaned)
    if not unique:
        return None

    site_domain = ""
    if website:
        site_domain = (urlparse(website).hostname or "").lower()
        if site_domain.startswith("www."):
            site_domain = site_domain[4:]

    def score(email: str):
        domain = email.rsplit("@", 1)[-1]
        same_domain = bool(site_domain) and (domain == site_domain or domain.endswith("." + site_domain))
        role_rank = next(
            (rank for rank, prefix in enumerate(ROLE_EMAIL_PRIORITY) if email.startswith(prefix)),
            len(ROLE_EMAIL_PRIORITY),
        )
        return (0 if same_domain else 1, role_rank, unique.index(email))

    return min(unique, key=score)


def extract_email(soup: BeautifulSoup, website: Optional[str] = None) -> Optional[str]:
    """Collect ``mailto:`` links and addresses in the text, return the best one."""
    found: List[str] = []
    for anchor in soup.select("a[href^='mailto:'], a[href^='MAILTO:']"):
        address = unquote(anchor["href"][7:]).split("?", 1)[0]
        if EMAIL_RE.fullmatch(address.strip()):
            found.append(address)

    found.extend(EMAIL_RE.findall(deobfuscate(page_text(soup))))
    return rank_emails(found, website)


def find_doctors(text: str) -> List[str]:
    """Distinct "Dr. First Last" names in order of appearance."""
    names: List[str] = []
    for match in DOCTOR_RE.finditer(text or ""):
        name = f"Dr. {' '.join(match.group(1).split())}"
        if name not in names:
            names.append(name)
    return names


def extract_decision_maker(soup: BeautifulSoup) -> Optional[str]:
    """First doctor named on the site, else a named office manager/owner."""
    text = page_text(soup)
    doctors = find_doctors(text)
    if doctors:
        return doctors[0]

    match = MANAGER_RE.search(text)
    if match:
        return " ".join(match.group(1).split())
    return None


def estimate_practice_size(soup: BeautifulSoup) -> Optional[str]:
    """Bucket the practice by the number of distinct doctors on the site."""
    text = page_text(soup)
    lowered = text.lower()
    if re.search(r"\b(our|all|\d+)\s+(locations|offices)\b", lowered):
        return "multi-location"

    providers = len(find_doctors(text))
    if providers == 0:
        return None
    if providers == 1:
        return "solo (1 provider)"
    if providers <= 3:
        return f"small ({providers} providers)"
    return f"group ({providers} providers)"


def contact_page_links(soup: BeautifulSoup, base_url: str, limit: int = 2) -> List[str]:
    """Same-site links that look like contact/about/team pages."""
    base_host = (urlparse(base_url).hostname or "").lower()
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        if len(links) >= limit:
            break
        href = anchor["href"].strip()
        if href.startswith(("mailto:", "tel:", "#", "javascript:")):
            continue
        label = f"{href} {anchor.get_text(' ', strip=True)}".lower()
        if not any(hint in label for hint in CONTACT_LINK_HINTS):
            continue
        absolute = urljoin(base_url, href)
        if (urlparse(absolute).hostname or "").lower() != base_host:
            continue
        absolute = absolute.split("#", 1)[0]
        if absolute.rstrip("/") != base_url.rstrip("/") and absolute not in links:
            links.append(absolute)
    return links


def page_text(soup: BeautifulSoup) -> str:
    """Visible text of a page, skipping script and style bodies."""
    return " ".join(
        text for text in soup.stripped_strings
        if text.parent is None or text.parent.name not in ("script", "style", "noscript")
    )
