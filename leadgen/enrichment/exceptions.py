"""Custom exceptions for website discovery and contact extraction."""


class EnrichmentError(Exception):
    """Base exception for resolver failures.

    Raised inside the enrichment pool; the pool records it as a dropped
    outcome for that single lead and moves on.
    """

    pass


class ResolverHTTPError(EnrichmentError):
    """A search or practice-website request failed."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url
