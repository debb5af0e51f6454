"""Lead enrichment: website discovery, contact extraction and the worker pool."""

from .exceptions import EnrichmentError, ResolverHTTPError
from .models import EnrichmentOutcome, EnrichmentReason, EnrichmentStatus
from .pool import EnrichmentPool, WorkCursor, merge_enrichment
from .resolver import (
    ContactExtractor,
    SearchWebsiteFinder,
    WebsiteContactExtractor,
    WebsiteFinder,
)

__all__ = [
    "EnrichmentPool",
    "WorkCursor",
    "merge_enrichment",
    "EnrichmentOutcome",
    "EnrichmentReason",
    "EnrichmentStatus",
    "WebsiteFinder",
    "ContactExtractor",
    "SearchWebsiteFinder",
    "WebsiteContactExtractor",
    "EnrichmentError",
    "ResolverHTTPError",
]
