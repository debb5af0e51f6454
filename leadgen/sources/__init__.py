"""Listing-source adapters for job posting sites.

This module provides adapters for:
- ZipRecruiter: ziprecruiter.ZipRecruiterSource
- CareerBuilder: careerbuilder.CareerBuilderSource

Use the factory to instantiate adapters from configuration:
    from leadgen.sources.factory import build_sources
    sources = build_sources(app_config)
    candidates = sources[0].fetch_candidates(recency_days=1, max_pages=2)

Anything with a ``name`` and ``fetch_candidates(recency_days, max_pages)``
satisfies the CandidateSource protocol the pipeline consumes.
"""

from .base import BaseSource, CandidateSource
from .careerbuilder import CareerBuilderSource
from .exceptions import (
    SourceConfigurationError,
    SourceError,
    SourceHTTPError,
    SourceResponseError,
    SourceTimeoutError,
)
from .factory import build_sources, get_source
from .ziprecruiter import ZipRecruiterSource

__all__ = [
    # Base and factory
    "BaseSource",
    "CandidateSource",
    "get_source",
    "build_sources",
    # Adapters
    "ZipRecruiterSource",
    "CareerBuilderSource",
    # Exceptions
    "SourceError",
    "SourceHTTPError",
    "SourceTimeoutError",
    "SourceResponseError",
    "SourceConfigurationError",
]
