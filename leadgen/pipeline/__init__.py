"""Pipeline orchestration: source fan-out, deduplication, recency, enrichment and prioritization."""

from .exceptions import PipelineError, SourcesUnavailableError
from .models import PipelineRunResult, SourceOutcome
from .runner import LeadPipeline, LeadResponse
from .stages import dedupe_candidates, filter_recent, oversample, prioritize, recency_cutoff

__all__ = [
    "LeadPipeline",
    "LeadResponse",
    "PipelineRunResult",
    "SourceOutcome",
    "PipelineError",
    "SourcesUnavailableError",
    "dedupe_candidates",
    "oversample",
    "recency_cutoff",
    "filter_recent",
    "prioritize",
]
