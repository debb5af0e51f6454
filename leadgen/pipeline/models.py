"""Data models for pipeline execution tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from leadgen.domain.models import Lead
from leadgen.enrichment.models import EnrichmentOutcome


@dataclass
class SourceOutcome:
    """
    Result of fetching candidates from one listing source.

    Attributes:
        source: Source name
        ok: Whether the fetch succeeded
        candidates: Candidates returned (empty on failure)
        error: Error message if the fetch failed
        duration_seconds: Time spent fetching
    """

    source: str
    ok: bool
    candidates: List[Lead] = field(default_factory=list)
    error: Optional[str] = None
    duration_seconds: float = 0.0


@dataclass
class PipelineRunResult:
    """
    Aggregate results from one aggregation run.

    Attributes:
        run_id: Identifier stamped on every log record of the run
        started_at: UTC timestamp when the run began
        finished_at: UTC timestamp when the run completed
        leads: Final prioritized leads
        source_outcomes: Per-source fetch results, in source order
        enrichment_outcomes: Per-candidate enrichment results, by index
        fetched: Candidates returned by all sources combined
        deduplicated: Candidates left after deduplication
        recent: Candidates left after oversampling and the recency filter
        enriched: Candidates kept by the enrichment pool
        prioritized: Leads in the final result
        duration_seconds: Total run time
    """

    run_id: str
    started_at: datetime
    finished_at: datetime
    leads: List[Lead] = field(default_factory=list)
    source_outcomes: List[SourceOutcome] = field(default_factory=list)
    enrichment_outcomes: List[EnrichmentOutcome] = field(default_factory=list)
    fetched: int = 0
    deduplicated: int = 0
    recent: int = 0
    enriched: int = 0
    prioritized: int = 0
    duration_seconds: float = 0.0

    def __post_init__(self):
        """Compute derived counts if not already set."""
        if self.prioritized == 0:
            self.prioritized = len(self.leads)
        if self.duration_seconds == 0.0:
            self.duration_seconds = (self.finished_at - self.started_at).total_seconds()

    @property
    def failed_sources(self) -> List[str]:
        return [outcome.source for outcome in self.source_outcomes if not outcome.ok]

    def to_payload(self) -> Dict[str, Any]:
        """The success body of the leads endpoint."""
        return {"leads": [lead.to_payload() for lead in self.leads]}
