"""Per-candidate outcomes recorded by the enrichment pool."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from leadgen.domain.models import Lead


class EnrichmentStatus(str, Enum):
    KEPT = "kept"
    DROPPED = "dropped"


class EnrichmentReason(str, Enum):
    """Why a candidate was dropped, or kept without a website."""

    NO_WEBSITE = "no_website"
    RESOLVER_ERROR = "resolver_error"
    VALIDATION_ERROR = "validation_error"
    TIMEOUT = "timeout"


@dataclass
class EnrichmentOutcome:
    """
    Result of enriching one candidate.

    Attributes:
        index: Position of the candidate in the pool input
        practice_name: Candidate practice name (for diagnostics)
        status: kept or dropped
        reason: Drop reason; NO_WEBSITE also appears on kept outcomes
        error: Error message for dropped candidates
        lead: The validated, enriched lead when kept
    """

    index: int
    practice_name: str
    status: EnrichmentStatus
    reason: Optional[EnrichmentReason] = None
    error: Optional[str] = None
    lead: Optional[Lead] = None

    @property
    def kept(self) -> bool:
        return self.status == EnrichmentStatus.KEPT
