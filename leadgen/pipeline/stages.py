"""Pure list transforms applied between fan-out and enrichment.

Each stage takes a list of leads and returns a new list; none of them mutate
their input.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from leadgen.domain.models import Lead
from leadgen.utils.timestamps import ensure_utc, utc_now


def dedupe_candidates(candidates: Iterable[Lead]) -> List[Lead]:
    """Keep the first candidate per identity key, preserving order.

    Example:
        >>> a = Lead(practice_name="Bright Smiles", location={"city": "Austin", "state": "TX"})
        >>> b = Lead(practice_name="BRIGHT SMILES", location={"city": "Austin", "state": "TX"})
        >>> dedupe_candidates([a, b]) == [a]
        True
    """
    seen = set()
    unique = []
    for candidate in candidates:
        key = candidate.identity_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def oversample(candidates: List[Lead], limit: int, factor: int = 2) -> List[Lead]:
    """First ``factor * limit`` candidates; headroom for enrichment losses."""
    return candidates[: factor * limit]


def recency_cutoff(recency_days: int, now: Optional[datetime] = None) -> datetime:
    return (ensure_utc(now) if now else utc_now()) - timedelta(days=recency_days)


def filter_recent(
    candidates: Iterable[Lead], recency_days: int, now: Optional[datetime] = None
) -> List[Lead]:
    """Drop candidates whose known posting time is older than the cutoff.

    Candidates with no posting time are kept; the boundary is inclusive.
    """
    cutoff = recency_cutoff(recency_days, now)
    return [c for c in candidates if c.posted_at is None or c.posted_at >= cutoff]


def prioritize(leads: Iterable[Lead], limit: int) -> List[Lead]:
    """Leads with a phone or email, truncated to ``limit`` in input order."""
    return [lead for lead in leads if lead.has_contact_channel][:limit]
