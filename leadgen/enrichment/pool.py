"""Bounded-concurrency enrichment of lead candidates.

A fixed number of asyncio workers share a ``WorkCursor``. Each worker claims
the next candidate index, sleeps a short staggered delay, then resolves the
practice website and contact details through the blocking resolver, which
runs in a worker thread. Enriched data only fills empty fields, and the merged
record is re-validated before it is kept.

A failure for one candidate is recorded as an ``EnrichmentOutcome`` and the
worker moves on; sibling workers are never affected.
"""

import asyncio
import threading
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from leadgen.config.models import PipelineConfig
from leadgen.domain.models import ContactDetails, Lead
from leadgen.logging import get_logger
from leadgen.logging.context import log_context

from .models import EnrichmentOutcome, EnrichmentReason, EnrichmentStatus
from .resolver import ContactExtractor, WebsiteFinder

logger = get_logger(__name__, component="enrichment")

SleepFunc = Callable[[float], Awaitable[Any]]


class WorkCursor:
    """Atomic fetch-and-increment over ``[0, total)``.

    Every index is handed out exactly once, whether claimers are asyncio
    workers or real threads.
    """

    def __init__(self, total: int):
        self.total = total
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> Optional[int]:
        """Return the next unclaimed index, or None when exhausted."""
        with self._lock:
            if self._next >= self.total:
                return None
            index = self._next
            self._next += 1
            return index


def merge_enrichment(
    lead: Lead, website: Optional[str], contacts: Optional[ContactDetails]
) -> Dict[str, Any]:
    """Combine a candidate with resolved data; existing values always win.

    Returns a plain dict ready for ``Lead.model_validate``.

    Example:
        >>> lead = Lead(practice_name="Bright Smiles", phone="(512) 555-0100")
        >>> merged = merge_enrichment(lead, "https://brightsmiles.com",
        ...                           ContactDetails(phone="(512) 555-0199"))
        >>> merged["phone"], merged["website"]
        ('(512) 555-0100', 'https://brightsmiles.com')
    """
    contacts = contacts or ContactDetails()
    data = lead.model_dump()
    resolved = {
        "website": website,
        "phone": contacts.phone,
        "email": contacts.email,
        "decision_maker_name": contacts.decision_maker,
        "practice_size": contacts.size,
    }
    for field_name, value in resolved.items():
        if data.get(field_name) is None and value is not None:
            data[field_name] = value
    return data


class EnrichmentPool:
    """
    Fixed-size worker pool that enriches candidates with website contacts.

    Attributes:
        website_finder: Resolves a practice name and location to a website
        contact_extractor: Pulls contact details from a website
        pool_size: Upper bound on concurrent workers
        pacing_base_seconds: Delay before every item
        pacing_step_seconds: Extra delay per worker slot, staggering requests
        call_timeout: Optional timeout applied to each resolver call
    """

    def __init__(
        self,
        website_finder: WebsiteFinder,
        contact_extractor: ContactExtractor,
        pool_size: int = 6,
        pacing_base_seconds: float = 0.1,
        pacing_step_seconds: float = 0.05,
        call_timeout: Optional[float] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        if pool_size < 1:
            raise ValueError(f"pool_size must be at least 1, got: {pool_size}")
        self.website_finder = website_finder
        self.contact_extractor = contact_extractor
        self.pool_size = pool_size
        self.pacing_base_seconds = pacing_base_seconds
        self.pacing_step_seconds = pacing_step_seconds
        self.call_timeout = call_timeout
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        website_finder: WebsiteFinder,
        contact_extractor: ContactExtractor,
        config: PipelineConfig,
        sleep: SleepFunc = asyncio.sleep,
    ) -> "EnrichmentPool":
        return cls(
            website_finder,
            contact_extractor,
            pool_size=config.pool_size,
            pacing_base_seconds=config.pacing_base_seconds,
            pacing_step_seconds=config.pacing_step_seconds,
            call_timeout=config.resolver_timeout_seconds,
            sleep=sleep,
        )

    def pacing_delay(self, index: int, concurrency: int) -> float:
        """Delay before processing ``index``: base + (index mod concurrency) * step."""
        return self.pacing_base_seconds + (index % concurrency) * self.pacing_step_seconds

    async def run(self, candidates: Sequence[Lead]) -> Tuple[List[Lead], List[EnrichmentOutcome]]:
        """
        Enrich every candidate once.

        Args:
            candidates: Deduplicated, recency-filtered candidates

        Returns:
            Tuple of (kept leads in completion order, outcomes sorted by index)
        """
        if not candidates:
            return [], []

        concurrency = min(self.pool_size, len(candidates))
        cursor = WorkCursor(len(candidates))
        leads: List[Lead] = []
        outcomes: List[EnrichmentOutcome] = []
        started = time.time()

        logger.info(
            f"Enriching {len(candidates)} candidates with {concurrency} workers",
            extra={
                "event": "enrichment.pool.started",
                "candidate_count": len(candidates),
                "concurrency": concurrency,
            },
        )

        async def worker(worker_id: int) -> None:
            while True:
                index = cursor.claim()
                if index is None:
                    return
                await self._sleep(self.pacing_delay(index, concurrency))
                outcome = await self._enrich_one(index, candidates[index], worker_id)
                outcomes.append(outcome)
                if outcome.kept:
                    leads.append(outcome.lead)

        await asyncio.gather(*(worker(worker_id) for worker_id in range(concurrency)))

        outcomes.sort(key=lambda outcome: outcome.index)
        logger.info(
            f"Enrichment finished: {len(leads)} kept, {len(outcomes) - len(leads)} dropped",
            extra={
                "event": "enrichment.pool.completed",
                "kept": len(leads),
                "dropped": len(outcomes) - len(leads),
                "duration_ms": int((time.time() - started) * 1000),
            },
        )
        return leads, outcomes

    async def _call(self, func: Callable, *args):
        """Run a blocking resolver call in a thread, honoring call_timeout."""
        pending = asyncio.to_thread(func, *args)
        if self.call_timeout is None:
            return await pending
        return await asyncio.wait_for(pending, timeout=self.call_timeout)

    async def _enrich_one(self, index: int, lead: Lead, worker_id: int) -> EnrichmentOutcome:
        with log_context(lead_index=index, worker_id=worker_id):
            try:
                website = await self._call(
                    self.website_finder.find_website, lead.practice_name, lead.city, lead.state
                )
                contacts = None
                if website:
                    contacts = await self._call(self.contact_extractor.extract_contacts, website)
                enriched = Lead.model_validate(merge_enrichment(lead, website, contacts))

            except asyncio.TimeoutError as e:
                if self.call_timeout is None:
                    return self._dropped(
                        index, lead, EnrichmentReason.RESOLVER_ERROR, f"{type(e).__name__}: {e}"
                    )
                return self._dropped(
                    index, lead, EnrichmentReason.TIMEOUT,
                    f"Resolver call exceeded {self.call_timeout} seconds",
                )
            except ValidationError as e:
                return self._dropped(index, lead, EnrichmentReason.VALIDATION_ERROR, str(e))
            except Exception as e:
                return self._dropped(
                    index, lead, EnrichmentReason.RESOLVER_ERROR, f"{type(e).__name__}: {e}"
                )

            logger.debug(
                f"Enriched {lead.practice_name}",
                extra={
                    "event": "enrichment.lead.kept",
                    "practice_name": lead.practice_name,
                    "has_website": website is not None,
                    "has_contact": enriched.has_contact_channel,
                },
            )
            return EnrichmentOutcome(
                index=index,
                practice_name=lead.practice_name,
                status=EnrichmentStatus.KEPT,
                reason=None if website else EnrichmentReason.NO_WEBSITE,
                lead=enriched,
            )

    @staticmethod
    def _dropped(
        index: int, lead: Lead, reason: EnrichmentReason, error: str
    ) -> EnrichmentOutcome:
        logger.warning(
            f"Dropping candidate {lead.practice_name}: {reason.value}",
            extra={
                "event": "enrichment.lead.dropped",
                "practice_name": lead.practice_name,
                "reason": reason.value,
                "error": error,
            },
        )
        return EnrichmentOutcome(
            index=index,
            practice_name=lead.practice_name,
            status=EnrichmentStatus.DROPPED,
            reason=reason,
            error=error,
        )
