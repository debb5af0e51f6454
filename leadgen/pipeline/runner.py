"""Pipeline orchestration for lead aggregation and enrichment."""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import uuid4

from leadgen.config.models import (
    LIMIT_BOUNDS,
    RECENCY_DAYS_BOUNDS,
    AppConfig,
    PipelineConfig,
    clamp,
)
from leadgen.domain.models import Lead
from leadgen.enrichment.pool import EnrichmentPool
from leadgen.enrichment.resolver import (
    ContactExtractor,
    SearchWebsiteFinder,
    WebsiteContactExtractor,
    WebsiteFinder,
)
from leadgen.logging import get_logger
from leadgen.logging.context import log_context
from leadgen.sources.base import CandidateSource
from leadgen.sources.factory import build_sources
from leadgen.utils.timestamps import utc_now

from .exceptions import SourcesUnavailableError
from .models import PipelineRunResult, SourceOutcome
from .stages import dedupe_candidates, filter_recent, oversample, prioritize

logger = get_logger(__name__, component="pipeline")


@dataclass
class LeadResponse:
    """What the request surface sends back: an HTTP status and a JSON body."""

    status_code: int
    payload: Dict[str, Any]
    result: Optional[PipelineRunResult] = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class LeadPipeline:
    """
    Runs one aggregation: fan-out, dedupe, recency filter, enrichment, prioritization.

    The pipeline holds no state between runs; concurrent runs are independent.
    Collaborators are injected so tests can replace the network with fakes.
    """

    def __init__(
        self,
        sources: Sequence[CandidateSource],
        website_finder: WebsiteFinder,
        contact_extractor: ContactExtractor,
        config: Optional[PipelineConfig] = None,
        clock: Callable[[], datetime] = utc_now,
        sleep=asyncio.sleep,
    ):
        """
        Initialize the pipeline.

        Args:
            sources: Listing sources, fetched concurrently in this order
            website_finder: Resolves practice websites
            contact_extractor: Extracts contacts from a website
            config: Pipeline tunables (defaults when omitted)
            clock: Source of "now" for the recency cutoff
            sleep: Pacing sleep used by the enrichment pool
        """
        self.sources = list(sources)
        self.config = config or PipelineConfig()
        self.clock = clock
        self.pool = EnrichmentPool.from_config(
            website_finder, contact_extractor, self.config, sleep=sleep
        )

    @classmethod
    def from_config(cls, app_config: AppConfig) -> "LeadPipeline":
        """Production wiring: configured sources plus the HTTP resolvers."""
        return cls(
            sources=build_sources(app_config),
            website_finder=SearchWebsiteFinder(app_config.http),
            contact_extractor=WebsiteContactExtractor(app_config.http),
            config=app_config.pipeline,
        )

    async def run(
        self, limit: Optional[int] = None, recency_days: Optional[int] = None
    ) -> PipelineRunResult:
        """
        Execute a complete aggregation run.

        Args:
            limit: Number of leads wanted (clamped; config default when None)
            recency_days: Recency window in days (clamped; config default when None)

        Returns:
            PipelineRunResult with the prioritized leads and per-stage diagnostics

        Raises:
            SourcesUnavailableError: If every source fails, or any fails in strict mode
        """
        limit = clamp(self.config.default_limit if limit is None else limit, LIMIT_BOUNDS)
        recency_days = clamp(
            self.config.default_recency_days if recency_days is None else recency_days,
            RECENCY_DAYS_BOUNDS,
        )
        run_id = uuid4().hex
        started_at = utc_now()

        with log_context(run_id=run_id):
            logger.info(
                "Pipeline run started",
                extra={
                    "event": "pipeline.run.started",
                    "limit": limit,
                    "recency_days": recency_days,
                    "max_pages": self.config.max_pages,
                    "source_count": len(self.sources),
                },
            )

            source_outcomes = await self._fan_out(recency_days)
            candidates = [lead for outcome in source_outcomes for lead in outcome.candidates]

            unique = dedupe_candidates(candidates)
            logger.debug(
                f"Dropped {len(candidates) - len(unique)} duplicate candidates",
                extra={"event": "pipeline.dedupe.completed", "before": len(candidates), "after": len(unique)},
            )

            recent = filter_recent(
                oversample(unique, limit, self.config.oversample_factor),
                recency_days,
                now=self.clock(),
            )

            enriched, enrichment_outcomes = await self.pool.run(recent)
            leads = prioritize(enriched, limit)

            finished_at = utc_now()
            result = PipelineRunResult(
                run_id=run_id,
                started_at=started_at,
                finished_at=finished_at,
                leads=leads,
                source_outcomes=source_outcomes,
                enrichment_outcomes=enrichment_outcomes,
                fetched=len(candidates),
                deduplicated=len(unique),
                recent=len(recent),
                enriched=len(enriched),
                prioritized=len(leads),
            )

            logger.info(
                "Pipeline run completed",
                extra={
                    "event": "pipeline.run.completed",
                    "duration_ms": int(result.duration_seconds * 1000),
                    "fetched": result.fetched,
                    "deduplicated": result.deduplicated,
                    "recent": result.recent,
                    "enriched": result.enriched,
                    "prioritized": result.prioritized,
                    "failed_sources": result.failed_sources,
                },
            )
            return result

    async def fetch_leads(
        self, limit: Optional[int] = None, recency_days: Optional[int] = None
    ) -> LeadResponse:
        """
        Boundary operation behind the leads endpoint.

        Returns ``200 {"leads": [...]}`` on success. Any failure becomes
        ``500 {"error": message}``; partial results are never returned.
        """
        try:
            result = await self.run(limit, recency_days)
        except Exception as e:
            logger.error(
                f"Pipeline run failed: {e}",
                extra={"event": "pipeline.run.failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return LeadResponse(status_code=500, payload={"error": str(e) or "failed"})

        return LeadResponse(status_code=200, payload=result.to_payload(), result=result)

    async def _fan_out(self, recency_days: int) -> List[SourceOutcome]:
        """Fetch every source concurrently; failures are isolated per source."""
        if not self.sources:
            raise SourcesUnavailableError("No listing sources configured")

        outcomes = await asyncio.gather(
            *(self._fetch_source(source, recency_days) for source in self.sources)
        )

        failures = [f"{o.source}: {o.error}" for o in outcomes if not o.ok]
        if failures and (self.config.strict_sources or len(failures) == len(outcomes)):
            raise SourcesUnavailableError(
                "Listing sources unavailable: " + "; ".join(failures), failures=failures
            )
        return list(outcomes)

    async def _fetch_source(self, source: CandidateSource, recency_days: int) -> SourceOutcome:
        start = time.time()
        with log_context(source=source.name):
            try:
                pending = asyncio.to_thread(
                    source.fetch_candidates, recency_days, self.config.max_pages
                )
                if self.config.source_timeout_seconds is not None:
                    candidates = await asyncio.wait_for(
                        pending, timeout=self.config.source_timeout_seconds
                    )
                else:
                    candidates = await pending
            except asyncio.TimeoutError:
                error = f"timed out after {self.config.source_timeout_seconds} seconds"
            except Exception as e:
                error = f"{type(e).__name__}: {e}"
            else:
                return SourceOutcome(
                    source=source.name,
                    ok=True,
                    candidates=list(candidates),
                    duration_seconds=time.time() - start,
                )

            logger.error(
                f"Source {source.name} failed: {error}",
                extra={"event": "source.fetch.failed", "error": error},
            )
            return SourceOutcome(
                source=source.name, ok=False, error=error, duration_seconds=time.time() - start
            )
