"""
FastAPI application exposing the lead pipeline.

Endpoints:
    GET /api/leads       JSON ``{"leads": [...]}`` or ``500 {"error": ...}``
    GET /api/leads.csv   CSV attachment; ``run_id`` exports a run already shown
                         on the operator page, otherwise a fresh run is made
    GET /                Operator page with the lead table
    GET /health          Liveness probe

``limit`` and ``days`` are read as raw strings and clamped; a malformed value
falls back to the default instead of producing a validation error.
"""

from collections import OrderedDict
from typing import List, Optional
from urllib.parse import urlencode

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse, Response

from leadgen.config.environment import clamp_int
from leadgen.config.models import LIMIT_BOUNDS, RECENCY_DAYS_BOUNDS, AppConfig
from leadgen.domain.models import Lead
from leadgen.export import csv_filename, leads_to_csv
from leadgen.logging import get_logger
from leadgen.pipeline.models import PipelineRunResult
from leadgen.pipeline.runner import LeadPipeline

from .rendering import PageRenderer

logger = get_logger(__name__, component="api")

# Rendered runs kept for export; older ones are evicted first.
RECENT_RUNS_SIZE = 20


class RecentRuns:
    """Results of the last rendered runs, keyed by run_id."""

    def __init__(self, max_size: int = RECENT_RUNS_SIZE):
        self.max_size = max_size
        self._runs: "OrderedDict[str, PipelineRunResult]" = OrderedDict()

    def add(self, result: PipelineRunResult) -> None:
        self._runs[result.run_id] = result
        self._runs.move_to_end(result.run_id)
        while len(self._runs) > self.max_size:
            self._runs.popitem(last=False)

    def get(self, run_id: str) -> Optional[PipelineRunResult]:
        return self._runs.get(run_id)

    def __len__(self) -> int:
        return len(self._runs)


def csv_response(leads: List[Lead]) -> Response:
    filename = csv_filename()
    logger.info(
        f"Exporting {len(leads)} leads as CSV",
        extra={"event": "api.export.csv", "count": len(leads), "filename": filename},
    )
    return Response(
        content=leads_to_csv(leads),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def create_app(pipeline: LeadPipeline, app_config: Optional[AppConfig] = None) -> FastAPI:
    """
    Build the FastAPI app around a pipeline instance.

    Args:
        pipeline: Pipeline that serves every request
        app_config: Loaded configuration (request defaults come from its pipeline section)
    """
    app_config = app_config or AppConfig()
    defaults = app_config.pipeline
    renderer = PageRenderer()
    recent_runs = RecentRuns()

    app = FastAPI(title="Dental Lead Aggregator", version="0.1.0")
    app.state.recent_runs = recent_runs

    def request_params(limit: Optional[str], days: Optional[str]):
        return (
            clamp_int(limit, defaults.default_limit, *LIMIT_BOUNDS),
            clamp_int(days, defaults.default_recency_days, *RECENCY_DAYS_BOUNDS),
        )

    @app.get("/api/leads")
    async def get_leads(limit: Optional[str] = None, days: Optional[str] = None) -> JSONResponse:
        """Run the pipeline and return the prioritized leads."""
        limit_value, days_value = request_params(limit, days)
        response = await pipeline.fetch_leads(limit_value, days_value)
        return JSONResponse(status_code=response.status_code, content=response.payload)

    @app.get("/api/leads.csv")
    async def get_leads_csv(
        limit: Optional[str] = None,
        days: Optional[str] = None,
        run_id: Optional[str] = None,
    ) -> Response:
        """Return leads as a CSV download.

        With ``run_id`` the leads of that rendered run are exported as shown,
        without scraping again.
        """
        if run_id:
            result = recent_runs.get(run_id)
            if result is None:
                logger.warning(
                    f"CSV export requested for unknown run {run_id}",
                    extra={"event": "api.export.unknown_run", "run_id": run_id},
                )
                return JSONResponse(
                    status_code=404,
                    content={"error": f"Run {run_id} is not available; fetch leads again"},
                )
            return csv_response(result.leads)

        limit_value, days_value = request_params(limit, days)
        response = await pipeline.fetch_leads(limit_value, days_value)
        if not response.ok:
            return JSONResponse(status_code=response.status_code, content=response.payload)
        return csv_response(response.result.leads)

    @app.get("/", response_class=HTMLResponse)
    async def index(limit: Optional[str] = None, days: Optional[str] = None) -> HTMLResponse:
        """Operator page: runs the pipeline and renders the lead table."""
        limit_value, days_value = request_params(limit, days)
        response = await pipeline.fetch_leads(limit_value, days_value)

        if response.ok:
            recent_runs.add(response.result)
            leads = response.result.leads
            export_url = "/api/leads.csv?" + urlencode({"run_id": response.result.run_id})
        else:
            leads = []
            export_url = None

        html = renderer.render(
            leads,
            limit=limit_value,
            days=days_value,
            error=None if response.ok else response.payload.get("error"),
            export_url=export_url,
        )
        return HTMLResponse(content=html, status_code=response.status_code)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app
