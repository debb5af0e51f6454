"""Tests for pipeline orchestration."""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from leadgen.config.models import AppConfig, PipelineConfig
from leadgen.enrichment import EnrichmentReason, SearchWebsiteFinder, WebsiteContactExtractor
from leadgen.pipeline import LeadPipeline, PipelineRunResult, SourcesUnavailableError
from tests.helpers.fixture_source import FixtureResolver, FixtureSource, load_fixture_pipeline_parts

FIXTURES = Path(__file__).parent / "fixtures" / "sample_listings.yaml"
NOW = datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)
NO_PACING = PipelineConfig(pacing_base_seconds=0, pacing_step_seconds=0)


def listing(name, city="Austin", state="TX", **kwargs):
    return {"practiceName": name, "location": {"city": city, "state": state}, **kwargs}


def make_pipeline(sources, practices=None, config=None):
    resolver = FixtureResolver(practices or {})
    pipeline = LeadPipeline(
        sources,
        resolver,
        resolver,
        config=config or NO_PACING,
        clock=lambda: NOW,
    )
    return pipeline, resolver


class TestFixtureRun:
    @pytest.fixture
    def parts(self):
        return load_fixture_pipeline_parts(FIXTURES)

    def test_stage_counts(self, parts):
        sources, resolver = parts
        pipeline = LeadPipeline(sources, resolver, resolver, config=NO_PACING)

        result = asyncio.run(pipeline.run())

        assert isinstance(result, PipelineRunResult)
        assert result.fetched == 6
        assert result.deduplicated == 5
        assert result.recent == 4
        assert result.enriched == 4
        assert result.prioritized == 3
        assert result.failed_sources == []

    def test_final_leads(self, parts):
        sources, resolver = parts
        pipeline = LeadPipeline(sources, resolver, resolver, config=NO_PACING)

        result = asyncio.run(pipeline.run())
        by_name = {lead.practice_name: lead for lead in result.leads}

        assert sorted(by_name) == ["Bright Smiles Dental", "Lakeside Family Dentistry", "Summit Dental Group"]
        bright = by_name["Bright Smiles Dental"]
        assert bright.source == "ziprecruiter"
        assert bright.website == "https://brightsmilesaustin.com"
        assert bright.phone == "(512) 555-0142"
        assert bright.decision_maker_name == "Dr. Maria Lopez"
        assert by_name["Lakeside Family Dentistry"].phone is None
        assert by_name["Summit Dental Group"].email is None

    def test_each_recent_candidate_resolved_once(self, parts):
        sources, resolver = parts
        asyncio.run(LeadPipeline(sources, resolver, resolver, config=NO_PACING).run())

        assert sorted(resolver.website_calls) == [
            "Bright Smiles Dental",
            "Lakeside Family Dentistry",
            "Quiet Pines Dental",
            "Summit Dental Group",
        ]

    def test_fetch_leads_payload(self, parts):
        sources, resolver = parts
        response = asyncio.run(LeadPipeline(sources, resolver, resolver, config=NO_PACING).fetch_leads())

        assert response.ok
        assert response.status_code == 200
        assert set(response.payload) == {"leads"}
        assert len(response.payload["leads"]) == 3
        assert all("practiceName" in lead for lead in response.payload["leads"])


class TestScenarios:
    def test_duplicate_postings_merge_before_enrichment(self):
        sources = [
            FixtureSource("ziprecruiter", [listing("Bright Smiles Dental", postedAt=NOW.isoformat())]),
            FixtureSource("careerbuilder", [listing("Bright Smiles Dental")]),
        ]
        pipeline, resolver = make_pipeline(sources)

        result = asyncio.run(pipeline.run())

        assert result.fetched == 2
        assert result.deduplicated == 1
        assert resolver.website_calls == ["Bright Smiles Dental"]
        assert result.enrichment_outcomes[0].lead.posted_at == NOW

    def test_unresolvable_website_excluded(self):
        sources = [FixtureSource("ziprecruiter", [listing("Nowhere Dental")])]
        pipeline, _ = make_pipeline(sources)

        response = asyncio.run(pipeline.fetch_leads())

        assert response.status_code == 200
        assert response.payload == {"leads": []}
        outcome = response.result.enrichment_outcomes[0]
        assert outcome.kept
        assert outcome.reason == EnrichmentReason.NO_WEBSITE
        assert outcome.lead.website is None
        assert outcome.lead.phone is None
        assert outcome.lead.email is None

    def test_oversample_caps_enrichment_input(self):
        listings = [listing(f"Practice {i}", phone="(512) 555-0142") for i in range(120)]
        pipeline, resolver = make_pipeline([FixtureSource("ziprecruiter", listings)])

        result = asyncio.run(pipeline.run(limit=50))

        assert result.deduplicated == 120
        assert result.recent == 100
        assert len(resolver.website_calls) == 100
        assert len(result.leads) == 50


class TestRequestBounds:
    def test_out_of_range_values_clamped(self):
        listings = [listing(f"Practice {i}", phone="(512) 555-0142") for i in range(120)]
        source = FixtureSource("ziprecruiter", listings)
        pipeline, resolver = make_pipeline([source])

        result = asyncio.run(pipeline.run(limit=10, recency_days=9))

        assert source.calls == [{"recency_days": 3, "max_pages": 2}]
        assert len(resolver.website_calls) == 100
        assert len(result.leads) == 50

    def test_config_defaults_used(self):
        source = FixtureSource("ziprecruiter", [])
        config = PipelineConfig(default_recency_days=2, max_pages=4,
                                pacing_base_seconds=0, pacing_step_seconds=0)
        pipeline, _ = make_pipeline([source], config=config)

        asyncio.run(pipeline.run())

        assert source.calls == [{"recency_days": 2, "max_pages": 4}]

    def test_recency_window(self):
        listings = [
            listing("Fresh", postedAt=(NOW - timedelta(hours=30)).isoformat(), phone="(512) 555-0142"),
            listing("Stale", postedAt=(NOW - timedelta(days=4)).isoformat(), phone="(512) 555-0142"),
        ]
        pipeline, _ = make_pipeline([FixtureSource("ziprecruiter", listings)])

        one_day = asyncio.run(pipeline.run(recency_days=1))
        three_days = asyncio.run(pipeline.run(recency_days=3))

        assert one_day.leads == []
        assert [lead.practice_name for lead in three_days.leads] == ["Fresh"]


class TestSourceIsolation:
    def test_failed_source_does_not_abort_run(self):
        sources = [
            FixtureSource("ziprecruiter", [listing("Bright Smiles Dental")]),
            FixtureSource("careerbuilder", {"error": "HTTP 503: Service Unavailable"}),
        ]
        practices = {"Bright Smiles Dental": {
            "website": "https://brightsmiles.com", "contacts": {"phone": "(512) 555-0142"},
        }}
        pipeline, _ = make_pipeline(sources, practices)

        response = asyncio.run(pipeline.fetch_leads())

        assert response.status_code == 200
        assert len(response.payload["leads"]) == 1
        assert response.result.failed_sources == ["careerbuilder"]
        failed = response.result.source_outcomes[1]
        assert failed.ok is False
        assert failed.error == "RuntimeError: HTTP 503: Service Unavailable"
        assert failed.candidates == []

    def test_all_sources_failing_is_an_error(self):
        sources = [
            FixtureSource("ziprecruiter", {"error": "blocked"}),
            FixtureSource("careerbuilder", {"error": "down"}),
        ]
        pipeline, resolver = make_pipeline(sources)

        response = asyncio.run(pipeline.fetch_leads())

        assert response.status_code == 500
        assert response.payload["error"].startswith("Listing sources unavailable")
        assert "ziprecruiter: RuntimeError: blocked" in response.payload["error"]
        assert resolver.website_calls == []

    def test_strict_mode_fails_on_any_source(self):
        sources = [
            FixtureSource("ziprecruiter", [listing("Bright Smiles Dental")]),
            FixtureSource("careerbuilder", {"error": "down"}),
        ]
        config = PipelineConfig(strict_sources=True, pacing_base_seconds=0, pacing_step_seconds=0)
        pipeline, _ = make_pipeline(sources, config=config)

        with pytest.raises(SourcesUnavailableError) as exc_info:
            asyncio.run(pipeline.run())

        assert exc_info.value.failures == ["careerbuilder: RuntimeError: down"]

    def test_no_sources(self):
        pipeline, _ = make_pipeline([])
        response = asyncio.run(pipeline.fetch_leads())

        assert response.status_code == 500
        assert response.payload == {"error": "No listing sources configured"}

    def test_source_timeout(self):
        class SlowSource:
            name = "slow"

            def fetch_candidates(self, recency_days, max_pages):
                time.sleep(0.3)
                return []

        sources = [SlowSource(), FixtureSource("ziprecruiter", [listing("Bright Smiles Dental")])]
        config = PipelineConfig(source_timeout_seconds=0.01, pacing_base_seconds=0, pacing_step_seconds=0)
        pipeline, _ = make_pipeline(sources, config=config)

        result = asyncio.run(pipeline.run())

        assert result.failed_sources == ["slow"]
        assert "timed out" in result.source_outcomes[0].error
        assert result.fetched == 1


class TestWiringAndLogging:
    def test_from_config(self):
        pipeline = LeadPipeline.from_config(AppConfig())

        assert [source.name for source in pipeline.sources] == ["ziprecruiter", "careerbuilder"]
        assert isinstance(pipeline.pool.website_finder, SearchWebsiteFinder)
        assert isinstance(pipeline.pool.contact_extractor, WebsiteContactExtractor)
        assert pipeline.pool.pool_size == 6

    def test_run_events_logged(self, caplog):
        pipeline, _ = make_pipeline([FixtureSource("ziprecruiter", [listing("A")])])

        with caplog.at_level(logging.INFO, logger="leadgen"):
            asyncio.run(pipeline.run())

        events = [getattr(record, "event", None) for record in caplog.records]
        assert "pipeline.run.started" in events
        assert "enrichment.pool.completed" in events
        assert "pipeline.run.completed" in events

    def test_failure_logged(self, caplog):
        pipeline, _ = make_pipeline([FixtureSource("ziprecruiter", {"error": "down"})])

        with caplog.at_level(logging.ERROR, logger="leadgen"):
            asyncio.run(pipeline.fetch_leads())

        events = [getattr(record, "event", None) for record in caplog.records]
        assert "source.fetch.failed" in events
        assert "pipeline.run.failed" in events

    def test_runs_are_independent(self):
        pipeline, _ = make_pipeline([FixtureSource("ziprecruiter", [listing("A", phone="(512) 555-0142")])])

        async def two_runs():
            return await asyncio.gather(pipeline.run(), pipeline.run())

        first, second = asyncio.run(two_runs())

        assert first.run_id != second.run_id
        assert len(first.leads) == len(second.leads) == 1
