"""Tests for the bounded-concurrency enrichment pool."""

import asyncio
import threading
import time

import pytest

from leadgen.config.models import PipelineConfig
from leadgen.domain.models import ContactDetails, Lead
from leadgen.enrichment import (
    EnrichmentPool,
    EnrichmentReason,
    EnrichmentStatus,
    ResolverHTTPError,
    WorkCursor,
    merge_enrichment,
)


class FakeResolver:
    """Finder and extractor in one; ``sites`` maps name -> website, ``contacts`` maps website -> details."""

    def __init__(self, sites=None, contacts=None, delay=0.0):
        self.sites = sites or {}
        self.contacts = contacts or {}
        self.delay = delay
        self.website_calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def find_website(self, name, city=None, state=None):
        with self._lock:
            self.website_calls.append((name, city, state))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            site = self.sites.get(name)
            if isinstance(site, Exception):
                raise site
            return site
        finally:
            with self._lock:
                self.active -= 1

    def extract_contacts(self, url):
        details = self.contacts.get(url, ContactDetails())
        if isinstance(details, Exception):
            raise details
        return details


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def candidates(count):
    return [
        Lead(practice_name=f"Practice {i}", location={"city": "Austin", "state": "TX"})
        for i in range(count)
    ]


def make_pool(resolver, **kwargs):
    kwargs.setdefault("sleep", RecordingSleep())
    return EnrichmentPool(resolver, resolver, **kwargs)


class TestWorkCursor:
    def test_sequential_claims(self):
        cursor = WorkCursor(3)
        assert [cursor.claim() for _ in range(5)] == [0, 1, 2, None, None]

    def test_empty(self):
        assert WorkCursor(0).claim() is None

    def test_each_index_claimed_once_across_threads(self):
        cursor = WorkCursor(2000)
        claimed = []
        lock = threading.Lock()

        def claimer():
            while True:
                index = cursor.claim()
                if index is None:
                    return
                with lock:
                    claimed.append(index)

        threads = [threading.Thread(target=claimer) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(claimed) == list(range(2000))


class TestMergeEnrichment:
    def test_fills_empty_fields(self):
        lead = Lead(practice_name="Bright Smiles Dental")
        details = ContactDetails(
            phone="(512) 555-0142",
            email="frontdesk@brightsmiles.com",
            decision_maker="Dr. Maria Lopez",
            size="small (2 providers)",
        )

        merged = Lead.model_validate(merge_enrichment(lead, "https://brightsmiles.com", details))

        assert merged.website == "https://brightsmiles.com"
        assert merged.phone == "(512) 555-0142"
        assert merged.email == "frontdesk@brightsmiles.com"
        assert merged.decision_maker_name == "Dr. Maria Lopez"
        assert merged.practice_size == "small (2 providers)"

    def test_existing_values_win(self):
        lead = Lead(
            practice_name="Bright Smiles Dental",
            phone="(512) 555-0100",
            website="https://listing-site.com",
        )
        details = ContactDetails(phone="(512) 555-0199", email="office@brightsmiles.com")

        merged = merge_enrichment(lead, "https://brightsmiles.com", details)

        assert merged["phone"] == "(512) 555-0100"
        assert merged["website"] == "https://listing-site.com"
        assert merged["email"] == "office@brightsmiles.com"

    def test_no_contacts(self):
        lead = Lead(practice_name="A", source="ziprecruiter")
        merged = merge_enrichment(lead, None, None)

        assert merged["website"] is None
        assert merged["source"] == "ziprecruiter"


class TestPoolConstruction:
    def test_pool_size_must_be_positive(self):
        with pytest.raises(ValueError, match="pool_size"):
            EnrichmentPool(FakeResolver(), FakeResolver(), pool_size=0)

    def test_from_config(self):
        config = PipelineConfig(pool_size=3, pacing_base_seconds=0.2, pacing_step_seconds=0.1,
                                resolver_timeout_seconds=5)
        pool = EnrichmentPool.from_config(FakeResolver(), FakeResolver(), config)

        assert pool.pool_size == 3
        assert pool.pacing_base_seconds == 0.2
        assert pool.pacing_step_seconds == 0.1
        assert pool.call_timeout == 5

    def test_pacing_delay(self):
        pool = EnrichmentPool(FakeResolver(), FakeResolver(), pacing_base_seconds=0.1,
                              pacing_step_seconds=0.05)

        assert pool.pacing_delay(0, 6) == pytest.approx(0.1)
        assert pool.pacing_delay(5, 6) == pytest.approx(0.35)
        assert pool.pacing_delay(6, 6) == pytest.approx(0.1)
        assert pool.pacing_delay(7, 2) == pytest.approx(0.15)


class TestPoolRun:
    def test_empty_input(self):
        resolver = FakeResolver()
        leads, outcomes = asyncio.run(make_pool(resolver).run([]))

        assert leads == []
        assert outcomes == []
        assert resolver.website_calls == []

    def test_every_candidate_processed_once(self):
        resolver = FakeResolver(sites={f"Practice {i}": f"https://p{i}.com" for i in range(20)})
        pool = make_pool(resolver, pool_size=4)

        leads, outcomes = asyncio.run(pool.run(candidates(20)))

        assert sorted(call[0] for call in resolver.website_calls) == sorted(f"Practice {i}" for i in range(20))
        assert [o.index for o in outcomes] == list(range(20))
        assert len(leads) == 20

    def test_finder_receives_location(self):
        resolver = FakeResolver()
        asyncio.run(make_pool(resolver).run(candidates(1)))
        assert resolver.website_calls == [("Practice 0", "Austin", "TX")]

    def test_concurrency_bounded_by_pool_size(self):
        resolver = FakeResolver(delay=0.02)
        asyncio.run(make_pool(resolver, pool_size=2).run(candidates(8)))

        assert 1 <= resolver.max_active <= 2

    def test_pacing_delays(self):
        sleep = RecordingSleep()
        pool = make_pool(FakeResolver(), pool_size=3, pacing_base_seconds=0.1,
                         pacing_step_seconds=0.05, sleep=sleep)

        asyncio.run(pool.run(candidates(7)))

        expected = [0.1 + (i % 3) * 0.05 for i in range(7)]
        assert sorted(sleep.delays) == pytest.approx(sorted(expected))

    def test_concurrency_shrinks_to_candidate_count(self):
        sleep = RecordingSleep()
        pool = make_pool(FakeResolver(), pool_size=6, pacing_base_seconds=0.1,
                         pacing_step_seconds=0.05, sleep=sleep)

        asyncio.run(pool.run(candidates(2)))

        assert sorted(sleep.delays) == pytest.approx([0.1, 0.15])

    def test_zero_pacing(self):
        sleep = RecordingSleep()
        pool = make_pool(FakeResolver(), pacing_base_seconds=0, pacing_step_seconds=0, sleep=sleep)

        asyncio.run(pool.run(candidates(4)))

        assert sleep.delays == [0, 0, 0, 0]

    def test_contacts_merged(self):
        resolver = FakeResolver(
            sites={"Practice 0": "https://p0.com"},
            contacts={"https://p0.com": ContactDetails(phone="(512) 555-0142", size="solo (1 provider)")},
        )

        leads, outcomes = asyncio.run(make_pool(resolver).run(candidates(1)))

        assert leads[0].website == "https://p0.com"
        assert leads[0].phone == "(512) 555-0142"
        assert leads[0].practice_size == "solo (1 provider)"
        assert outcomes[0].status == EnrichmentStatus.KEPT
        assert outcomes[0].reason is None

    def test_no_website_kept_without_contact_lookup(self):
        resolver = FakeResolver(contacts={None: ContactDetails(phone="(512) 555-0142")})

        leads, outcomes = asyncio.run(make_pool(resolver).run(candidates(1)))

        assert leads[0].website is None
        assert leads[0].phone is None
        assert outcomes[0].kept
        assert outcomes[0].reason == EnrichmentReason.NO_WEBSITE

    def test_resolver_error_isolated(self):
        resolver = FakeResolver(sites={
            "Practice 0": "https://p0.com",
            "Practice 1": ResolverHTTPError("HTTP 503: Service Unavailable", 503, "https://search"),
            "Practice 2": "https://p2.com",
        })

        leads, outcomes = asyncio.run(make_pool(resolver, pool_size=3).run(candidates(3)))

        assert sorted(lead.practice_name for lead in leads) == ["Practice 0", "Practice 2"]
        dropped = outcomes[1]
        assert dropped.status == EnrichmentStatus.DROPPED
        assert dropped.reason == EnrichmentReason.RESOLVER_ERROR
        assert "ResolverHTTPError" in dropped.error
        assert dropped.lead is None

    def test_extractor_error_drops_candidate(self):
        resolver = FakeResolver(
            sites={"Practice 0": "https://p0.com"},
            contacts={"https://p0.com": ResolverHTTPError("HTTP 404: Not Found", 404, "https://p0.com")},
        )

        leads, outcomes = asyncio.run(make_pool(resolver).run(candidates(1)))

        assert leads == []
        assert outcomes[0].reason == EnrichmentReason.RESOLVER_ERROR

    def test_invalid_merged_record_dropped(self):
        resolver = FakeResolver(
            sites={"Practice 0": "https://p0.com"},
            contacts={"https://p0.com": ContactDetails(email="not-an-email")},
        )

        leads, outcomes = asyncio.run(make_pool(resolver).run(candidates(1)))

        assert leads == []
        assert outcomes[0].reason == EnrichmentReason.VALIDATION_ERROR
        assert "email" in outcomes[0].error

    def test_call_timeout(self):
        resolver = FakeResolver(delay=0.3)
        pool = make_pool(resolver, call_timeout=0.01)

        leads, outcomes = asyncio.run(pool.run(candidates(1)))

        assert leads == []
        assert outcomes[0].reason == EnrichmentReason.TIMEOUT
        assert "0.01" in outcomes[0].error

    def test_resolver_raising_timeout_error_without_call_timeout(self):
        resolver = FakeResolver(sites={"Practice 0": TimeoutError("search backend timed out")})

        leads, outcomes = asyncio.run(make_pool(resolver).run(candidates(1)))

        assert leads == []
        assert outcomes[0].reason == EnrichmentReason.RESOLVER_ERROR
        assert "search backend timed out" in outcomes[0].error
        assert "None seconds" not in outcomes[0].error
