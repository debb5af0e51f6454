"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from leadgen.domain.models import ContactDetails, Lead, Location


class TestLocation:
    def test_strips_and_uppercases_state(self):
        location = Location(city="  Austin ", state=" tx", zip=" 78701 ")
        assert (location.city, location.state, location.zip) == ("Austin", "TX", "78701")

    def test_blank_parts_become_none(self):
        location = Location(city="  ", state="", zip=None)
        assert location.city is None
        assert location.state is None


class TestLead:
    def test_minimal_lead(self):
        lead = Lead(practice_name="Bright Smiles Dental")

        assert lead.location is None
        assert lead.posted_at is None
        assert lead.has_contact_channel is False

    def test_practice_name_whitespace_collapsed(self):
        assert Lead(practice_name="  Bright   Smiles\nDental ").practice_name == "Bright Smiles Dental"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_practice_name_rejected(self, name):
        with pytest.raises(ValidationError, match="practice_name cannot be empty"):
            Lead(practice_name=name)

    def test_accepts_camel_case_input(self):
        lead = Lead.model_validate({
            "practiceName": "Bright Smiles Dental",
            "postedAtText": "Posted today",
            "sourceUrl": "https://www.ziprecruiter.com/jobs/1",
            "decisionMakerName": "Dr. Maria Lopez",
        })

        assert lead.practice_name == "Bright Smiles Dental"
        assert lead.posted_at_text == "Posted today"
        assert lead.decision_maker_name == "Dr. Maria Lopez"

    def test_posted_at_normalized_to_utc(self):
        est = timezone(timedelta(hours=-5))
        lead = Lead(practice_name="A", posted_at=datetime(2025, 11, 4, 7, 0, tzinfo=est))
        assert lead.posted_at == datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)

    def test_naive_posted_at_treated_as_utc(self):
        lead = Lead(practice_name="A", posted_at=datetime(2025, 11, 4, 12, 0))
        assert lead.posted_at.tzinfo == timezone.utc

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            Lead(practice_name="A", email="not-an-email")

    def test_blank_email_is_none(self):
        assert Lead(practice_name="A", email="  ").email is None

    @pytest.mark.parametrize("field", ["website", "source_url"])
    def test_urls_must_be_http(self, field):
        with pytest.raises(ValidationError, match="Expected an http"):
            Lead(practice_name="A", **{field: "ftp://example.com"})

    def test_optional_text_fields_stripped(self):
        lead = Lead(practice_name="A", phone="  ", practice_size=" solo (1 provider) ")
        assert lead.phone is None
        assert lead.practice_size == "solo (1 provider)"

    def test_has_contact_channel(self):
        assert Lead(practice_name="A", phone="(512) 555-0142").has_contact_channel
        assert Lead(practice_name="A", email="office@brightsmiles.com").has_contact_channel


class TestIdentityKey:
    def test_key_format(self):
        lead = Lead(practice_name="Bright Smiles Dental", location={"city": "Austin", "state": "tx"})
        assert lead.identity_key == "bright smiles dental|Austin|TX"

    def test_missing_location_renders_empty(self):
        assert Lead(practice_name="Bright Smiles").identity_key == "bright smiles||"

    def test_partial_location(self):
        lead = Lead(practice_name="Bright Smiles", location={"state": "TX"})
        assert lead.identity_key == "bright smiles||TX"

    def test_deterministic_for_equal_inputs(self):
        a = Lead(practice_name="BRIGHT Smiles", location={"city": "Austin", "state": "TX"})
        b = Lead(practice_name="bright smiles", location={"city": "Austin", "state": "TX"},
                 source_url="https://www.careerbuilder.com/job/1")
        assert a.identity_key == b.identity_key

    def test_city_is_case_sensitive(self):
        a = Lead(practice_name="A", location={"city": "Austin"})
        b = Lead(practice_name="A", location={"city": "austin"})
        assert a.identity_key != b.identity_key


class TestPayload:
    def test_camel_case_aliases(self):
        lead = Lead(
            practice_name="Bright Smiles Dental",
            location={"city": "Austin", "state": "TX", "zip": "78701"},
            posted_at=datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc),
            source_url="https://www.ziprecruiter.com/jobs/1",
            email="frontdesk@brightsmiles.com",
            decision_maker_name="Dr. Maria Lopez",
        )
        payload = lead.to_payload()

        assert payload["practiceName"] == "Bright Smiles Dental"
        assert payload["location"] == {"city": "Austin", "state": "TX", "zip": "78701"}
        assert payload["postedAt"].startswith("2025-11-04T12:00:00")
        assert payload["sourceUrl"] == "https://www.ziprecruiter.com/jobs/1"
        assert payload["email"] == "frontdesk@brightsmiles.com"
        assert payload["decisionMakerName"] == "Dr. Maria Lopez"
        assert payload["practiceSize"] is None
        assert "practice_name" not in payload

    def test_payload_round_trips_through_model_validate(self):
        lead = Lead(practice_name="A", location={"city": "Austin", "state": "TX"}, phone="(512) 555-0142")
        assert Lead.model_validate(lead.to_payload()) == lead


class TestContactDetails:
    def test_empty(self):
        assert ContactDetails().is_empty

    def test_not_empty(self):
        assert not ContactDetails(size="solo (1 provider)").is_empty
