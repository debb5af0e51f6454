"""Core domain models for leads and contact details.

This module defines the data structures used throughout the application:
- Location: city/state/zip of a practice
- Lead: a job posting as it moves through the pipeline, from raw candidate
  to enriched and validated lead
- ContactDetails: what the contact extractor found on a practice website
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from leadgen.utils.timestamps import ensure_utc


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    stripped = v.strip()
    return stripped or None


class Location(BaseModel):
    """Where a practice is located. Every part is optional."""

    city: Optional[str] = Field(None, description="City name")
    state: Optional[str] = Field(None, description="Two-letter state code")
    zip: Optional[str] = Field(None, description="Postal code")

    @field_validator("city", "zip")
    @classmethod
    def strip_fields(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace; blank strings become None."""
        return _strip_or_none(v)

    @field_validator("state")
    @classmethod
    def normalize_state(cls, v: Optional[str]) -> Optional[str]:
        """Strip and upper-case the state code."""
        stripped = _strip_or_none(v)
        return stripped.upper() if stripped else None


class Lead(BaseModel):
    """A dental practice job posting, progressively enriched with contact data.

    The same record flows through every pipeline stage. Source adapters fill
    the posting fields; the enrichment pool fills website and contact fields
    only where they are still empty.

    Serialized with camelCase aliases (practiceName, postedAt, ...) to keep the
    JSON payload stable for the operator UI and CSV export.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"example": {
            "practiceName": "Bright Smiles Dental",
            "location": {"city": "Austin", "state": "TX", "zip": "78701"},
            "postedAt": "2025-11-04T12:00:00Z",
            "postedAtText": "Posted today",
            "sourceUrl": "https://www.ziprecruiter.com/c/Bright-Smiles-Dental/Job/Dental-Receptionist",
            "source": "ziprecruiter",
            "website": "https://brightsmilesaustin.com",
            "phone": "(512) 555-0142",
            "email": "frontdesk@brightsmilesaustin.com",
            "decisionMakerName": "Dr. Maria Lopez",
            "practiceSize": "small (2-3 providers)",
        }},
    )

    practice_name: str = Field(..., description="Practice / employer name")
    location: Optional[Location] = Field(None, description="Practice location")
    posted_at: Optional[datetime] = Field(None, description="When the job was posted (UTC)")
    posted_at_text: Optional[str] = Field(
        None, description="Display text when the posting time is unknown"
    )
    source_url: Optional[str] = Field(None, description="Link to the original posting")
    source: Optional[str] = Field(None, description="Listing source that produced the record")

    website: Optional[str] = Field(None, description="Practice website")
    phone: Optional[str] = Field(None, description="Practice phone number")
    email: Optional[EmailStr] = Field(None, description="Practice contact email")
    decision_maker_name: Optional[str] = Field(None, description="Owner / office manager")
    practice_size: Optional[str] = Field(None, description="Rough practice size bucket")

    @field_validator("practice_name")
    @classmethod
    def strip_practice_name(cls, v: str) -> str:
        """Practice name is the identity anchor and cannot be blank."""
        if not v or not v.strip():
            raise ValueError("practice_name cannot be empty or whitespace-only")
        return " ".join(v.split())

    @field_validator(
        "posted_at_text", "source", "phone", "decision_maker_name", "practice_size", mode="before"
    )
    @classmethod
    def strip_optional(cls, v):
        """Strip optional text fields; blank strings become None."""
        if isinstance(v, str):
            return _strip_or_none(v)
        return v

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str):
            return _strip_or_none(v)
        return v

    @field_validator("website", "source_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """URLs must be absolute http(s) links."""
        stripped = _strip_or_none(v)
        if stripped is None:
            return None
        if not stripped.lower().startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got: {stripped}")
        return stripped

    @field_validator("posted_at")
    @classmethod
    def posted_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)

    @property
    def city(self) -> Optional[str]:
        return self.location.city if self.location else None

    @property
    def state(self) -> Optional[str]:
        return self.location.state if self.location else None

    @property
    def identity_key(self) -> str:
        """Deduplication key: lower(practice name) | city | state.

        Missing city/state render as empty strings, so two postings without a
        location collapse when their names match.
        """
        return f"{self.practice_name.lower()}|{self.city or ''}|{self.state or ''}"

    @property
    def has_contact_channel(self) -> bool:
        """Whether a phone number or email address is known."""
        return self.phone is not None or self.email is not None

    def to_payload(self) -> dict:
        """JSON-ready dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)


class ContactDetails(BaseModel):
    """Contact data extracted from a practice website."""

    phone: Optional[str] = None
    email: Optional[str] = None
    decision_maker: Optional[str] = None
    size: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any((self.phone, self.email, self.decision_maker, self.size))
