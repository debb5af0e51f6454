"""Domain models for the dental lead aggregator."""

from .models import ContactDetails, Lead, Location

__all__ = ["Lead", "Location", "ContactDetails"]
