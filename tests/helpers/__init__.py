"""Test helper utilities for Dental Lead Aggregator tests."""

from .fixture_source import FixtureResolver, FixtureSource, load_fixture_data, load_fixture_pipeline_parts

__all__ = ["FixtureSource", "FixtureResolver", "load_fixture_data", "load_fixture_pipeline_parts"]
