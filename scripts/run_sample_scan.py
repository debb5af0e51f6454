#!/usr/bin/env python3
"""Sample run harness for end-to-end validation.

This script provides a manual way to validate the lead pipeline without
running pytest. It can operate in two modes:

1. Fixture mode (default): Uses deterministic listings and practice data from YAML
2. Real endpoint mode: Scrapes the live listing sites (requires network access)

Usage:
    # Run with fixtures (no network required)
    python scripts/run_sample_scan.py

    # Run with real endpoints
    END_VALIDATION_REAL_RUN=1 python scripts/run_sample_scan.py --config config.yaml

    # Custom fixtures file and request parameters
    python scripts/run_sample_scan.py --fixtures tests/fixtures/sample_listings.yaml --limit 50 --days 2
"""

import argparse
import asyncio
import os
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from leadgen.config.loader import load_config
from leadgen.config.models import PipelineConfig
from leadgen.logging.config import configure_logging
from leadgen.pipeline import LeadPipeline
from tests.helpers.fixture_source import load_fixture_pipeline_parts


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_summary_table(result):
    """Print a formatted summary table of pipeline results."""
    print_header("Pipeline Execution Summary")

    metrics = [
        ("Candidates Fetched", result.fetched),
        ("After Deduplication", result.deduplicated),
        ("After Recency Filter", result.recent),
        ("Enriched", result.enriched),
        ("Prioritized Leads", result.prioritized),
        ("Failed Sources", ", ".join(result.failed_sources) or "None"),
        ("Duration (seconds)", f"{result.duration_seconds:.2f}"),
    ]

    max_label_width = max(len(label) for label, _ in metrics)

    print("┌" + "─" * (max_label_width + 2) + "┬" + "─" * 22 + "┐")
    print(f"│ {'Metric':<{max_label_width}} │ {'Value':<20} │")
    print("├" + "─" * (max_label_width + 2) + "┼" + "─" * 22 + "┤")
    for label, value in metrics:
        print(f"│ {label:<{max_label_width}} │ {str(value):<20} │")
    print("└" + "─" * (max_label_width + 2) + "┴" + "─" * 22 + "┘")

    if result.source_outcomes:
        print("\n" + "-" * 80)
        print(" Per-Source Breakdown")
        print("-" * 80 + "\n")
        for outcome in result.source_outcomes:
            print(f"Source: {outcome.source}")
            print(f"  OK: {outcome.ok}")
            print(f"  Candidates: {len(outcome.candidates)}")
            print(f"  Duration: {outcome.duration_seconds:.2f}s")
            if outcome.error:
                print(f"  Error Message: {outcome.error}")
            print()

    dropped = [o for o in result.enrichment_outcomes if not o.kept]
    if dropped:
        print(" Dropped During Enrichment")
        print("-" * 80)
        for outcome in dropped:
            print(f"  #{outcome.index} {outcome.practice_name}: {outcome.reason.value} ({outcome.error})")
        print()

    print_header("Leads")
    for lead in result.leads:
        contact = lead.phone or lead.email
        print(f"- {lead.practice_name} [{lead.city or '?'}, {lead.state or '?'}] {contact}")


def main():
    """Main entry point for sample run harness."""
    parser = argparse.ArgumentParser(
        description="Run a sample aggregation for end-to-end validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--fixtures",
        type=Path,
        default=Path("tests/fixtures/sample_listings.yaml"),
        help="Path to fixtures YAML file (default: tests/fixtures/sample_listings.yaml)",
    )
    parser.add_argument("--limit", type=int, default=50, help="Leads wanted (default: 50)")
    parser.add_argument("--days", type=int, default=1, help="Recency window in days (default: 1)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()
    load_dotenv()

    use_real_endpoints = os.environ.get("END_VALIDATION_REAL_RUN", "0") == "1"

    print_header("Dental Lead Aggregator - Sample Run Harness")
    print(f"Limit: {args.limit}  Days: {args.days}  Log level: {args.log_level}")

    if use_real_endpoints:
        print("\n⚠️  REAL ENDPOINT MODE ENABLED")
        print("   The pipeline will scrape listing sites and practice websites.")
        response = input("\nContinue? [y/N]: ")
        if response.lower() != "y":
            print("Aborted.")
            return 1
    else:
        print(f"Fixture mode: {args.fixtures}")
        print("\nUsing fixture data (no network requests will be made)")
        if not args.fixtures.exists():
            print(f"\n❌ Error: Fixture file not found: {args.fixtures}")
            print("   Run with END_VALIDATION_REAL_RUN=1 to use real endpoints instead.")
            return 1

    try:
        app_config, env_config = load_config(args.config)
        configure_logging(
            level=args.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        if use_real_endpoints:
            pipeline = LeadPipeline.from_config(app_config)
        else:
            sources, resolver = load_fixture_pipeline_parts(args.fixtures)
            fixture_config = PipelineConfig(
                max_pages=app_config.pipeline.max_pages,
                pacing_base_seconds=0.0,
                pacing_step_seconds=0.0,
            )
            pipeline = LeadPipeline(sources, resolver, resolver, config=fixture_config)

        print("\n🚀 Executing pipeline run...")
        print(f"   Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        result = asyncio.run(pipeline.run(args.limit, args.days))
        print(f"   Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

        print_summary_table(result)
        return 1 if result.failed_sources else 0

    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
