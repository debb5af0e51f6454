"""Main entry point for the Dental Lead Aggregator."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

import uvicorn

from leadgen.api import create_app
from leadgen.config.environment import EnvironmentConfig, clamp_int
from leadgen.config.exceptions import ConfigurationError
from leadgen.config.loader import load_config
from leadgen.config.models import LIMIT_BOUNDS, RECENCY_DAYS_BOUNDS, AppConfig
from leadgen.export import leads_to_csv
from leadgen.logging import get_logger
from leadgen.logging.config import configure_logging
from leadgen.pipeline import LeadPipeline

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply CLI overrides.

    Log level priority: CLI > environment > config file > INFO.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leadgen",
        description="Dental Lead Aggregator - fresh job postings enriched with practice contacts",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")

    run = subparsers.add_parser("run", help="Run the pipeline once and print the leads")
    run.add_argument("--limit", default=None, help="Leads wanted (clamped to 50-250)")
    run.add_argument("--days", default=None, help="Recency window in days (clamped to 1-3)")
    run.add_argument("--output", type=Path, default=None, help="Write to this file instead of stdout")
    run.add_argument(
        "--format", dest="output_format", default="json", choices=["json", "csv"],
        help="Output format (default: json)",
    )
    return parser


def run_once(
    pipeline: LeadPipeline,
    limit: Optional[str],
    days: Optional[str],
    output: Optional[Path],
    output_format: str,
    app_config: AppConfig,
) -> int:
    """Execute one pipeline run and write the result. Returns the exit code."""
    limit_value = clamp_int(limit, app_config.pipeline.default_limit, *LIMIT_BOUNDS)
    days_value = clamp_int(days, app_config.pipeline.default_recency_days, *RECENCY_DAYS_BOUNDS)

    response = asyncio.run(pipeline.fetch_leads(limit_value, days_value))
    if not response.ok:
        print(f"Pipeline failed: {response.payload.get('error')}", file=sys.stderr)
        return 1

    if output_format == "csv":
        text = leads_to_csv(response.result.leads)
    else:
        text = json.dumps(response.payload, indent=2) + "\n"

    if output:
        output.write_text(text, encoding="utf-8")
        logger.info(
            f"Wrote {len(response.result.leads)} leads to {output}",
            extra={"event": "cli.output.written", "path": str(output), "format": output_format},
        )
    else:
        sys.stdout.write(text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Dental Lead Aggregator.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Dental Lead Aggregator starting",
            extra={
                "event": "service.starting",
                "command": args.command,
                "log_level": env_config.log_level,
                "max_pages": app_config.pipeline.max_pages,
                "enabled_source_count": len(app_config.get_enabled_sources()),
            },
        )

        pipeline = LeadPipeline.from_config(app_config)

        if args.command == "run":
            exit_code = run_once(
                pipeline, args.limit, args.days, args.output, args.output_format, app_config
            )
        else:
            uvicorn.run(
                create_app(pipeline, app_config),
                host=args.host,
                port=args.port,
                log_config=None,
            )
            exit_code = 0

        logger.info(
            "Dental Lead Aggregator stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "exit_code": exit_code,
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
