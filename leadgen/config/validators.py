"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    for source in config_dict.get("sources", []) or []:
        if isinstance(source, dict) and not source.get("enabled", True):
            name = source.get("name", "Unknown")
            warning_messages.append(f"Source '{name}' is disabled and will be skipped")

    pipeline = config_dict.get("pipeline", {})
    if isinstance(pipeline, dict):
        base = pipeline.get("pacing_base_seconds")
        step = pipeline.get("pacing_step_seconds")
        if base == 0 and step == 0:
            warning_messages.append(
                "Enrichment pacing is disabled; third-party sites will see request bursts"
            )

        pool_size = pipeline.get("pool_size")
        if isinstance(pool_size, int) and pool_size > 12:
            warning_messages.append(
                f"Large pool_size ({pool_size}) may trigger blocking by practice websites"
            )

        for key, bounds in (("max_pages", (1, 5)), ("default_limit", (50, 250)),
                            ("default_recency_days", (1, 3))):
            value = pipeline.get(key)
            if isinstance(value, int) and not bounds[0] <= value <= bounds[1]:
                warning_messages.append(
                    f"pipeline.{key}={value} is outside {bounds[0]}-{bounds[1]} and will be clamped"
                )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
