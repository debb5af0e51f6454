"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError
from .models import DEFAULT_MAX_PAGES, MAX_PAGES_BOUNDS, clamp

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_LOG_FORMATS = ["json", "key-value"]


def clamp_int(raw: Optional[str], default: int, low: int, high: int) -> int:
    """Parse an integer and clamp it into [low, high].

    Missing or malformed input falls back to ``default`` instead of raising;
    request parameters and environment knobs both go through here.

    Example:
        >>> clamp_int("500", 100, 50, 250)
        250
        >>> clamp_int("abc", 100, 50, 250)
        100
    """
    if raw is None:
        return default
    text = str(raw).strip()
    if not text:
        return default
    try:
        value = int(text)
    except ValueError:
        try:
            value = int(float(text))
        except (ValueError, OverflowError):
            return default
    return clamp(value, (low, high))


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        max_pages: int = DEFAULT_MAX_PAGES,
        log_level: Optional[str] = None,
        log_format: Optional[str] = None,
        environment: str = "local",
    ):
        self.max_pages = max_pages
        self.log_level = log_level
        self.log_format = log_format
        self.environment = environment


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - SCRAPE_MAX_PAGES: Pages fetched per source (default 2, clamped to 1-5)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_FORMAT: Override log format (json, key-value)
    - ENVIRONMENT: Environment label for logs (default: local)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If LOG_LEVEL or LOG_FORMAT is invalid
    """
    errors = []

    max_pages = clamp_int(
        os.getenv("SCRAPE_MAX_PAGES"), DEFAULT_MAX_PAGES, *MAX_PAGES_BOUNDS
    )

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        log_level = log_level.strip().upper()
        if log_level not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )

    log_format = os.getenv("LOG_FORMAT")
    if log_format:
        log_format = log_format.strip().lower()
        if log_format not in VALID_LOG_FORMATS:
            errors.append(
                f"Invalid LOG_FORMAT: '{log_format}'. Must be one of: {', '.join(VALID_LOG_FORMATS)}"
            )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the values",
                "Unset the variable to fall back to the configured default",
            ],
        )

    return EnvironmentConfig(
        max_pages=max_pages,
        log_level=log_level or None,
        log_format=log_format or None,
        environment=os.getenv("ENVIRONMENT", "local"),
    )
