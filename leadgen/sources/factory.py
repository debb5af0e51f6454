"""Factory functions for instantiating listing-source adapters."""

import logging
from typing import List

from leadgen.config.models import AppConfig, HttpConfig, SourceConfig

from .base import BaseSource
from .careerbuilder import CareerBuilderSource
from .exceptions import SourceConfigurationError
from .ziprecruiter import ZipRecruiterSource

logger = logging.getLogger(__name__)

SOURCE_TYPES = {
    "ziprecruiter": ZipRecruiterSource,
    "careerbuilder": CareerBuilderSource,
}


def get_source(source_config: SourceConfig, http_config: HttpConfig) -> BaseSource:
    """Instantiate the adapter for a configured listing source.

    Args:
        source_config: Source configuration with type, query and location
        http_config: Shared HTTP settings (timeout, user agent, per-source cap)

    Returns:
        Instantiated adapter

    Raises:
        SourceConfigurationError: If the source type is unknown or config is invalid

    Example:
        >>> source = SourceConfig(name="ZipRecruiter", type="ziprecruiter")
        >>> adapter = get_source(source, HttpConfig())
        >>> candidates = adapter.fetch_candidates(recency_days=1, max_pages=2)
    """
    source_type = str(source_config.type).lower()
    source_class = SOURCE_TYPES.get(source_type)

    if not source_class:
        supported = ", ".join(sorted(SOURCE_TYPES))
        raise SourceConfigurationError(
            f"Unknown source type: {source_config.type}. Supported types: {supported}"
        )

    logger.debug(
        "Creating source adapter",
        extra={"source_type": source_type, "source_class": source_class.__name__},
    )

    try:
        return source_class(
            source_config,
            timeout=http_config.timeout,
            user_agent=http_config.user_agent,
            max_candidates=http_config.max_candidates_per_source,
        )
    except SourceConfigurationError:
        raise
    except Exception as e:
        raise SourceConfigurationError(f"Failed to create {source_type} adapter: {e}") from e


def build_sources(app_config: AppConfig) -> List[BaseSource]:
    """Adapters for every enabled source, in configuration order."""
    return [get_source(source, app_config.http) for source in app_config.get_enabled_sources()]
