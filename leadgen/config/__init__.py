"""Configuration management module for the dental lead aggregator."""

from .environment import EnvironmentConfig, clamp_int, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    LIMIT_BOUNDS,
    MAX_PAGES_BOUNDS,
    RECENCY_DAYS_BOUNDS,
    AppConfig,
    HttpConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PipelineConfig,
    SourceConfig,
    SourceType,
)

__all__ = [
    # Main loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    "clamp_int",
    # Configuration models
    "AppConfig",
    "SourceConfig",
    "PipelineConfig",
    "HttpConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums and bounds
    "SourceType",
    "LogLevel",
    "LogFormat",
    "LIMIT_BOUNDS",
    "RECENCY_DAYS_BOUNDS",
    "MAX_PAGES_BOUNDS",
    # Exceptions
    "ConfigurationError",
]
