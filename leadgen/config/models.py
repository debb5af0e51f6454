"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

# Request-surface bounds. Values outside these ranges are clamped, never rejected.
LIMIT_BOUNDS = (50, 250)
RECENCY_DAYS_BOUNDS = (1, 3)
MAX_PAGES_BOUNDS = (1, 5)

DEFAULT_LIMIT = 100
DEFAULT_RECENCY_DAYS = 1
DEFAULT_MAX_PAGES = 2


def clamp(value: int, bounds: tuple) -> int:
    """Clamp an integer into an inclusive (low, high) range."""
    low, high = bounds
    return max(low, min(high, value))


class SourceType(str, Enum):
    """Supported job listing sources."""

    ZIPRECRUITER = "ziprecruiter"
    CAREERBUILDER = "careerbuilder"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SourceConfig(BaseModel):
    """Configuration for a single listing source."""

    name: str = Field(..., min_length=1, description="Human-readable name for the source")
    type: SourceType = Field(..., description="Listing source type")
    query: str = Field("dental receptionist", description="Search keywords")
    location: str = Field("United States", description="Search location")
    enabled: bool = Field(True, description="Whether to fetch from this source")

    @field_validator("name", "query", "location")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from string fields."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    model_config = {"use_enum_values": True, "validate_default": True}


def default_sources() -> List[SourceConfig]:
    return [
        SourceConfig(name="ZipRecruiter", type=SourceType.ZIPRECRUITER),
        SourceConfig(name="CareerBuilder", type=SourceType.CAREERBUILDER),
    ]


class PipelineConfig(BaseModel):
    """Tunables for a single aggregation run.

    Passed explicitly into LeadPipeline rather than read from globals. The
    request surface still clamps per-request limit/days into the bounds above.
    """

    default_limit: int = Field(DEFAULT_LIMIT, description="Lead count when the request omits it")
    default_recency_days: int = Field(
        DEFAULT_RECENCY_DAYS, description="Recency window when the request omits it"
    )
    max_pages: int = Field(DEFAULT_MAX_PAGES, description="Pages fetched per source")
    oversample_factor: int = Field(
        2, ge=1, le=5, description="Candidates kept after dedup, as a multiple of limit"
    )
    pool_size: int = Field(6, ge=1, le=32, description="Enrichment worker count")
    pacing_base_seconds: float = Field(
        0.1, ge=0.0, le=5.0, description="Delay before every enrichment request"
    )
    pacing_step_seconds: float = Field(
        0.05, ge=0.0, le=5.0, description="Extra delay per worker slot (staggering)"
    )
    resolver_timeout_seconds: Optional[float] = Field(
        None, gt=0, le=300, description="Per-call resolver timeout (None = wait forever)"
    )
    source_timeout_seconds: Optional[float] = Field(
        None, gt=0, le=600, description="Per-source fetch timeout (None = wait forever)"
    )
    strict_sources: bool = Field(
        False, description="Fail the whole run when any single source fails"
    )

    @field_validator("default_limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return clamp(v, LIMIT_BOUNDS)

    @field_validator("default_recency_days")
    @classmethod
    def clamp_recency(cls, v: int) -> int:
        return clamp(v, RECENCY_DAYS_BOUNDS)

    @field_validator("max_pages")
    @classmethod
    def clamp_max_pages(cls, v: int) -> int:
        return clamp(v, MAX_PAGES_BOUNDS)


class HttpConfig(BaseModel):
    """HTTP settings shared by source adapters and the enrichment resolver."""

    timeout: int = Field(20, ge=5, le=300, description="Request timeout (seconds)")
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; DentalLeadAggregator/1.0)",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )
    max_candidates_per_source: int = Field(
        500, ge=0, description="Maximum candidates kept per source (0 = unlimited)"
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        """Strip whitespace from user agent."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AppConfig(BaseModel):
    """Root configuration object for the lead aggregator."""

    sources: List[SourceConfig] = Field(
        default_factory=default_sources, description="Listing sources to aggregate"
    )
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_sources(self):
        """At least one source enabled, no duplicate (type, query, location)."""
        if not self.sources:
            raise ValueError("At least one source must be configured")

        if not any(source.enabled for source in self.sources):
            raise ValueError(
                "At least one source must be enabled. All sources have enabled=false."
            )

        seen = set()
        for source in self.sources:
            key = (source.type, source.query.lower(), source.location.lower())
            if key in seen:
                raise ValueError(
                    f"Duplicate source: {source.type} '{source.query}' in {source.location}"
                )
            seen.add(key)

        return self

    def get_enabled_sources(self) -> List[SourceConfig]:
        """Get list of enabled sources."""
        return [source for source in self.sources if source.enabled]
