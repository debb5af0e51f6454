"""Custom exceptions for listing-source adapters."""


class SourceError(Exception):
    """Base exception for all source adapter errors.

    The fan-out stage catches this per source, records a failed
    SourceOutcome and keeps going with the remaining sources.
    """

    pass


class SourceHTTPError(SourceError):
    """HTTP request to a listing site failed (4xx/5xx or connection error)."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class SourceTimeoutError(SourceError):
    """HTTP request to a listing site timed out."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class SourceResponseError(SourceError):
    """The listing page could not be parsed into candidates."""

    pass


class SourceConfigurationError(SourceError):
    """Invalid adapter configuration (unknown source type, bad timeout, ...)."""

    pass
