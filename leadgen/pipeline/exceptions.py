"""Custom exceptions for pipeline runs."""

from typing import List


class PipelineError(Exception):
    """Base exception for failures that abort a whole run."""

    pass


class SourcesUnavailableError(PipelineError):
    """Listing sources failed and nothing usable could be combined.

    Raised when every source fails, or when any source fails in strict mode.

    Attributes:
        failures: "source: error" strings, one per failed source
    """

    def __init__(self, message: str, failures: List[str] = None) -> None:
        super().__init__(message)
        self.failures = failures or []
