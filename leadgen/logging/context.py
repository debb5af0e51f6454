"""Context propagation for structured logging.

Fields pushed here are merged into every log record emitted inside the scope.
Backed by contextvars, so the context follows asyncio tasks and is copied
into ``asyncio.to_thread`` calls made by pipeline workers.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the active logging context."""
    return dict(LogContextVar.get())


def push_log_context(**fields) -> Token:
    """Merge fields into the logging context; returns a token for pop_log_context()."""
    return LogContextVar.set({**LogContextVar.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the logging context captured by push_log_context()."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop all context fields (used by tests)."""
    LogContextVar.set({})


class log_context:
    """Scoped logging context.

    Example:
        >>> with log_context(run_id="abc123", source="ziprecruiter"):
        ...     logger.info("Fetching")  # carries run_id and source
    """

    def __init__(self, **fields):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
            self.token = None
        return False
