"""Structured logging helpers.

Every module logs through ``get_logger(__name__, component=...)`` and tags
records with an ``event`` name in ``extra``. Run-scoped fields (run_id,
source, lead_index) come from ``leadgen.logging.context.log_context``.
"""

import logging
from typing import Optional


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that stamps a component name while keeping per-call extra."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None):
    """Get a logger, optionally bound to a component.

    Example:
        >>> logger = get_logger(__name__, component="enrichment")
        >>> logger.info("Lead kept", extra={"event": "enrichment.lead.kept"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger
