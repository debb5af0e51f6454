"""HTTP surface: JSON, CSV and HTML views over the lead pipeline."""

from .app import create_app
from .rendering import PageRenderer

__all__ = ["create_app", "PageRenderer"]
