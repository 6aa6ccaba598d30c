"""Domain layer for survey-analytics.

``domain.ownership`` is imported directly by callers; it depends on ``errors``,
which in turn depends on ``domain.types``.
"""
from .types import (
    PlotKind, PLOT_KINDS, XY_KINDS, X_REQUIRED_KINDS, ErrorCode,
    DEFAULT_ANALYSIS_TITLE, DEFAULT_PLOT_TITLE, DEFAULT_AUTHOR_NAME, CSV_CONTENT_TYPE, CSV_EXTENSION,
)

__all__ = ["PlotKind", "PLOT_KINDS", "XY_KINDS", "X_REQUIRED_KINDS", "ErrorCode",
           "DEFAULT_ANALYSIS_TITLE", "DEFAULT_PLOT_TITLE", "DEFAULT_AUTHOR_NAME", "CSV_CONTENT_TYPE", "CSV_EXTENSION"]
