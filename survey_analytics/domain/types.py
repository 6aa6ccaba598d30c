"""
Core type definitions and constants.
"""
from __future__ import annotations

from typing import Literal

PlotKind = Literal["scatter", "bar", "line", "pie", "histogram", "heatmap", "box", "area"]

PLOT_KINDS: tuple[str, ...] = ("scatter", "bar", "line", "pie", "histogram", "heatmap", "box", "area")

# Kinds that plot y columns against a shared x column.
XY_KINDS: frozenset[str] = frozenset({"scatter", "bar", "line", "pie", "area"})
X_REQUIRED_KINDS: frozenset[str] = XY_KINDS | {"heatmap"}

DEFAULT_ANALYSIS_TITLE = "Untitled Analysis"
DEFAULT_PLOT_TITLE = "Untitled Plot"
DEFAULT_AUTHOR_NAME = "Unknown Author"

CSV_CONTENT_TYPE = "text/csv"
CSV_EXTENSION = ".csv"


class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    EMPTY_PLOT_DATA = "EMPTY_PLOT_DATA"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    READ_ERROR = "READ_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
