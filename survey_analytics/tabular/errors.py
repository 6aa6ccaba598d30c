from __future__ import annotations


class TabularError(Exception):
    """Base error class for the CSV pipeline."""


class TabularReadError(TabularError, OSError):
    """Raised when a stored CSV file is missing, unreadable or cannot be parsed."""


class PlotRequestError(TabularError, ValueError):
    """Raised when a plot or group-by request is missing what its kind requires."""
