"""Check plot requests against what each plot kind needs."""
from __future__ import annotations

from ..domain.types import X_REQUIRED_KINDS, XY_KINDS
from .errors import PlotRequestError
from .models import PlotRequest


def validate_plot_request(request: PlotRequest) -> None:
    """Raise PlotRequestError when the axes do not satisfy the plot kind.

    Runs before the stored file is looked up or read.
    """
    kind = request.plot_type
    has_x = bool(request.x_axis)
    has_y = bool(request.y_axes)

    if kind in XY_KINDS and (not has_x or not has_y):
        raise PlotRequestError("X-axis and at least one Y-axis are required for this plot type")
    if kind in X_REQUIRED_KINDS and (not has_x or len(request.y_axes) < 1):
        raise PlotRequestError(f"X-axis and at least one Y-axis are required for {kind}")
    if not has_y:
        raise PlotRequestError(f"At least one Y-axis is required for {kind} plot")


def uses_x_axis(kind: str) -> bool:
    return kind in X_REQUIRED_KINDS
