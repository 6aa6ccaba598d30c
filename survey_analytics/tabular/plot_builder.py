"""Derive chart payloads (series + layout) from a stored CSV in one pass."""
from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd

from .colors import ColorPicker
from .models import CellValue, PlotRequest, PlotResult, Series
from .reader import column_values, iter_frames
from .validator import uses_x_axis, validate_plot_request

logger = logging.getLogger(__name__)


def build_plot_data(
    path: str,
    request: PlotRequest,
    *,
    colors: ColorPicker | None = None,
    chunk_rows: int | None = None,
) -> PlotResult:
    """Validate ``request``, stream ``path`` once and shape the series for its kind."""
    validate_plot_request(request)
    x_axis = request.x_axis if uses_x_axis(request.plot_type) else None
    x_values, y_values = collect_axes(path, x_axis, request.y_axes, chunk_rows=chunk_rows)
    data = shape_series(request.plot_type, x_values, y_values, request.y_axes, colors or ColorPicker())
    return PlotResult(data=data, layout=build_layout(request.plot_type, request.x_axis, request.y_axes))


def collect_axes(
    path: str,
    x_axis: str | None,
    y_axes: list[str],
    chunk_rows: int | None = None,
) -> tuple[list[CellValue], dict[str, list[int | float]]]:
    """Gather raw x values and numeric y values for every row."""
    x_values: list[CellValue] = []
    y_values: dict[str, list[int | float]] = {y: [] for y in y_axes}
    for frame in iter_frames(path, chunk_rows):
        if x_axis:
            x_values.extend(column_values(frame, x_axis))
        for y in y_values:
            y_values[y].extend(coerce_numeric(frame, y))
    return x_values, y_values


def coerce_numeric(frame: pd.DataFrame, column: str) -> list[int | float]:
    """Numeric view of a column; blanks, text, missing and infinite values become 0.

    Parsing goes through pandas, so integers past float precision come back
    rounded (``99999999999999999999`` is not exactly ``1e20``).
    """
    if column not in frame.columns:
        return [0] * len(frame)
    raw = frame[column]
    stripped = raw.map(lambda v: v.strip() if isinstance(v, str) else v)
    numeric = pd.to_numeric(stripped, errors="coerce")
    numeric = numeric.replace([np.inf, -np.inf], np.nan)
    coerced = int(numeric.isna().sum() - raw.isna().sum())
    if coerced:
        logger.debug("Coerced %d non-numeric value(s) in column %r to 0", coerced, column)
    return [_to_json_number(v) for v in numeric.fillna(0).tolist()]


def shape_series(
    kind: str,
    x_values: list[CellValue],
    y_values: dict[str, list[int | float]],
    y_axes: list[str],
    colors: ColorPicker,
) -> list[Series]:
    if kind in ("scatter", "line"):
        mode = "lines+markers" if kind == "line" else "markers"
        return [{"type": kind, "name": y, "x": x_values, "y": y_values[y], "mode": mode} for y in y_axes]

    if kind == "bar":
        return [
            {"type": "bar", "name": y, "x": x_values, "y": y_values[y], "marker": {"color": colors.next_color()}}
            for y in y_axes
        ]

    if kind == "pie":
        values = y_values[y_axes[0]] if y_axes else [1] * len(x_values)
        return [{"type": "pie", "labels": x_values, "values": values,
                 "marker": {"colors": colors.colors(len(x_values))}}]

    if kind == "histogram":
        return [
            {"type": "histogram", "name": y, "x": y_values[y], "marker": {"color": colors.next_color()}}
            for y in y_axes
        ]

    if kind == "heatmap":
        # Only the first y column is drawn.
        first = y_axes[0]
        return [{"type": "heatmap", "z": [y_values[first]], "x": x_values, "y": [first]}]

    if kind == "box":
        return [{"type": "box", "name": y, "y": y_values[y]} for y in y_axes]

    if kind == "area":
        return [{"type": "scatter", "fill": "tozeroy", "name": y, "x": x_values, "y": y_values[y]} for y in y_axes]

    logger.warning("Unhandled plot kind: %s", kind)
    return []


def build_layout(kind: str, x_axis: str | None, y_axes: list[str]) -> dict[str, Any]:
    return {
        "title": f"{kind[:1].upper()}{kind[1:]} Plot",
        "xaxis": {"title": x_axis},
        "yaxis": {"title": ", ".join(y_axes)},
    }


def _to_json_number(val: Any) -> int | float:
    if isinstance(val, (bool, np.bool_)):
        return int(val)
    if isinstance(val, (int, np.integer)):
        return int(val)
    f = float(val)
    return int(f) if f.is_integer() else f
