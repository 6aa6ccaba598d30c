"""CSV ingestion and plot-data derivation pipeline."""
from .errors import TabularError, TabularReadError, PlotRequestError
from .models import PlotRequest, PlotResult, Series, CellValue, ValueCounts
from .reader import read_columns, iter_rows, iter_frames
from .aggregator import group_by_columns
from .colors import ColorPicker
from .validator import validate_plot_request
from .plot_builder import build_plot_data, build_layout

__all__ = [
    "TabularError",
    "TabularReadError",
    "PlotRequestError",
    "PlotRequest",
    "PlotResult",
    "Series",
    "CellValue",
    "ValueCounts",
    "read_columns",
    "iter_rows",
    "iter_frames",
    "group_by_columns",
    "ColorPicker",
    "validate_plot_request",
    "build_plot_data",
    "build_layout",
]
