"""Per-column distinct value counting (group-by)."""
from __future__ import annotations

import logging
from collections import Counter

from .errors import PlotRequestError
from .models import ValueCounts
from .reader import column_values, iter_frames

logger = logging.getLogger(__name__)


def group_by_columns(path: str, columns: list[str], chunk_rows: int | None = None) -> dict[str, ValueCounts]:
    """Count occurrences of each raw value, independently for every requested column.

    Pairs keep first-seen order. A row without the column counts under None.
    """
    if not columns:
        raise PlotRequestError("At least one column is required for grouping")

    counters: dict[str, Counter] = {col: Counter() for col in columns}
    rows = 0
    for frame in iter_frames(path, chunk_rows):
        rows += len(frame)
        for col, counter in counters.items():
            counter.update(column_values(frame, col))

    logger.debug("Grouped %d rows by %d column(s) from %s", rows, len(columns), path)
    return {col: list(counter.items()) for col, counter in counters.items()}
