"""Stream stored CSV files row by row.

The first physical row names the columns. Everything is read as raw strings;
numeric interpretation is left to the callers. Bytes that are not valid
UTF-8 are decoded as U+FFFD instead of failing the read. Files are read in
chunks of ``chunk_rows`` rows so large uploads never sit in memory at once.
"""
from __future__ import annotations

import logging
from typing import Iterator

import pandas as pd

from .errors import TabularReadError
from .models import CellValue

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_ROWS = 5000

_READ_OPTIONS = {
    "header": None,
    "dtype": str,
    "keep_default_na": False,
    "encoding": "utf-8-sig",
    "encoding_errors": "replace",
    "engine": "python",
    "skip_blank_lines": True,
}


def _truncate_bad_line(width: int):
    def handler(fields: list[str]) -> list[str]:
        logger.debug("Truncating CSV row with %d fields to header width %d", len(fields), width)
        return fields[:width]
    return handler


def _read_error(path: str, exc: Exception) -> TabularReadError:
    logger.warning("Cannot read CSV file %s: %s", path, exc)
    reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
    return TabularReadError(f"Cannot read CSV file: {reason}")


def read_columns(path: str) -> list[str]:
    """Return the header names in file order, duplicates included."""
    try:
        head = pd.read_csv(path, nrows=1, **_READ_OPTIONS)
    except pd.errors.EmptyDataError:
        return []
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
        raise _read_error(path, exc) from exc
    if head.empty:
        return []
    return ["" if pd.isna(v) else str(v) for v in head.iloc[0].tolist()]


def iter_frames(path: str, chunk_rows: int | None = None) -> Iterator[pd.DataFrame]:
    """Yield DataFrame chunks keyed by header name.

    Short rows are padded with NaN, long rows are cut to the header width.
    When a header name repeats, the last column with that name wins.
    """
    columns = read_columns(path)
    if not columns:
        return
    width = len(columns)
    options = dict(_READ_OPTIONS, on_bad_lines=_truncate_bad_line(width))
    first = True
    try:
        with pd.read_csv(path, names=list(range(width)), chunksize=chunk_rows or DEFAULT_CHUNK_ROWS,
                         **options) as chunks:
            for chunk in chunks:
                if first:
                    chunk = chunk.iloc[1:]
                    first = False
                chunk = chunk.set_axis(columns, axis=1)
                chunk = chunk.loc[:, ~chunk.columns.duplicated(keep="last")]
                if not chunk.empty:
                    yield chunk
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
        raise _read_error(path, exc) from exc


def iter_rows(path: str, chunk_rows: int | None = None) -> Iterator[dict[str, CellValue]]:
    """Yield one ``{column: raw value}`` mapping per data row; missing fields are None."""
    for frame in iter_frames(path, chunk_rows):
        for record in frame.to_dict("records"):
            yield {k: _cell(v) for k, v in record.items()}


def column_values(frame: pd.DataFrame, column: str) -> list[CellValue]:
    """Raw values of ``column`` in row order; a column the file lacks reads as None."""
    if column not in frame.columns:
        return [None] * len(frame)
    return [_cell(v) for v in frame[column].tolist()]


def _cell(value: object) -> CellValue:
    return value if isinstance(value, str) else None
