"""
Analysis repository.

One row per analysis; the plot payloads are embedded as a JSON document.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any

_COLUMNS = "analysis_id, user_id, title, author_name, description, plots_json, is_public, created_at, updated_at"


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


@dataclass(frozen=True)
class Analysis:
    """A saved, owned collection of plot payloads."""
    analysis_id: str
    user_id: str
    title: str
    author_name: str
    description: str = ""
    plots: list[dict[str, Any]] = field(default_factory=list)
    is_public: bool = False
    created_at: str = ""
    updated_at: str = ""


class AnalysisRepository:
    """SQLite persistence for analyses. Ownership is checked by the caller."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def create(self, analysis_id: str, user_id: str, title: str, author_name: str, description: str,
               plots: list[dict[str, Any]]) -> Analysis:
        """Insert a new analysis. Raises sqlite3.IntegrityError on a duplicate id."""
        now = _now()
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO analyses ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (analysis_id, user_id, title, author_name, description, json.dumps(plots), 0, now, now),
            )
            conn.commit()
        return Analysis(analysis_id, user_id, title, author_name, description, plots, False, now, now)

    def get(self, analysis_id: str) -> Analysis | None:
        with self._conn() as conn:
            row = conn.execute(f"SELECT {_COLUMNS} FROM analyses WHERE analysis_id = ?", (analysis_id,)).fetchone()
        return self._to_analysis(row) if row else None

    def list_for_user(self, user_id: str) -> list[Analysis]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM analyses WHERE user_id = ? ORDER BY created_at ASC, rowid ASC", (user_id,)
            ).fetchall()
        return [self._to_analysis(r) for r in rows]

    def save(self, analysis: Analysis) -> Analysis:
        """Overwrite the mutable fields of an existing analysis; last write wins."""
        now = _now()
        with self._conn() as conn:
            conn.execute(
                "UPDATE analyses SET title = ?, author_name = ?, description = ?, plots_json = ?, is_public = ?, updated_at = ? "
                "WHERE analysis_id = ?",
                (analysis.title, analysis.author_name, analysis.description, json.dumps(analysis.plots),
                 int(analysis.is_public), now, analysis.analysis_id),
            )
            conn.commit()
        return Analysis(analysis.analysis_id, analysis.user_id, analysis.title, analysis.author_name,
                        analysis.description, analysis.plots, analysis.is_public, analysis.created_at, now)

    def delete(self, analysis_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM analyses WHERE analysis_id = ?", (analysis_id,))
            conn.commit()
            return cur.rowcount > 0

    @staticmethod
    def _to_analysis(row: tuple) -> Analysis:
        return Analysis(row[0], row[1], row[2], row[3], row[4], json.loads(row[5]), bool(row[6]), str(row[7]), str(row[8]))

    # Async wrappers
    async def create_async(self, analysis_id: str, user_id: str, title: str, author_name: str, description: str,
                           plots: list[dict[str, Any]]) -> Analysis:
        return await asyncio.to_thread(self.create, analysis_id, user_id, title, author_name, description, plots)

    async def get_async(self, analysis_id: str) -> Analysis | None:
        return await asyncio.to_thread(self.get, analysis_id)

    async def list_for_user_async(self, user_id: str) -> list[Analysis]:
        return await asyncio.to_thread(self.list_for_user, user_id)

    async def save_async(self, analysis: Analysis) -> Analysis:
        return await asyncio.to_thread(self.save, analysis)

    async def delete_async(self, analysis_id: str) -> bool:
        return await asyncio.to_thread(self.delete, analysis_id)
