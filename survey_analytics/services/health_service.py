"""
Health check service.
"""
from __future__ import annotations

import asyncio
import os
import sqlite3
import time
from dataclasses import dataclass
from typing import Literal

HealthStatusType = Literal["ok", "error", "unavailable"]


@dataclass(frozen=True)
class ServiceHealth:
    status: HealthStatusType
    message: str | None = None
    latency_ms: int | None = None


@dataclass(frozen=True)
class HealthReport:
    backend: ServiceHealth
    database: ServiceHealth
    storage: ServiceHealth


class HealthService:
    """Service for checking health of the database and upload storage."""

    def __init__(self, db_path: str, upload_dir: str) -> None:
        self._db_path = db_path
        self._upload_dir = upload_dir

    async def check_all(self) -> HealthReport:
        db, storage = await asyncio.gather(asyncio.to_thread(self._check_db), asyncio.to_thread(self._check_storage))
        return HealthReport(ServiceHealth("ok", "Backend is running"), db, storage)

    def _check_db(self) -> ServiceHealth:
        start = time.perf_counter()
        try:
            with sqlite3.connect(self._db_path) as conn:
                conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            return ServiceHealth("error", str(exc))
        return ServiceHealth("ok", "Database reachable", int((time.perf_counter() - start) * 1000))

    def _check_storage(self) -> ServiceHealth:
        if not os.path.isdir(self._upload_dir):
            return ServiceHealth("unavailable", f"Upload directory missing: {self._upload_dir}")
        if not os.access(self._upload_dir, os.W_OK):
            return ServiceHealth("error", f"Upload directory not writable: {self._upload_dir}")
        return ServiceHealth("ok", "Upload directory writable")
