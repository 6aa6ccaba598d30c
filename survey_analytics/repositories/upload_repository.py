"""
Upload repository for stored CSV files.

Encapsulates SQLite and filesystem operations for csv_uploads.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import json
import logging
import os
import sqlite3
from dataclasses import dataclass, field

from ..uploads import storage_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    """Metadata of an uploaded CSV file, including its header columns."""
    upload_id: str
    user_id: str
    file_name: str
    file_path: str
    columns: list[str] = field(default_factory=list)
    created_at: str = ""


class UploadRepository:
    """Repository for stored CSV uploads."""

    def __init__(self, db_path: str, upload_dir: str) -> None:
        self._db_path = db_path
        self._upload_dir = upload_dir

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_upload_dir(self) -> str:
        os.makedirs(self._upload_dir, exist_ok=True)
        return self._upload_dir

    def save_file(self, upload_id: str, filename: str, content: bytes) -> str:
        """Write uploaded bytes to disk and return the file path."""
        file_path = os.path.join(self._ensure_upload_dir(), storage_name(upload_id, filename))
        with open(file_path, "wb") as f:
            f.write(content)
        return file_path

    def delete_file(self, file_path: str) -> None:
        try:
            os.remove(file_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove stored upload %s: %s", file_path, exc)

    def save_upload(self, upload_id: str, user_id: str, file_name: str, file_path: str, columns: list[str]) -> StoredFile:
        """Insert upload metadata. Raises sqlite3.IntegrityError on a duplicate id."""
        now = dt.datetime.now(dt.timezone.utc).isoformat()
        with self._conn() as conn:
            conn.execute(
                "INSERT INTO csv_uploads (upload_id, user_id, file_name, file_path, columns_json, created_at) VALUES (?, ?, ?, ?, ?, ?)",
                (upload_id, user_id, file_name, file_path, json.dumps(columns), now),
            )
            conn.commit()
        return StoredFile(upload_id, user_id, file_name, file_path, list(columns), now)

    def get_upload(self, upload_id: str) -> StoredFile | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT upload_id, user_id, file_name, file_path, columns_json, created_at FROM csv_uploads WHERE upload_id = ?",
                (upload_id,),
            ).fetchone()
        return self._to_stored_file(row) if row else None

    def list_uploads(self, user_id: str) -> list[StoredFile]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT upload_id, user_id, file_name, file_path, columns_json, created_at FROM csv_uploads WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            ).fetchall()
        return [self._to_stored_file(r) for r in rows]

    def delete_upload(self, upload_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM csv_uploads WHERE upload_id = ?", (upload_id,))
            conn.commit()
            return cur.rowcount > 0

    @staticmethod
    def _to_stored_file(row: tuple) -> StoredFile:
        return StoredFile(row[0], row[1], row[2], row[3], json.loads(row[4]), str(row[5]))

    # Async wrappers
    async def save_file_async(self, upload_id: str, filename: str, content: bytes) -> str:
        return await asyncio.to_thread(self.save_file, upload_id, filename, content)

    async def delete_file_async(self, file_path: str) -> None:
        return await asyncio.to_thread(self.delete_file, file_path)

    async def save_upload_async(self, upload_id: str, user_id: str, file_name: str, file_path: str, columns: list[str]) -> StoredFile:
        return await asyncio.to_thread(self.save_upload, upload_id, user_id, file_name, file_path, columns)

    async def get_upload_async(self, upload_id: str) -> StoredFile | None:
        return await asyncio.to_thread(self.get_upload, upload_id)

    async def list_uploads_async(self, user_id: str) -> list[StoredFile]:
        return await asyncio.to_thread(self.list_uploads, user_id)

    async def delete_upload_async(self, upload_id: str) -> bool:
        return await asyncio.to_thread(self.delete_upload, upload_id)
