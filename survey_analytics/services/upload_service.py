"""
Upload service: accepts CSV files and registers their columns.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3

from fastapi import UploadFile

from ..domain.ownership import Requester, ensure_owner
from ..errors import ConflictError, FileTooLargeError, NotFoundError, StorageReadError, UnsupportedMediaError, ValidationError
from ..repositories import StoredFile, UploadRepository
from ..tabular import TabularReadError, read_columns
from ..uploads import generate_id, is_csv_upload, sanitize_filename

logger = logging.getLogger(__name__)


class UploadService:
    """Stores uploaded CSV files and their metadata for the uploading user."""

    def __init__(self, uploads: UploadRepository, max_upload_mb: int) -> None:
        self._uploads = uploads
        self._max_bytes = max_upload_mb * 1024 * 1024
        self._max_upload_mb = max_upload_mb

    async def upload(self, requester: Requester, file: UploadFile) -> StoredFile:
        """Validate and store an uploaded CSV.

        The body is read at most one byte past the size limit, so oversized
        uploads are rejected without being buffered whole.
        """
        filename = file.filename
        if not filename:
            raise ValidationError("Please upload a CSV file")
        if not is_csv_upload(filename, file.content_type):
            raise UnsupportedMediaError("Only CSV files are allowed")
        if file.size is not None and file.size > self._max_bytes:
            raise FileTooLargeError(f"File exceeds {self._max_upload_mb}MB")
        content = await file.read(self._max_bytes + 1)
        if len(content) > self._max_bytes:
            raise FileTooLargeError(f"File exceeds {self._max_upload_mb}MB")

        upload_id = generate_id()
        file_path = await self._uploads.save_file_async(upload_id, filename, content)
        try:
            columns = await asyncio.to_thread(read_columns, file_path)
        except TabularReadError as exc:
            await self._uploads.delete_file_async(file_path)
            raise StorageReadError(str(exc), message="Could not read CSV headers") from exc

        try:
            stored = await self._uploads.save_upload_async(upload_id, requester.user_id, sanitize_filename(filename), file_path, columns)
        except sqlite3.IntegrityError as exc:
            await self._uploads.delete_file_async(file_path)
            raise ConflictError("A record with this information already exists.") from exc

        logger.info("Stored CSV upload %s for user %s with %d column(s)", upload_id, requester.user_id, len(columns))
        return stored

    async def list_uploads(self, requester: Requester) -> list[StoredFile]:
        return await self._uploads.list_uploads_async(requester.user_id)

    async def get_upload(self, requester: Requester, upload_id: str, action: str = "access") -> StoredFile:
        """Look up an upload and check the requester owns it."""
        stored = await self._uploads.get_upload_async(upload_id)
        if stored is None:
            raise NotFoundError("CSV upload not found")
        ensure_owner(stored.user_id, requester, action, "CSV upload")
        return stored

    async def delete_upload(self, requester: Requester, upload_id: str) -> None:
        stored = await self.get_upload(requester, upload_id, action="delete")
        await self._uploads.delete_upload_async(stored.upload_id)
        await self._uploads.delete_file_async(stored.file_path)
        logger.info("Deleted CSV upload %s", upload_id)
