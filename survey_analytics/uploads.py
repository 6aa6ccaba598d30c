"""
Upload handling helpers and schema migrations.

Database access lives in repositories/; this module only knows about file
names, identifiers and the SQL migration files.
"""
from __future__ import annotations

import logging
import os
import re
import sqlite3
import uuid
from pathlib import Path

from .domain.types import CSV_CONTENT_TYPE, CSV_EXTENSION

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def run_migrations(db_path: str) -> None:
    """Execute every SQL migration file in name order."""
    files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not files:
        logger.warning("No migration files found in %s", MIGRATIONS_DIR)
        return
    with sqlite3.connect(db_path) as conn:
        for migration in files:
            conn.executescript(migration.read_text(encoding="utf-8"))
            logger.info("Applied migration %s", migration.name)


def generate_id() -> str:
    """Generate a unique record ID."""
    return str(uuid.uuid4())


def is_csv_upload(filename: str | None, content_type: str | None) -> bool:
    """Accept files declared as text/csv or named *.csv."""
    if content_type and content_type.split(";")[0].strip().lower() == CSV_CONTENT_TYPE:
        return True
    return bool(filename) and filename.lower().endswith(CSV_EXTENSION)


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent path traversal and other issues."""
    filename = os.path.basename(filename)
    filename = re.sub(r'[^\w\-_\. ]', '', filename)
    if len(filename) > 200:
        name, ext = os.path.splitext(filename)
        filename = name[:200 - len(ext)] + ext
    return filename or "upload.csv"


def storage_name(upload_id: str, filename: str) -> str:
    """On-disk name of an upload: ``<id>-<sanitized original name>``."""
    return f"{upload_id}-{sanitize_filename(filename)}"
