from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from survey_analytics.app import app
from survey_analytics.config import update_settings
from survey_analytics.uploads import run_migrations


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write CSV text to a temp file and return its path as a string."""
    def _write(text: str, name: str = "data.csv") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "survey_analytics.db")
    run_migrations(path)
    return path


@pytest.fixture
def client(tmp_path: Path):
    update_settings({
        "db_path": str(tmp_path / "api.db"),
        "upload_dir": str(tmp_path / "uploads"),
        "max_upload_mb": 10,
        "csv_chunk_rows": 2,
        "plot_color_seed": 42,
        "app_env": "development",
    })
    with TestClient(app) as c:
        yield c
