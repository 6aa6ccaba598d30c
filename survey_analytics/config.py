from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _getenv_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _getenv_optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _split_origins(raw: str | None) -> tuple[str, ...]:
    value = raw or "http://localhost:5173,http://127.0.0.1:5173"
    return tuple(o.strip() for o in value.split(",") if o.strip())


@dataclass(frozen=True)
class Settings:
    db_path: str
    upload_dir: str
    max_upload_mb: int
    csv_chunk_rows: int
    app_env: str
    cors_origins: tuple[str, ...]
    plot_color_seed: int | None
    host: str
    port: int
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings(
    db_path=os.getenv("DB_PATH", "survey_analytics.db"),
    upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
    max_upload_mb=_getenv_int("MAX_UPLOAD_MB", 10),
    csv_chunk_rows=_getenv_int("CSV_CHUNK_ROWS", 5000),
    app_env=os.getenv("APP_ENV", "development").strip().lower(),
    cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
    plot_color_seed=_getenv_optional_int("PLOT_COLOR_SEED"),
    host=os.getenv("HOST", "127.0.0.1"),
    port=_getenv_int("PORT", 8000),
    log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
)

_RUNTIME_OVERRIDES: dict[str, Any] = {}


def get_settings() -> Settings:
    if not _RUNTIME_OVERRIDES:
        return settings
    return dataclasses.replace(settings, **_RUNTIME_OVERRIDES)


def update_settings(overrides: dict[str, Any]) -> Settings:
    normalized: dict[str, Any] = {}
    for key, value in overrides.items():
        if key == "plot_color_seed":
            normalized[key] = None if value is None else int(value)
            continue
        if value is None:
            continue
        if key in {"max_upload_mb", "csv_chunk_rows", "port"}:
            normalized[key] = int(value)
        elif key == "app_env":
            normalized[key] = str(value).strip().lower()
        elif key == "cors_origins":
            normalized[key] = _split_origins(value) if isinstance(value, str) else tuple(value)
        else:
            normalized[key] = value
    _RUNTIME_OVERRIDES.update(normalized)
    return get_settings()
