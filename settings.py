from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_UPLOAD_DIR_ENV = "UPLOAD_TMP_DIR"
_TABLE_NAME_ENV = "MEASURES_TABLE_NAME"
_TABLE_PATH_ENV = "MEASURES_PERSISTENCE_PATH"
_API_KEY_ENV = "GEMINI_API_KEY"
_MODEL_ENV = "GEMINI_MODEL"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_CORS_ORIGINS_ENV = "CORS_ALLOW_ORIGINS"


@dataclass(frozen=True)
class Settings:
    upload_tmp_dir: str
    table_name: str
    table_persistence_path: Optional[str]
    gemini_api_key: str
    gemini_model: str
    log_level: str
    cors_allow_origins: Tuple[str, ...]


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


@lru_cache
def get_settings() -> Settings:
    return Settings(
        upload_tmp_dir=_read_str_env(_UPLOAD_DIR_ENV, "./uploads/tmp"),
        table_name=_read_str_env(_TABLE_NAME_ENV, "measures"),
        table_persistence_path=_read_optional_env(_TABLE_PATH_ENV, "./tmp/measures.json"),
        gemini_api_key=_read_str_env(_API_KEY_ENV, ""),
        gemini_model=_read_str_env(_MODEL_ENV, "gemini-1.5-pro"),
        log_level=_read_log_level("INFO"),
        cors_allow_origins=_read_origins(("*",)),
    )
