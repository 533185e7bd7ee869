from __future__ import annotations

import os
from dataclasses import dataclass

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _get_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _get_str_env(name: str, default: str | None) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_log_level_env(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip().upper()
    return value if value in _LOG_LEVELS else default


@dataclass(frozen=True)
class AppConfig:
    max_pdf_size_mb: int = _get_int_env("PDF_MERGER_MAX_PDF_MB", 50)
    max_batch_size_mb: int = _get_int_env("PDF_MERGER_MAX_BATCH_MB", 200)
    allow_directory_output: bool = _get_bool_env("PDF_MERGER_ALLOW_DIRECTORY_OUTPUT", True)
    default_output_dir: str | None = _get_str_env("PDF_MERGER_OUTPUT_DIR", None)
    log_level: str = _get_log_level_env("PDF_MERGER_LOG_LEVEL", "INFO")

    @property
    def max_pdf_size_bytes(self) -> int:
        return self.max_pdf_size_mb * 1024 * 1024

    @property
    def max_batch_size_bytes(self) -> int:
        return self.max_batch_size_mb * 1024 * 1024
