from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_INPUT_PATH_ENV = "AIRQ_INPUT_PATH"
_INPUT_FORMAT_ENV = "AIRQ_INPUT_FORMAT"
_SHOW_READINGS_ENV = "AIRQ_SHOW_READINGS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_INPUT_FORMATS = ("auto", "csv", "json")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    input_path: str
    input_format: str
    show_readings: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_input_format(default: str) -> str:
    candidate = _read_str_env(_INPUT_FORMAT_ENV, default).lower()
    return candidate if candidate in _INPUT_FORMATS else default


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def normalize_log_level(value: str) -> str:
    """Upper-case a level name, rejecting names the logging module does not define."""
    candidate = value.strip().upper()
    if candidate not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {value!r}.")
    return candidate


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    try:
        return normalize_log_level(value)
    except ValueError:
        return default


@lru_cache
def get_settings() -> Settings:
    return Settings(
        input_path=_read_str_env(_INPUT_PATH_ENV, "readings.csv"),
        input_format=_read_input_format("auto"),
        show_readings=_read_bool_env(_SHOW_READINGS_ENV, True),
        log_level=_read_log_level("INFO"),
    )
