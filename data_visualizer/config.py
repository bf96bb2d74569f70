from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import os

try:
    from dotenv import load_dotenv
except ImportError:  # pragma: no cover - optional dependency
    load_dotenv = None

if load_dotenv:
    load_dotenv()


def _getenv_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _getenv_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return _parse_bool(raw, default)


def _parse_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _normalize_backend(raw: str | None) -> str:
    value = (raw or "echarts").strip().lower()
    return value or "echarts"


@dataclass(frozen=True)
class Settings:
    year_key: str
    measure_key: str
    series_separator: str
    coerce_missing_measure: bool
    default_backend: str
    percent_decimals: int


settings = Settings(
    year_key=os.getenv("DATAVIS_YEAR_KEY", "Año"),
    measure_key=os.getenv("DATAVIS_MEASURE_KEY", "valor"),
    series_separator=os.getenv("DATAVIS_SERIES_SEPARATOR", " → "),
    coerce_missing_measure=_getenv_bool("DATAVIS_COERCE_MISSING_MEASURE", True),
    default_backend=_normalize_backend(os.getenv("DATAVIS_DEFAULT_BACKEND")),
    percent_decimals=_getenv_int("DATAVIS_PERCENT_DECIMALS", 2),
)

_RUNTIME_OVERRIDES: dict[str, Any] = {}


def get_settings() -> Settings:
    if not _RUNTIME_OVERRIDES:
        return settings
    base = settings
    return Settings(
        year_key=_RUNTIME_OVERRIDES.get("year_key", base.year_key),
        measure_key=_RUNTIME_OVERRIDES.get("measure_key", base.measure_key),
        series_separator=_RUNTIME_OVERRIDES.get(
            "series_separator", base.series_separator
        ),
        coerce_missing_measure=_RUNTIME_OVERRIDES.get(
            "coerce_missing_measure", base.coerce_missing_measure
        ),
        default_backend=_RUNTIME_OVERRIDES.get(
            "default_backend", base.default_backend
        ),
        percent_decimals=_RUNTIME_OVERRIDES.get(
            "percent_decimals", base.percent_decimals
        ),
    )


def update_settings(overrides: dict[str, Any]) -> Settings:
    normalized: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "default_backend":
            normalized[key] = _normalize_backend(str(value))
        elif key == "coerce_missing_measure":
            normalized[key] = _parse_bool(value, settings.coerce_missing_measure)
        elif key == "percent_decimals":
            normalized[key] = int(value)
        else:
            normalized[key] = value
    _RUNTIME_OVERRIDES.update(normalized)
    return get_settings()


def reset_settings() -> Settings:
    _RUNTIME_OVERRIDES.clear()
    return settings
