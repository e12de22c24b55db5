"""Configuration helpers for the accumulator calculator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

from .operations import DEFAULT_PRECISION

_MAX_PRECISION = 15


@dataclass(frozen=True)
class CalculatorSettings:
    precision: int = DEFAULT_PRECISION
    session_ttl_minutes: float = 30.0
    max_sessions: int = 1000
    max_entries: int = 500

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(minutes=self.session_ttl_minutes)


def _as_int(value: object, default: int) -> int:
    try:
        return int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _as_float(value: object, default: float) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def load_settings(raw: Mapping[str, object] | None) -> CalculatorSettings:
    raw = raw or {}
    defaults = CalculatorSettings()
    precision = _as_int(raw.get("precision"), defaults.precision)
    ttl = _as_float(raw.get("session_ttl_minutes"), defaults.session_ttl_minutes)
    max_sessions = _as_int(raw.get("max_sessions"), defaults.max_sessions)
    max_entries = _as_int(raw.get("max_entries"), defaults.max_entries)
    return CalculatorSettings(
        precision=min(max(precision, 0), _MAX_PRECISION),
        session_ttl_minutes=max(ttl, 1.0),
        max_sessions=max(max_sessions, 1),
        max_entries=max(max_entries, 1),
    )


__all__ = ["CalculatorSettings", "load_settings"]
