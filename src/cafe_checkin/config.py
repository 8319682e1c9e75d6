"""Settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _safe_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    store: str = "memory"  # memory|supabase
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    timeout_sec: float = 5.0
    preferences_path: str | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        supabase_url = _optional(os.getenv("SUPABASE_URL"))
        default_store = "supabase" if supabase_url else "memory"
        return cls(
            store=(os.getenv("CAFE_CHECKIN_STORE", default_store).strip().lower() or default_store),
            supabase_url=supabase_url,
            supabase_anon_key=_optional(os.getenv("SUPABASE_ANON_KEY")),
            timeout_sec=max(0.1, _safe_float(os.getenv("CAFE_CHECKIN_TIMEOUT_SEC"), 5.0)),
            preferences_path=_optional(os.getenv("CAFE_CHECKIN_PREFS_PATH")),
            log_level=(os.getenv("CAFE_CHECKIN_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"),
        )
