from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# config.py is at backend/refcodes/config.py -> backend/.env is parents[1]/.env
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
# Read .env as UTF-8 with BOM support to avoid a malformed first key.
load_dotenv(ENV_PATH, encoding="utf-8-sig")


def _get_env(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if value is not None:
        return str(value)
    bom_value = os.getenv(f"\ufeff{name}")
    if bom_value is not None:
        return str(bom_value)
    return default


def _env_int(name: str, default: int) -> int:
    raw = _get_env(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_list(name: str, default: str) -> list[str]:
    raw = _get_env(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


SUPABASE_URL = _get_env("SUPABASE_URL", "").strip()
SUPABASE_KEY = (
    _get_env("SUPABASE_SERVICE_ROLE_KEY", "").strip()
    or _get_env("SUPABASE_ANON_KEY", "").strip()
)
SQL_TIMEOUT_SEC = max(1, _env_int("SQL_TIMEOUT_SEC", 20))

# Shared secret for the moderation endpoints. Unset keeps admin closed.
ADMIN_PASSWORD = _get_env("ADMIN_PASSWORD", "")

TOP_SERVICES_LIMIT = max(1, _env_int("TOP_SERVICES_LIMIT", 10))
SUGGEST_MIN_CHARS = max(1, _env_int("SUGGEST_MIN_CHARS", 3))

LOG_LEVEL = _get_env("LOG_LEVEL", "INFO").strip().upper() or "INFO"
CORS_ALLOW_ORIGINS = _env_list("CORS_ALLOW_ORIGINS", "*")
