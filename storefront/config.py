from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../storefront repo root
load_dotenv(dotenv_path=ROOT_DIR / ".env")

FLAG_PREFIX = "FF_"

_TRUTHY = {"1", "true", "yes", "on"}


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


def _get_list(*keys: str) -> tuple[str, ...]:
    v = _get_env(*keys, default="") or ""
    return tuple(p.strip() for p in v.split(",") if p.strip())


def _get_flags() -> dict[str, bool]:
    # FF_SALES_CHANNELS=true -> {"sales_channels": True}
    flags = {}
    for k, v in os.environ.items():
        if k.startswith(FLAG_PREFIX) and v.strip():
            flags[k[len(FLAG_PREFIX):].lower()] = v.strip().lower() in _TRUTHY
    return flags


@dataclass(frozen=True)
class Settings:
    db_path: str
    db_timeout: float = 5.0
    admin_id: str = ""
    store_cors: tuple[str, ...] = ()
    default_sales_channel_id: str | None = None
    feature_flags: dict[str, bool] = field(default_factory=dict)
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 9000


def load_settings() -> Settings:
    return Settings(
        db_path=_get_env("DB_PATH", "DATABASE_PATH", default=str(ROOT_DIR / "data" / "store.db"))
        or "",
        db_timeout=_get_float("DB_TIMEOUT", default=5.0),
        admin_id=_get_env("ADMIN_ID", "ADMIN_USER_ID", default="") or "",
        store_cors=_get_list("STORE_CORS"),
        default_sales_channel_id=_get_env("DEFAULT_SALES_CHANNEL_ID", default=None),
        feature_flags=_get_flags(),
        log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
        host=_get_env("HOST", default="127.0.0.1") or "127.0.0.1",
        port=_get_int("PORT", default=9000) or 9000,
    )


settings = load_settings()
