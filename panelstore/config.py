from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../panel-store
load_dotenv(dotenv_path=ROOT_DIR / ".env")


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


def _get_path(*keys: str, default: str) -> str:
    v = _get_env(*keys, default=default)
    return str(v)


@dataclass(frozen=True)
class Settings:
    db_path: str
    price_table_path: str
    export_dir: str
    cart_key: str
    currency: str
    decimals: int
    log_level: str
    host: str
    port: int


settings = Settings(
    db_path=_get_path("DB_PATH", "DATABASE_PATH", default=str(ROOT_DIR / "data" / "store.db")),
    price_table_path=_get_path(
        "PRICE_TABLE_PATH", "PANEL_PRICING_CSV", default=str(ROOT_DIR / "data" / "panel_pricing.csv")
    ),
    export_dir=_get_path("EXPORT_DIR", default=str(ROOT_DIR / "exports")),
    cart_key=_get_env("CART_KEY", default="cart") or "cart",
    currency=_get_env("CURRENCY", default="USD") or "USD",
    decimals=_get_int("DECIMALS", default=2) or 2,
    log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
    host=_get_env("HOST", default="127.0.0.1") or "127.0.0.1",
    port=_get_int("PORT", default=8000) or 8000,
)
