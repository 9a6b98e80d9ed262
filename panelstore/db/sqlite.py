from __future__ import annotations

import os
import sqlite3
from datetime import datetime
from typing import Optional

from panelstore.config import settings


def _connect(db_path: str | None = None) -> sqlite3.Connection:
    path = db_path or settings.db_path
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str | None = None) -> None:
    conn = _connect(db_path)
    try:
        with open(os.path.join(os.path.dirname(__file__), "schema.sql"), "r", encoding="utf-8") as f:
            conn.executescript(f.read())
        conn.commit()
    finally:
        conn.close()


def kv_get(key: str, db_path: str | None = None) -> Optional[str]:
    conn = _connect(db_path)
    try:
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None
    finally:
        conn.close()


def kv_set(key: str, value: str, db_path: str | None = None) -> None:
    conn = _connect(db_path)
    try:
        updated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        conn.execute(
            "INSERT INTO kv(key, value, updated_at) VALUES(?,?,?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
            (key, value, updated_at),
        )
        conn.commit()
    finally:
        conn.close()


def kv_delete(key: str, db_path: str | None = None) -> None:
    conn = _connect(db_path)
    try:
        conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        conn.commit()
    finally:
        conn.close()
