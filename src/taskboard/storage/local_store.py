# src/taskboard/storage/local_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LocalStore:
    """
    SQLite key/value store.

    One row per logical key; the value is a JSON blob that is always replaced
    wholesale (no incremental diffing).

    Failure policy:
    - read/parse failures are logged and the caller's default is returned
    - write failures are logged and reported as False

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "taskboard.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = len(self.keys())
        except Exception:
            total = -1
        logger.info("LocalStore ready db=%s keys=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str, default: Any = None) -> Any:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except Exception:
            logger.exception("LocalStore read failed key=%s", key)
            return default

        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except (TypeError, ValueError):
            logger.exception("LocalStore value is not valid JSON key=%s; using default.", key)
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            blob = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Failed to JSON-encode value for key=%s", key)
            return False

        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                   updated_at = excluded.updated_at
                    """,
                    (key, blob, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except Exception:
            logger.exception("LocalStore write failed key=%s", key)
            return False

        logger.debug("LocalStore set key=%s bytes=%d", key, len(blob))
        return True

    def remove(self, key: str) -> bool:
        try:
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except Exception:
            logger.exception("LocalStore remove failed key=%s", key)
            return False
        return True

    def clear(self) -> bool:
        try:
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM kv")
                conn.commit()
            finally:
                conn.close()
        except Exception:
            logger.exception("LocalStore clear failed")
            return False
        return True

    def keys(self) -> list[str]:
        conn = self._get_conn()
        try:
            return [row["key"] for row in conn.execute("SELECT key FROM kv ORDER BY key")]
        finally:
            conn.close()
