# src/taskmanagerx/storage/kv_store.py

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    SQLite-backed key-value store. Values are JSON documents.

    Semantics:
    - get/set/remove are each a single atomic statement
    - set overwrites the whole value for the key
    - errors (sqlite3.Error, JSON encode/decode errors) propagate unchanged

    Thread-safety:
    - each call opens its own SQLite connection
    - the async API runs the blocking work in a worker thread
    """

    def __init__(self, db_path: str | Path = "store.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("KeyValueStore ready db=%s keys=%s", self._db_path, self.count_keys())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _get_sync(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def _set_sync(self, key: str, raw: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, raw),
            )
            conn.commit()
        finally:
            conn.close()

    def _remove_sync(self, keys: list[str]) -> None:
        if not keys:
            return
        conn = self._get_conn()
        try:
            conn.executemany("DELETE FROM kv WHERE key = ?", [(k,) for k in keys])
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def count_keys(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM kv").fetchone()
            return int(n)
        finally:
            conn.close()

    async def get(self, key: str, default: Any = None) -> Any:
        raw = await asyncio.to_thread(self._get_sync, key)
        if raw is None:
            return default
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        # TypeError/ValueError surface here, before any write.
        raw = json.dumps(value, ensure_ascii=False)
        await asyncio.to_thread(self._set_sync, key, raw)
        logger.debug("kv set key=%s bytes=%d", key, len(raw))

    async def remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        await asyncio.to_thread(self._remove_sync, keys)
        logger.debug("kv remove keys=%s", keys)
