from __future__ import annotations

import json
import os
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generator, List, Optional

from .models import StoredKey
from .repositories import FeedStore


@dataclass(frozen=True)
class _Cols:
    table: str = "feed_store"
    key: str = "key"
    value: str = "value"
    metadata: str = "metadata"
    expires_at: str = "expires_at"


_COLS = _Cols()


class SQLiteFeedStore(FeedStore):
    """
    Lightweight SQLite store implementing the FeedStore interface.
    """

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._clock = clock
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL,
                    {_COLS.metadata} TEXT NULL,
                    {_COLS.expires_at} REAL NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_expires_at ON {_COLS.table}({_COLS.expires_at})"
            )

    def _purge(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            f"DELETE FROM {_COLS.table} WHERE {_COLS.expires_at} IS NOT NULL AND {_COLS.expires_at} <= ?",
            (self._clock(),),
        )

    def put(
        self,
        key: str,
        value: str,
        metadata: Optional[Dict[str, Any]] = None,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        meta = json.dumps(metadata) if metadata else None
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}, {_COLS.metadata}, {_COLS.expires_at})
                VALUES (?, ?, ?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET
                    {_COLS.value} = excluded.{_COLS.value},
                    {_COLS.metadata} = excluded.{_COLS.metadata},
                    {_COLS.expires_at} = excluded.{_COLS.expires_at}
                """,
                (key, value, meta, expires_at),
            )

    def get(self, key: str) -> Optional[str]:
        with self._conn() as conn:
            self._purge(conn)
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
            ).fetchone()
            return str(row[_COLS.value]) if row else None

    def delete(self, key: str) -> bool:
        with self._conn() as conn:
            self._purge(conn)
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))
            return cur.rowcount > 0

    def list_keys(self) -> List[StoredKey]:
        with self._conn() as conn:
            self._purge(conn)
            rows = conn.execute(
                f"SELECT {_COLS.key}, {_COLS.metadata} FROM {_COLS.table} ORDER BY {_COLS.key}"
            ).fetchall()
            return [
                {
                    "name": str(r[_COLS.key]),
                    "metadata": json.loads(r[_COLS.metadata]) if r[_COLS.metadata] else None,
                }
                for r in rows
            ]
