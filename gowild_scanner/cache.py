"""Persistent TTL cache backed by SQLite"""

import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import orjson
from loguru import logger

from .config import DEFAULT_CACHE_DB

log = logger.bind(component="cache")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expires_at INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_cache_expires_at ON cache(expires_at);
"""


def scan_cache_key(origin: str, destination: str, date: str) -> str:
    """Cache key for one route scan"""
    return f"scan:{origin}:{destination}:{date}"


class ResultCache:
    """
    Key/value store with per-entry expiry.

    Entries are invisible once now >= expires_at. Expired rows are removed
    lazily on read, or all at once by cleanup(). Writes go through a single
    lock, so the last writer wins for a given key.
    """

    def __init__(
        self,
        db_path: Union[Path, str] = DEFAULT_CACHE_DB,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize result cache.

        Args:
            db_path: SQLite database file (":memory:" for a throwaway cache)
            clock: Returns the current time in epoch seconds
        """
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        self.clock = clock
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

        log.debug(f"Result cache initialized: {db_path}")

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def get(self, key: str) -> Optional[Any]:
        """Stored value, or None if missing, expired or unreadable"""
        with self._lock:
            row = self._conn.execute(
                "SELECT value, expires_at FROM cache WHERE key = ?", (key,)
            ).fetchone()

            if row is None:
                return None

            value, expires_at = row
            if self._now_ms() >= expires_at:
                self._conn.execute("DELETE FROM cache WHERE key = ?", (key,))
                self._conn.commit()
                return None

            try:
                return orjson.loads(value)
            except orjson.JSONDecodeError:
                log.warning(f"Dropping unreadable cache entry: {key}")
                self._conn.execute("DELETE FROM cache WHERE key = ?", (key,))
                self._conn.commit()
                return None

    def set(self, key: str, value: Any, ttl_minutes: float) -> None:
        """Store value until now + ttl_minutes, replacing any existing entry"""
        expires_at = self._now_ms() + int(ttl_minutes * 60 * 1000)
        serialized = orjson.dumps(value).decode("utf-8")
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO cache (key, value, expires_at) VALUES (?, ?, ?)",
                (key, serialized, expires_at),
            )
            self._conn.commit()

    def delete(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM cache WHERE key = ?", (key,))
            self._conn.commit()

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def cleanup(self) -> int:
        """Delete every expired entry; returns how many were removed"""
        with self._lock:
            cursor = self._conn.execute(
                "DELETE FROM cache WHERE expires_at <= ?", (self._now_ms(),)
            )
            self._conn.commit()
            removed = cursor.rowcount

        if removed:
            log.info(f"Cleaned up {removed} expired cache entries")
        return removed

    def stats(self) -> Dict[str, int]:
        """Row count, expired-but-unswept rows included"""
        with self._lock:
            (count,) = self._conn.execute("SELECT COUNT(*) FROM cache").fetchone()
        return {"count": count}
