"""
SQLite-backed KeyValue store for pending mint requests.

- Byte-oriented table: (key BLOB PRIMARY KEY, value BLOB NOT NULL)
- WAL journal, synchronous=NORMAL
- `with kv.transaction(): ...` runs BEGIN IMMEDIATE / COMMIT, rolling back on
  error; nested blocks become SAVEPOINTs
- Prefix scans are range scans over the key index

The connection is shared across threads behind a lock; callers that need
multi-statement atomicity use `transaction()`.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Generator, Iterable, Optional, Tuple

log = logging.getLogger(__name__)


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(os.path.abspath(path))
    if d:
        os.makedirs(d, exist_ok=True)


def _upper_bound(prefix: bytes) -> Optional[bytes]:
    """Smallest key greater than every key starting with `prefix` (None if unbounded)."""
    b = bytearray(prefix)
    while b:
        if b[-1] != 0xFF:
            b[-1] += 1
            return bytes(b)
        b.pop()
    return None


class SQLiteKeyValue:
    def __init__(self, path: str) -> None:
        self.path = path
        if path != ":memory:":
            _ensure_dir(path)
        # isolation_level=None: autocommit; transactions are explicit below.
        self._conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False, timeout=30.0)
        self._lock = threading.RLock()
        self._depth = 0
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key BLOB PRIMARY KEY, value BLOB NOT NULL)"
        )
        log.debug("opened pending store %s", path)

    def __enter__(self) -> "SQLiteKeyValue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- KV API --------------------------------------------------------------

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (bytes(key),)).fetchone()
        return bytes(row[0]) if row else None

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv(key, value) VALUES(?, ?)", (bytes(key), bytes(value))
            )

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv WHERE key = ?", (bytes(key),))

    def has(self, key: bytes) -> bool:
        return self.get(key) is not None

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        upper = _upper_bound(prefix)
        with self._lock:
            if upper is None:
                rows = self._conn.execute(
                    "SELECT key, value FROM kv WHERE key >= ? ORDER BY key ASC", (prefix,)
                ).fetchall()
            else:
                rows = self._conn.execute(
                    "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY key ASC",
                    (prefix, upper),
                ).fetchall()
        for k, v in rows:
            k = bytes(k)
            if k.startswith(prefix):
                yield k, bytes(v)

    # --- Transactions --------------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        with self._lock:
            if self._depth:
                name = f"sp{self._depth}"
                self._conn.execute(f"SAVEPOINT {name};")
                self._depth += 1
                try:
                    yield
                except BaseException:
                    self._conn.execute(f"ROLLBACK TO {name};")
                    self._conn.execute(f"RELEASE {name};")
                    raise
                else:
                    self._conn.execute(f"RELEASE {name};")
                finally:
                    self._depth -= 1
                return

            self._conn.execute("BEGIN IMMEDIATE;")
            self._depth = 1
            try:
                yield
            except BaseException:
                self._conn.execute("ROLLBACK;")
                raise
            else:
                self._conn.execute("COMMIT;")
            finally:
                self._depth = 0

    def close(self) -> None:
        with self._lock:
            self._conn.close()


__all__ = ["SQLiteKeyValue"]
