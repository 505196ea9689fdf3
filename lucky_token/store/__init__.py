"""
lucky_token.store
=================

Storage for pending mint requests.

Backends are pluggable (in-memory, SQLite). This module exposes a small
typing protocol so `PendingRequestStore` can depend on a stable byte-level
interface without pulling in a concrete DB, plus `open_kv()` which picks a
backend from a storage URI.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterable, Optional, Protocol, Tuple


class KeyValue(Protocol):
    """Minimal byte-oriented KV interface.

    Keys and values are raw bytes. Namespaces are handled by the caller via
    prefixed keys.
    """

    def get(self, key: bytes) -> Optional[bytes]:
        """Return value for key, or None if missing."""
        ...

    def put(self, key: bytes, value: bytes) -> None:
        """Insert or replace key with value."""
        ...

    def delete(self, key: bytes) -> None:
        """Remove key if present (no-op if absent)."""
        ...

    def has(self, key: bytes) -> bool:
        """Return True if key exists."""
        ...

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        """Yield (key, value) pairs whose keys start with prefix, ordered by key."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """All writes inside the block commit together or not at all."""
        ...

    def close(self) -> None:
        ...


def open_kv(uri: str) -> KeyValue:
    """
    Open a KeyValue backend from a storage URI.

      memory://          -> MemoryKeyValue
      sqlite:///path.db  -> SQLiteKeyValue(path)
    """
    from ..config import StorageConfig

    cfg = StorageConfig(pending_uri=uri)
    cfg.validate()
    path = cfg.sqlite_path()
    if path is None:
        from .memory import MemoryKeyValue

        return MemoryKeyValue()
    from .sqlite import SQLiteKeyValue

    return SQLiteKeyValue(path)


__all__ = ["KeyValue", "open_kv"]
