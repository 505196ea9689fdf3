"""
In-memory KeyValue backend.

Used for tests and single-process dev runs. Transactions take a snapshot of
the dict at the outermost `transaction()` and restore it if the block raises;
nested blocks join the outer one.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Generator, Iterable, Optional, Tuple


class MemoryKeyValue:
    def __init__(self) -> None:
        self._data: Dict[bytes, bytes] = {}
        self._depth = 0

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(bytes(key))

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        self._data[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def has(self, key: bytes) -> bool:
        return bytes(key) in self._data

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        for k in sorted(k for k in self._data if k.startswith(prefix)):
            yield k, self._data[k]

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = dict(self._data)
        self._depth = 1
        try:
            yield
        except BaseException:
            self._data = snapshot
            raise
        finally:
            self._depth = 0

    def __len__(self) -> int:
        return len(self._data)

    def close(self) -> None:
        self._data.clear()


__all__ = ["MemoryKeyValue"]
