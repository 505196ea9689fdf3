"""
Deterministic oracle adapter.

Hands out handles from a fixed sequence (then a counter), records every
request it saw, and can be told to fail. It never calls back on its own:
tests and local tooling drive `fulfill` themselves.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..types.core import RandomnessRequest
from . import OracleAdapterError


class StubOracleAdapter:
    def __init__(self, handles: Optional[Iterable[int]] = None, *, start: int = 1) -> None:
        self._queued: List[int] = list(handles or [])
        self._next = start
        self.requests: List[RandomnessRequest] = []
        self.fail_with: Optional[str] = None

    def request(self, req: RandomnessRequest) -> int:
        if self.fail_with is not None:
            raise OracleAdapterError(self.fail_with)
        self.requests.append(req)
        if self._queued:
            return self._queued.pop(0)
        handle = self._next
        self._next += 1
        return handle


__all__ = ["StubOracleAdapter"]
