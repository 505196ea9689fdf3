"""
Pending mint requests over a raw byte-oriented KeyValue backend.

Maps an oracle request handle to the recipient waiting for the mint. A record
is created by `put` when a mint is requested and tombstoned by
`mark_fulfilled` on the first successful callback, so a handle can be consumed
at most once and a replayed callback is distinguishable from an unknown one.

Layout
------
  key   = PENDING_PREFIX || u256_be(handle)
  value = compact JSON {"recipient": "0x…", "status": "requested"|"fulfilled",
                        "amount": int|null}

The JSON uses sorted keys and stable separators so stored bytes are
deterministic for a given record.
"""

from __future__ import annotations

import json
import logging
from contextlib import AbstractContextManager
from typing import Iterator, Optional

from ..errors import AlreadyFulfilled, DuplicateHandle, UnknownRequest
from ..types.core import (Address, PendingMintRequest, RequestHandle,
                          address_hex, to_address, to_handle)
from ..types.state import RequestStatus
from . import KeyValue

log = logging.getLogger(__name__)

PENDING_PREFIX = b"\x01"  # PENDING: \x01 | u256_be(handle)


def _key(handle: int) -> bytes:
    return PENDING_PREFIX + int(handle).to_bytes(32, "big")


def _handle_from_key(key: bytes) -> RequestHandle:
    return RequestHandle(int.from_bytes(key[len(PENDING_PREFIX):], "big"))


def _encode(rec: PendingMintRequest) -> bytes:
    body = {
        "recipient": address_hex(rec.recipient),
        "status": rec.status.value,
        "amount": rec.amount,
    }
    return json.dumps(body, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _decode(handle: RequestHandle, raw: bytes) -> PendingMintRequest:
    body = json.loads(raw.decode("utf-8"))
    return PendingMintRequest(
        handle=handle,
        recipient=to_address(body["recipient"]),
        status=RequestStatus(body["status"]),
        amount=body.get("amount"),
    )


class PendingRequestStore:
    """
    Durable handle → recipient mapping.

    Only the orchestrator mutates it; every method is synchronous and the
    orchestrator serialises calls.
    """

    def __init__(self, kv: KeyValue) -> None:
        self.kv = kv

    # --- Writes --------------------------------------------------------------

    def put(self, handle: int, recipient: Address) -> PendingMintRequest:
        """Record a new pending request. Raises DuplicateHandle if the handle is known."""
        h = to_handle(handle)
        key = _key(h)
        if self.kv.has(key):
            raise DuplicateHandle(handle=int(h))
        rec = PendingMintRequest(handle=h, recipient=to_address(recipient))
        self.kv.put(key, _encode(rec))
        log.debug("pending request recorded handle=%d recipient=%s", h, address_hex(rec.recipient))
        return rec

    def mark_fulfilled(self, handle: int, amount: int) -> PendingMintRequest:
        """Tombstone a pending request with the amount it minted."""
        rec = self.get(handle)
        if rec is None:
            raise UnknownRequest(handle=int(handle))
        if not rec.is_pending:
            raise AlreadyFulfilled(handle=int(handle))
        done = rec.fulfilled(amount)
        self.kv.put(_key(rec.handle), _encode(done))
        return done

    def remove(self, handle: int) -> bool:
        """Delete a record entirely. Returns True if something was removed."""
        key = _key(to_handle(handle))
        if not self.kv.has(key):
            return False
        self.kv.delete(key)
        log.debug("pending request removed handle=%d", handle)
        return True

    # --- Reads ---------------------------------------------------------------

    def get(self, handle: int) -> Optional[PendingMintRequest]:
        """Full record for a handle, tombstones included."""
        h = to_handle(handle)
        raw = self.kv.get(_key(h))
        return _decode(h, raw) if raw is not None else None

    def resolve(self, handle: int) -> Optional[Address]:
        """Recipient of a still-pending handle, or None when absent or fulfilled."""
        rec = self.get(handle)
        if rec is None or not rec.is_pending:
            return None
        return rec.recipient

    def iter_records(self) -> Iterator[PendingMintRequest]:
        for k, v in self.kv.iter_prefix(PENDING_PREFIX):
            yield _decode(_handle_from_key(k), v)

    def iter_pending(self) -> Iterator[PendingMintRequest]:
        return (r for r in self.iter_records() if r.is_pending)

    def transaction(self) -> AbstractContextManager[None]:
        return self.kv.transaction()


__all__ = ["PendingRequestStore", "PENDING_PREFIX"]
