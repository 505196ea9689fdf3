"""
lucky_token.service
-------------------

Async service facade used by the transport layers (REST router, JSON-RPC
methods). It owns no logic of its own: inputs are already validated by the
transport models, calls go to the `RequestOrchestrator`, and results come
back as JSON-safe dicts (addresses as 0x-hex, amounts as ints).

The orchestrator is synchronous and may block on the oracle round-trip, so
every call runs in a worker thread; the orchestrator's own lock serialises
entry points.

Errors from the orchestrator are raised unchanged; the transports map them to
HTTP statuses / JSON-RPC codes (see `lucky_token.rpc.errors`).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from .auth import CallbackAuth, verify_callback
from .errors import OnlyTrustedOracle
from .orchestrator import AddressLike, RequestOrchestrator
from .types.core import address_hex, to_address

log = logging.getLogger(__name__)


class LuckyTokenService:
    def __init__(self, orchestrator: RequestOrchestrator) -> None:
        self.orchestrator = orchestrator

    # Reads
    async def get_token(self) -> Dict[str, Any]:
        return await asyncio.to_thread(self.orchestrator.token_metadata)

    async def balance_of(self, address: AddressLike) -> Dict[str, Any]:
        addr = to_address(address)
        balance = await asyncio.to_thread(self.orchestrator.balance_of, addr)
        return {"address": address_hex(addr), "balance": balance}

    async def get_request(self, handle: int) -> Optional[Dict[str, Any]]:
        rec = await asyncio.to_thread(self.orchestrator.get_request, handle)
        return rec.to_dict() if rec is not None else None

    async def list_pending(self) -> List[Dict[str, Any]]:
        recs = await asyncio.to_thread(self.orchestrator.pending_requests)
        return [r.to_dict() for r in recs]

    async def get_events(self, *, since: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.orchestrator.events.since(since, limit)]

    # Writes
    async def request_mint(self, *, recipient: AddressLike) -> Dict[str, Any]:
        def _run() -> Dict[str, Any]:
            handle = self.orchestrator.request_mint(recipient)
            rec = self.orchestrator.get_request(handle)
            return rec.to_dict() if rec is not None else {"handle": int(handle)}

        return await asyncio.to_thread(_run)

    async def fulfill(
        self,
        *,
        auth: Optional[CallbackAuth],
        handle: int,
        random_words: Sequence[int],
    ) -> Dict[str, Any]:
        """Deliver an HTTP callback; only a correctly signed one acts as the oracle."""
        orch = self.orchestrator
        try:
            verify_callback(orch.config.oracle.callback_secret, auth)
        except OnlyTrustedOracle as e:
            orch.metrics.record_fulfillment("unauthorized")
            log.warning("rejected callback for handle=%s: %s", handle, e.caller)
            raise
        caller = address_hex(orch.gate.identity)
        outcome = await asyncio.to_thread(orch.fulfill, caller, handle, random_words)
        return outcome.to_dict()


__all__ = ["LuckyTokenService"]
