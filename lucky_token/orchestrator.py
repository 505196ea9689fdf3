"""
lucky_token.orchestrator
========================

The two entry points of the token:

    request_mint(recipient) -> handle
        ask the oracle for one random word, remember who it is for,
        emit MintRequested.

    fulfill(caller, handle, randomness_values) -> MintOutcome
        accept the oracle's callback, derive the amount, mint it once,
        emit Minted.

State per handle: requested → fulfilled (terminal). A failed oracle request
never creates a record, so there is no dangling "requested" state for it.

Every entry point is all-or-nothing: validation happens before any write, and
the tombstone + ledger mint of `fulfill` run inside one store transaction, so
a ledger refusal leaves the request pending. Minted is emitted only after that
transaction commits. Entry points are serialised with a lock; one call runs
to completion before the next begins.
"""

from __future__ import annotations

import logging
import threading
from collections import abc
from typing import Any, Dict, List, Optional, Sequence, Union

from .amount import AmountDeriver
from .config import LuckyTokenConfig
from .constants import NUM_WORDS
from .errors import (AlreadyFulfilled, DuplicateHandle, InvalidReceiver,
                     MalformedCallback, MintFailed, OnlyTrustedOracle,
                     RandomnessRequestFailed, UnknownRequest)
from .events import EventLog
from .gate import TrustedCallerGate
from .ledger import InMemoryLedger, Ledger
from .metrics import METRICS, Metrics
from .mint import MintEffector
from .oracle import HttpOracleAdapter, OracleAdapter, RandomnessClient
from .store import open_kv
from .store.pending import PendingRequestStore
from .types.core import (MintOutcome, PendingMintRequest, RequestHandle,
                         address_hex, is_zero_address, to_address,
                         to_handle)

log = logging.getLogger(__name__)

AddressLike = Union[str, bytes]


class RequestOrchestrator:
    def __init__(
        self,
        config: LuckyTokenConfig,
        *,
        client: RandomnessClient,
        store: PendingRequestStore,
        ledger: Ledger,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        config.validate()
        self.config = config
        self.client = client
        self.store = store
        self.ledger = ledger
        self.events = events or EventLog()
        self.metrics = metrics or METRICS
        self.gate = TrustedCallerGate(config.oracle.identity_address)
        self.deriver = AmountDeriver(config.token.range_width)
        self.effector = MintEffector(ledger, self.events)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def request_mint(self, recipient: AddressLike) -> RequestHandle:
        """Request a randomly sized mint for `recipient`; returns the oracle handle."""
        try:
            to = to_address(recipient)
        except (TypeError, ValueError) as e:
            self.metrics.record_request("invalid")
            raise InvalidReceiver(receiver=str(recipient)) from e
        if is_zero_address(to):
            self.metrics.record_request("invalid")
            raise InvalidReceiver(receiver=address_hex(to))

        oracle = self.config.oracle
        with self._lock:
            try:
                handle = self.client.request(
                    oracle.callback_signature,
                    NUM_WORDS,
                    oracle.confirmations,
                    oracle.subscription,
                )
            except RandomnessRequestFailed:
                self.metrics.record_request("oracle_failed")
                raise

            try:
                with self.store.transaction():
                    self.store.put(handle, to)
            except DuplicateHandle:
                self.metrics.record_request("duplicate")
                log.error("oracle reused handle=%d; request for %s dropped", handle, address_hex(to))
                raise

            self.effector.announce_request(handle, to)
            self.metrics.record_request("accepted")
            log.info("mint requested handle=%d recipient=%s", handle, address_hex(to))
            return handle

    def fulfill(
        self,
        caller: AddressLike,
        handle: int,
        randomness_values: Sequence[int],
    ) -> MintOutcome:
        """Oracle callback: mint the amount derived from the single random word."""
        with self._lock:
            try:
                self.gate.authorize(caller)
            except OnlyTrustedOracle as e:
                self.metrics.record_fulfillment("unauthorized")
                log.warning("rejected callback for handle=%s from %s", handle, e.caller)
                raise

            try:
                h = to_handle(handle)
            except (TypeError, ValueError) as e:
                self.metrics.record_fulfillment("malformed")
                raise MalformedCallback(handle=None, reason=f"bad handle: {handle!r}") from e

            words = self._check_words(h, randomness_values)

            rec = self.store.get(h)
            if rec is None:
                self.metrics.record_fulfillment("unknown")
                log.warning("callback for unknown handle=%d", h)
                raise UnknownRequest(handle=int(h))
            if not rec.is_pending:
                self.metrics.record_fulfillment("replayed")
                log.warning("callback replayed for fulfilled handle=%d", h)
                raise AlreadyFulfilled(handle=int(h))

            try:
                amount = self.deriver.derive(words[0])
            except MalformedCallback as e:
                self.metrics.record_fulfillment("malformed")
                raise MalformedCallback(handle=int(h), reason=e.reason) from e

            # The ledger write is the last step that can fail before commit.
            try:
                with self.store.transaction():
                    self.store.mark_fulfilled(h, amount)
                    outcome = self.effector.apply(h, rec.recipient, amount)
            except MintFailed:
                self.metrics.record_fulfillment("mint_failed")
                raise

            self.effector.announce_minted(outcome)
            self.metrics.record_fulfillment("minted")
            self.metrics.observe_minted(amount, decimals=self.config.token.decimals)
            return outcome

    def _check_words(self, handle: RequestHandle, values: Sequence[int]) -> List[int]:
        if isinstance(values, (str, bytes, bytearray)) or not isinstance(values, abc.Sequence):
            self.metrics.record_fulfillment("malformed")
            raise MalformedCallback(handle=int(handle), reason="random words must be a list")
        if len(values) != NUM_WORDS:
            self.metrics.record_fulfillment("malformed")
            raise MalformedCallback(
                handle=int(handle),
                reason=f"expected {NUM_WORDS} random word, got {len(values)}",
            )
        return list(values)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def token_metadata(self) -> Dict[str, Any]:
        t = self.config.token
        return {
            "name": t.name,
            "symbol": t.symbol,
            "decimals": t.decimals,
            "minAmount": self.deriver.min_amount,
            "maxAmount": self.deriver.max_amount,
            "totalSupply": self.ledger.total_supply(),
            "oracle": address_hex(self.gate.identity),
            "subscriptionId": int(self.config.oracle.subscription),
        }

    def balance_of(self, account: AddressLike) -> int:
        return self.ledger.balance_of(to_address(account))

    def total_supply(self) -> int:
        return self.ledger.total_supply()

    def get_request(self, handle: int) -> Optional[PendingMintRequest]:
        return self.store.get(handle)

    def pending_requests(self) -> List[PendingMintRequest]:
        return list(self.store.iter_pending())


def build_orchestrator(
    config: LuckyTokenConfig,
    *,
    adapter: Optional[OracleAdapter] = None,
    ledger: Optional[Ledger] = None,
    events: Optional[EventLog] = None,
    metrics: Optional[Metrics] = None,
) -> RequestOrchestrator:
    """
    Wire an orchestrator from config.

    Without an explicit adapter, the oracle endpoint from config is used via
    HttpOracleAdapter. Without a ledger, an InMemoryLedger is created.
    """
    config.validate()
    if adapter is None:
        if not config.oracle.endpoint:
            raise ValueError("oracle endpoint is required when no adapter is supplied")
        adapter = HttpOracleAdapter(config.oracle.endpoint, timeout=config.oracle.timeout_s)
    m = metrics or METRICS
    return RequestOrchestrator(
        config,
        client=RandomnessClient(adapter, metrics=m),
        store=PendingRequestStore(open_kv(config.storage.pending_uri)),
        ledger=ledger if ledger is not None else InMemoryLedger(),
        events=events,
        metrics=m,
    )


__all__ = ["RequestOrchestrator", "build_orchestrator"]
