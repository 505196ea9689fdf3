"""
Signals emitted by the mint pipeline.

Two signals form the externally observable audit trail:

    MintRequested {handle, recipient}          - a mint was requested
    Minted        {handle, recipient, amount}  - a callback minted tokens

Each is emitted exactly once per successful operation and never on failure.
`EventLog` keeps them in order with a sequence number so RPC clients can page
through them (`since(seq)`); listeners can subscribe for push delivery. A
failing listener is logged and skipped; it never fails the operation that
emitted the signal.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

from .constants import EV_MINT_REQUESTED, EV_MINTED

log = logging.getLogger(__name__)

Listener = Callable[["Signal"], None]


@dataclass(frozen=True)
class Signal:
    seq: int
    name: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"seq": self.seq, "name": self.name, "fields": dict(self.fields)}


class EventLog:
    def __init__(self) -> None:
        self._signals: List[Signal] = []
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def emit(self, name: str, fields: Mapping[str, Any]) -> Signal:
        with self._lock:
            sig = Signal(seq=len(self._signals) + 1, name=name, fields=dict(fields))
            self._signals.append(sig)
            listeners = list(self._listeners)
        log.debug("signal %s #%d %s", name, sig.seq, sig.fields)
        for fn in listeners:
            try:
                fn(sig)
            except Exception:
                log.exception("listener %r failed on signal %s #%d", fn, name, sig.seq)
        return sig

    def subscribe(self, fn: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(fn)

        def _unsubscribe() -> None:
            with self._lock:
                if fn in self._listeners:
                    self._listeners.remove(fn)

        return _unsubscribe

    def since(self, seq: int = 0, limit: int = 100) -> List[Signal]:
        """Signals with sequence number greater than `seq`, oldest first."""
        with self._lock:
            return [s for s in self._signals if s.seq > seq][:limit]

    def named(self, name: str) -> List[Signal]:
        with self._lock:
            return [s for s in self._signals if s.name == name]

    def __len__(self) -> int:
        return len(self._signals)


def emit_mint_requested(log_: EventLog, handle: int, recipient_hex: str) -> Signal:
    return log_.emit(EV_MINT_REQUESTED, {"handle": int(handle), "recipient": recipient_hex})


def emit_minted(log_: EventLog, handle: int, recipient_hex: str, amount: int) -> Signal:
    return log_.emit(EV_MINTED, {"handle": int(handle), "recipient": recipient_hex, "amount": int(amount)})


__all__ = ["Signal", "EventLog", "emit_mint_requested", "emit_minted"]
