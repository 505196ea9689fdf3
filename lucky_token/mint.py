"""
Mint effector: applies a derived amount through the ledger and emits the
pipeline's signals.

`apply` is the ledger write and runs inside the caller's store transaction;
`announce_minted` runs only after that transaction has committed.
"""

from __future__ import annotations

import logging

from .errors import LedgerError, MintFailed
from .events import EventLog, emit_mint_requested, emit_minted
from .ledger import Ledger
from .types.core import Address, MintOutcome, RequestHandle, address_hex

log = logging.getLogger(__name__)


class MintEffector:
    def __init__(self, ledger: Ledger, events: EventLog) -> None:
        self.ledger = ledger
        self.events = events

    def announce_request(self, handle: RequestHandle, recipient: Address) -> None:
        emit_mint_requested(self.events, handle, address_hex(recipient))

    def apply(self, handle: RequestHandle, recipient: Address, amount: int) -> MintOutcome:
        """
        Mint `amount` to `recipient`.

        A ledger refusal surfaces as MintFailed (with the LedgerError chained).
        Nothing is emitted here.
        """
        try:
            self.ledger.mint(recipient, amount)
        except LedgerError as e:
            raise MintFailed(
                handle=int(handle),
                recipient=address_hex(recipient),
                amount=amount,
                reason=str(e),
            ) from e
        return MintOutcome(handle=handle, recipient=recipient, amount=amount)

    def announce_minted(self, outcome: MintOutcome) -> None:
        recipient = address_hex(outcome.recipient)
        emit_minted(self.events, outcome.handle, recipient, outcome.amount)
        log.info("minted handle=%d recipient=%s amount=%d", outcome.handle, recipient, outcome.amount)


__all__ = ["MintEffector"]
