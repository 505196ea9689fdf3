"""
Token ledger boundary.

The ledger (balances, total supply, transfers, allowances) is an external
collaborator. This module pins down the slice the mint path consumes and
ships an in-memory ledger for local runs and tests; a deployment plugs in its
own implementation of `Ledger`.

Ledger failures are raised as members of the `LedgerError` family and reach
callers unchanged.
"""

from __future__ import annotations

import logging
from typing import Dict, Protocol

from .constants import U256_MAX
from .errors import InvalidReceiver, LedgerError
from .types.core import Address, address_hex, is_zero_address, to_address

log = logging.getLogger(__name__)


class Ledger(Protocol):
    def mint(self, recipient: Address, amount: int) -> None:
        """Increase recipient's balance and the total supply by `amount`."""
        ...

    def balance_of(self, account: Address) -> int:
        ...

    def total_supply(self) -> int:
        ...


class InMemoryLedger:
    """Balances and supply in a dict; mint-only."""

    def __init__(self) -> None:
        self._balances: Dict[bytes, int] = {}
        self._total = 0

    def mint(self, recipient: Address, amount: int) -> None:
        if is_zero_address(recipient):
            raise InvalidReceiver(receiver=address_hex(recipient))
        if not isinstance(amount, int) or amount < 0:
            raise ValueError("amount must be a non-negative int")
        if self._total + amount > U256_MAX:
            raise LedgerError("total supply overflow")
        key = bytes(to_address(recipient))
        self._balances[key] = self._balances.get(key, 0) + amount
        self._total += amount
        log.debug("ledger mint to=%s amount=%d", address_hex(key), amount)

    def balance_of(self, account: Address) -> int:
        return self._balances.get(bytes(to_address(account)), 0)

    def total_supply(self) -> int:
        return self._total


__all__ = ["Ledger", "InMemoryLedger"]
