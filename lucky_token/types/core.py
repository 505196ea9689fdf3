from __future__ import annotations

from dataclasses import dataclass
from typing import NewType, Optional, Union

from ..constants import ADDRESS_LEN, U256_MAX, ZERO_ADDRESS
from .state import RequestStatus

"""
Core typed primitives for the Lucky Token pipeline.

These are intentionally minimal and free of heavy dependencies so they can be
shared across submodules (store, oracle client, orchestrator, RPC surface, and
tests).

Types provided:
  • Address            - 20 raw bytes (0x-hex for presentation)
  • RequestHandle      - oracle-allocated request identifier (u256)
  • SubscriptionId     - opaque oracle billing channel (u256)
  • RandomnessRequest  - parameters sent to the oracle
  • PendingMintRequest - handle → recipient record (plus tombstone state)
  • MintOutcome        - what a successful fulfilment minted
"""

# ---- Simple newtypes ---------------------------------------------------------

Address = NewType("Address", bytes)
RequestHandle = NewType("RequestHandle", int)
SubscriptionId = NewType("SubscriptionId", int)


def _require_u256(name: str, v: int) -> None:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"{name} must be an int")
    if v < 0 or v > U256_MAX:
        raise ValueError(f"{name} must be within [0, 2**256 - 1] (got {v})")


def to_address(value: Union[str, bytes, bytearray]) -> Address:
    """
    Normalize a 0x-hex string or raw bytes into a 20-byte Address.

    Raises ValueError on bad hex / wrong length, TypeError on other types.
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        s = value.strip()
        if s.startswith(("0x", "0X")):
            s = s[2:]
        try:
            raw = bytes.fromhex(s)
        except ValueError as e:
            raise ValueError(f"address is not valid hex: {value!r}") from e
    else:
        raise TypeError("address must be 0x-hex str or bytes")
    if len(raw) != ADDRESS_LEN:
        raise ValueError(f"address must be exactly {ADDRESS_LEN} bytes (got {len(raw)})")
    return Address(raw)


def address_hex(addr: bytes) -> str:
    return "0x" + bytes(addr).hex()


def is_zero_address(addr: bytes) -> bool:
    return bytes(addr) == ZERO_ADDRESS


def to_handle(value: int) -> RequestHandle:
    _require_u256("handle", value)
    return RequestHandle(value)


# ---- Records -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RandomnessRequest:
    """
    Parameters of one oracle request.

    Fields:
      callback_signature - entry point the oracle calls back
      num_words          - number of random words requested
      confirmations      - confirmations the oracle waits for before answering
      subscription       - billing channel, passed through uninterpreted
    """

    callback_signature: str
    num_words: int
    confirmations: int
    subscription: SubscriptionId

    def __post_init__(self) -> None:  # type: ignore[override]
        if not isinstance(self.callback_signature, str) or not self.callback_signature:
            raise ValueError("callback_signature must be a non-empty str")
        if not isinstance(self.num_words, int) or self.num_words <= 0:
            raise ValueError("num_words must be a positive int")
        if not isinstance(self.confirmations, int) or self.confirmations < 0:
            raise ValueError("confirmations must be a non-negative int")
        _require_u256("subscription", self.subscription)

    def to_dict(self) -> dict:
        return {
            "callback": self.callback_signature,
            "numWords": self.num_words,
            "confirmations": self.confirmations,
            "subscriptionId": int(self.subscription),
        }


@dataclass(frozen=True, slots=True)
class PendingMintRequest:
    """
    The sole link between a recipient and the randomness delivery that pays it.

    Fields:
      handle    - oracle request handle
      recipient - address that receives the mint
      status    - REQUESTED until the first successful fulfilment, then FULFILLED
      amount    - minted amount (base units); only set once FULFILLED
    """

    handle: RequestHandle
    recipient: Address
    status: RequestStatus = RequestStatus.REQUESTED
    amount: Optional[int] = None

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_u256("handle", self.handle)
        if not isinstance(self.recipient, (bytes, bytearray)) or len(self.recipient) != ADDRESS_LEN:
            raise ValueError("recipient must be a 20-byte address")
        if self.status is RequestStatus.FULFILLED:
            if self.amount is None:
                raise ValueError("fulfilled request must carry an amount")
            _require_u256("amount", self.amount)
        elif self.amount is not None:
            raise ValueError("amount is only set on fulfilled requests")

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.REQUESTED

    def fulfilled(self, amount: int) -> "PendingMintRequest":
        return PendingMintRequest(self.handle, self.recipient, RequestStatus.FULFILLED, amount)

    def to_dict(self) -> dict:
        return {
            "handle": int(self.handle),
            "recipient": address_hex(self.recipient),
            "status": self.status.value,
            "amount": self.amount,
        }


@dataclass(frozen=True, slots=True)
class MintOutcome:
    """Result of a successful fulfilment; reported via the Minted signal."""

    handle: RequestHandle
    recipient: Address
    amount: int

    def to_dict(self) -> dict:
        return {
            "handle": int(self.handle),
            "recipient": address_hex(self.recipient),
            "amount": self.amount,
        }


__all__ = [
    "Address",
    "RequestHandle",
    "SubscriptionId",
    "to_address",
    "address_hex",
    "is_zero_address",
    "to_handle",
    "RandomnessRequest",
    "PendingMintRequest",
    "MintOutcome",
]
