"""
Lucky Token errors.

A small, typed hierarchy of exceptions raised by the request/fulfil pipeline
(request_mint → oracle → fulfill → mint). Callers can catch the base
`LuckyTokenError` to handle every failure of the pipeline, or catch the
concrete subclasses for more granular control.

Every entry point raises to its immediate caller; nothing here is logged and
swallowed, and nothing triggers an automatic retry. Address fields are carried
as 0x-hex strings so the errors stay serialization-friendly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class LuckyTokenError(Exception):
    """Base class for all Lucky Token errors."""
    pass


# ---------------------------------------------------------------------------
# Randomness path
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class RandomnessRequestFailed(LuckyTokenError):
    """
    Raised when the oracle request call did not produce a handle.

    Attributes:
        reason: Short explanation (adapter error text, 'bad-handle', ...).
    """
    reason: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"RandomnessRequestFailed: {self.reason}"


@dataclass(eq=False)
class OnlyTrustedOracle(LuckyTokenError):
    """
    Raised when `fulfill` is invoked by anyone but the configured oracle.

    Attributes:
        caller: Hex address of the rejected caller, or "unsigned" /
            "bad-signature" for an HTTP callback whose signature did not verify.
    """
    caller: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"OnlyTrustedOracle: caller={self.caller}"


@dataclass(eq=False)
class UnknownRequest(LuckyTokenError):
    """Raised when a callback names a handle that was never requested."""
    handle: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"UnknownRequest: handle={self.handle}"


@dataclass(eq=False)
class AlreadyFulfilled(LuckyTokenError):
    """Raised when a callback replays a handle that has already been minted."""
    handle: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"AlreadyFulfilled: handle={self.handle}"


@dataclass(eq=False)
class DuplicateHandle(LuckyTokenError):
    """Raised when the oracle hands out a handle that is already recorded."""
    handle: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"DuplicateHandle: handle={self.handle}"


@dataclass(eq=False)
class MalformedCallback(LuckyTokenError):
    """
    Raised when a callback payload does not have the requested shape.

    Attributes:
        handle: The handle named by the callback, if known.
        reason: e.g. 'expected 1 random word, got 3', 'negative word'.
    """
    handle: Optional[int]
    reason: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"MalformedCallback: handle={self.handle} reason={self.reason}"


@dataclass(eq=False)
class MintFailed(LuckyTokenError):
    """
    Raised when the ledger refused to mint a derived amount.

    The originating `LedgerError` is chained as `__cause__`.
    """
    handle: int
    recipient: str
    amount: int
    reason: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return (
            f"MintFailed: handle={self.handle} recipient={self.recipient} "
            f"amount={self.amount} reason={self.reason}"
        )


# ---------------------------------------------------------------------------
# Ledger family (raised by the ledger boundary, propagated unchanged)
# ---------------------------------------------------------------------------


class LedgerError(LuckyTokenError):
    """Base class for errors reported by the token ledger."""
    pass


@dataclass(eq=False)
class InsufficientBalance(LedgerError):
    sender: str
    balance: int
    needed: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InsufficientBalance: sender={self.sender} balance={self.balance} needed={self.needed}"


@dataclass(eq=False)
class InvalidSender(LedgerError):
    sender: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InvalidSender: {self.sender}"


@dataclass(eq=False)
class InvalidReceiver(LedgerError):
    receiver: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InvalidReceiver: {self.receiver}"


@dataclass(eq=False)
class InsufficientAllowance(LedgerError):
    spender: str
    allowance: int
    needed: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InsufficientAllowance: spender={self.spender} allowance={self.allowance} needed={self.needed}"


@dataclass(eq=False)
class InvalidSpender(LedgerError):
    spender: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InvalidSpender: {self.spender}"


@dataclass(eq=False)
class InvalidApprover(LedgerError):
    approver: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InvalidApprover: {self.approver}"


__all__ = [
    "LuckyTokenError",
    "RandomnessRequestFailed",
    "OnlyTrustedOracle",
    "UnknownRequest",
    "AlreadyFulfilled",
    "DuplicateHandle",
    "MalformedCallback",
    "MintFailed",
    "LedgerError",
    "InsufficientBalance",
    "InvalidSender",
    "InvalidReceiver",
    "InsufficientAllowance",
    "InvalidSpender",
    "InvalidApprover",
]
