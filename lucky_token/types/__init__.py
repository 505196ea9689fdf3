"""
Lucky Token - types package

Typed primitives and dataclasses shared across the pipeline:

  • core   - Address, RequestHandle, SubscriptionId, RandomnessRequest,
             PendingMintRequest, MintOutcome
  • state  - RequestStatus

Commonly used symbols are re-exported here:
    from lucky_token.types import PendingMintRequest, to_address
"""

from __future__ import annotations

from .core import (Address, MintOutcome, PendingMintRequest, RandomnessRequest,
                   RequestHandle, SubscriptionId, address_hex, is_zero_address,
                   to_address, to_handle)
from .state import RequestStatus

__all__ = [
    "Address",
    "RequestHandle",
    "SubscriptionId",
    "RandomnessRequest",
    "PendingMintRequest",
    "MintOutcome",
    "RequestStatus",
    "to_address",
    "address_hex",
    "is_zero_address",
    "to_handle",
]
