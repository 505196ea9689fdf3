from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    """Lifecycle of a mint request, keyed by its oracle handle."""

    REQUESTED = "requested"  # handle recorded, waiting for the oracle callback
    FULFILLED = "fulfilled"  # terminal: amount minted, handle tombstoned


__all__ = ["RequestStatus"]
