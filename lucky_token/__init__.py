"""
Lucky Token package.

A fungible token whose mint amount is decided by an external randomness
oracle. A mint is requested for a recipient, the oracle allocates a request
handle, and a later callback from the trusted oracle delivers the random word
that fixes the amount:

    request_mint(recipient) -> handle        (MintRequested signal)
    fulfill(oracle, handle, [word]) -> outcome (Minted signal)

Only light, stable exports are surfaced here to avoid import cycles.
"""

from __future__ import annotations

try:
    from .version import __version__  # type: ignore
except Exception:  # pragma: no cover
    __version__ = "0.0.0+dev"

__all__ = ["__version__"]
