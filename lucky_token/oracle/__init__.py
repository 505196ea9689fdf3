"""
lucky_token.oracle
==================

The outbound side of the randomness oracle.

`OracleAdapter` is the capability the rest of the package depends on: give it
a `RandomnessRequest`, get back the handle the oracle allocated, or an
exception. Two adapters ship with the package:

  • HttpOracleAdapter  - JSON-RPC over HTTP to an oracle coordinator
  • StubOracleAdapter  - deterministic handles for tests and local runs

`RandomnessClient` (see `client.py`) wraps an adapter and turns every adapter
failure into `RandomnessRequestFailed`.
"""

from __future__ import annotations

from typing import Protocol

from ..types.core import RandomnessRequest


class OracleAdapterError(Exception):
    """Transport-level failure reported by an oracle adapter."""


class OracleAdapter(Protocol):
    def request(self, req: RandomnessRequest) -> int:
        """Submit a randomness request and return the oracle-allocated handle."""
        ...


from .client import RandomnessClient  # noqa: E402
from .http import HttpOracleAdapter  # noqa: E402
from .stub import StubOracleAdapter  # noqa: E402

__all__ = [
    "OracleAdapter",
    "OracleAdapterError",
    "RandomnessClient",
    "HttpOracleAdapter",
    "StubOracleAdapter",
]
