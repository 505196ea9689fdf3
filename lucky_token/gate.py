"""
Trusted caller gate for oracle callbacks.

Holds the one identity allowed to deliver randomness and rejects everyone
else. The identity is a public address, so a plain comparison is enough.
"""

from __future__ import annotations

from typing import Union

from .errors import OnlyTrustedOracle
from .types.core import Address, address_hex, to_address


class TrustedCallerGate:
    def __init__(self, oracle_identity: Union[str, bytes]) -> None:
        self._identity: Address = to_address(oracle_identity)

    @property
    def identity(self) -> Address:
        return self._identity

    def is_trusted(self, caller: Union[str, bytes]) -> bool:
        try:
            return to_address(caller) == self._identity
        except (TypeError, ValueError):
            return False

    def authorize(self, caller: Union[str, bytes]) -> None:
        """Return silently for the trusted oracle, raise OnlyTrustedOracle otherwise."""
        if not self.is_trusted(caller):
            shown = address_hex(caller) if isinstance(caller, (bytes, bytearray)) else str(caller)
            raise OnlyTrustedOracle(caller=shown)


__all__ = ["TrustedCallerGate"]
