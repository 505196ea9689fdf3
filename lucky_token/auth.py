"""
Callback authentication for the HTTP surfaces.

An oracle callback arriving over HTTP carries an HMAC-SHA256 of the raw
request body, keyed with the secret shared with the oracle, in the
`X-Lucky-Signature` header (lowercase hex). Only a callback whose signature
verifies is attributed to the configured oracle identity; the gate then
admits it like any other call from that identity.

With no secret configured every HTTP callback is rejected.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import OnlyTrustedOracle

log = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Lucky-Signature"


@dataclass(frozen=True)
class CallbackAuth:
    """Raw body and signature header of one HTTP request."""

    body: bytes
    signature: Optional[str] = None


def sign_callback(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_callback(secret: Optional[str], auth: Optional[CallbackAuth]) -> None:
    """Raise OnlyTrustedOracle unless `auth` carries a valid signature for `secret`."""
    if not secret:
        log.warning("callback rejected: no callback secret configured")
        raise OnlyTrustedOracle(caller="unsigned")
    if auth is None or not auth.signature:
        raise OnlyTrustedOracle(caller="unsigned")

    expected = sign_callback(secret, auth.body)
    given = auth.signature.strip().lower()
    if not hmac.compare_digest(expected.encode(), given.encode("utf-8", "replace")):
        raise OnlyTrustedOracle(caller="bad-signature")


__all__ = ["SIGNATURE_HEADER", "CallbackAuth", "sign_callback", "verify_callback"]
