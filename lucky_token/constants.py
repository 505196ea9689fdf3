"""
Lucky Token constants.

Stable defaults shared by config, the amount deriver and the oracle client.
Deployments override the operational knobs through
`lucky_token.config.LuckyTokenConfig`; code that needs compile-time defaults
imports them from here.
"""

from __future__ import annotations

# -----------------------------
# Token metadata
# -----------------------------
TOKEN_NAME: str = "Lucky Token"
TOKEN_SYMBOL: str = "LCK"
DEFAULT_DECIMALS: int = 18
MAX_DECIMALS: int = 36

# Upper bound of a single mint, in whole tokens. The derived amount lies in
# [1, MAX_WHOLE_TOKENS * 10**decimals].
MAX_WHOLE_TOKENS: int = 1000

# -----------------------------
# Oracle request parameters
# -----------------------------
# Exactly one random word is requested per mint; callbacks carrying any other
# number of words are rejected.
NUM_WORDS: int = 1
DEFAULT_CONFIRMATIONS: int = 3
MAX_CONFIRMATIONS: int = 200
CALLBACK_SIGNATURE: str = "fulfill_random_words(uint256,uint256[])"

# -----------------------------
# Integer domains
# -----------------------------
U256_MAX: int = (1 << 256) - 1
ADDRESS_LEN: int = 20
ZERO_ADDRESS: bytes = b"\x00" * ADDRESS_LEN

# -----------------------------
# Signal names
# -----------------------------
EV_MINT_REQUESTED: str = "MintRequested"
EV_MINTED: str = "Minted"

__all__ = [
    "TOKEN_NAME",
    "TOKEN_SYMBOL",
    "DEFAULT_DECIMALS",
    "MAX_DECIMALS",
    "MAX_WHOLE_TOKENS",
    "NUM_WORDS",
    "DEFAULT_CONFIRMATIONS",
    "MAX_CONFIRMATIONS",
    "CALLBACK_SIGNATURE",
    "U256_MAX",
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "EV_MINT_REQUESTED",
    "EV_MINTED",
]
