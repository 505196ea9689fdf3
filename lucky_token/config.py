"""
Lucky Token configuration.

Typed, immutable configuration objects for:
- the trusted randomness oracle (callback identity, subscription, endpoint)
- token metadata and the mint range
- where pending requests are persisted

Everything is fixed at construction and read-only afterwards; a node that
needs a different oracle identity builds a new config and a new orchestrator.

Provides:
- Frozen dataclass configs with validation
- Loading from environment variables (prefix configurable)
- Loading from a JSON or YAML* file (*if PyYAML is available)
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .constants import (CALLBACK_SIGNATURE, DEFAULT_CONFIRMATIONS,
                        DEFAULT_DECIMALS, MAX_CONFIRMATIONS, MAX_DECIMALS,
                        MAX_WHOLE_TOKENS, TOKEN_NAME, TOKEN_SYMBOL, U256_MAX)
from .types.core import Address, SubscriptionId, is_zero_address, to_address

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# -------------------------
# Sub-configs
# -------------------------


@dataclass(frozen=True)
class OracleConfig:
    """
    The randomness oracle this token trusts.

    identity: 0x-hex address of the only caller allowed to deliver callbacks
    subscription_id: billing channel passed to the oracle on every request
    endpoint: JSON-RPC URL of the oracle coordinator (HTTP adapter only)
    timeout_s: HTTP timeout for oracle requests
    confirmations: confirmations the oracle waits for before answering
    callback_signature: entry point the oracle calls back
    callback_secret: HMAC key shared with the oracle; HTTP callbacks must be
        signed with it (see lucky_token.auth)
    """

    identity: str = ""
    subscription_id: int = 0
    endpoint: Optional[str] = None
    timeout_s: float = 10.0
    confirmations: int = DEFAULT_CONFIRMATIONS
    callback_signature: str = CALLBACK_SIGNATURE
    callback_secret: Optional[str] = field(default=None, repr=False)

    @property
    def identity_address(self) -> Address:
        return to_address(self.identity)

    @property
    def subscription(self) -> SubscriptionId:
        return SubscriptionId(self.subscription_id)

    def validate(self) -> None:
        if not self.identity:
            raise ValueError("oracle identity is required")
        try:
            addr = to_address(self.identity)
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid oracle identity: {e}") from e
        if is_zero_address(addr):
            raise ValueError("oracle identity must not be the zero address")
        if not isinstance(self.subscription_id, int) or not (0 <= self.subscription_id <= U256_MAX):
            raise ValueError("subscription_id must be an int within [0, 2**256 - 1]")
        if self.endpoint is not None:
            u = urlparse(self.endpoint)
            if u.scheme not in {"http", "https"}:
                raise ValueError("oracle endpoint must be http(s)")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if not (0 <= self.confirmations <= MAX_CONFIRMATIONS):
            raise ValueError(f"confirmations must be within [0, {MAX_CONFIRMATIONS}]")
        if not self.callback_signature:
            raise ValueError("callback_signature must be non-empty")
        if self.callback_secret is not None and not self.callback_secret:
            raise ValueError("callback_secret must be non-empty when set")


@dataclass(frozen=True)
class TokenConfig:
    """
    Token metadata and mint range.

    The amount minted per fulfilment lies in [1, range_width] where
    range_width = max_whole_tokens * 10**decimals.
    """

    name: str = TOKEN_NAME
    symbol: str = TOKEN_SYMBOL
    decimals: int = DEFAULT_DECIMALS
    max_whole_tokens: int = MAX_WHOLE_TOKENS

    @property
    def range_width(self) -> int:
        return self.max_whole_tokens * (10 ** self.decimals)

    def validate(self) -> None:
        if not self.name:
            raise ValueError("token name must be non-empty")
        if not self.symbol or not self.symbol.isalnum():
            raise ValueError("token symbol must be non-empty alphanumeric")
        if not (0 <= self.decimals <= MAX_DECIMALS):
            raise ValueError(f"decimals must be within [0, {MAX_DECIMALS}]")
        if self.max_whole_tokens <= 0:
            raise ValueError("max_whole_tokens must be > 0")
        if self.range_width > U256_MAX:
            raise ValueError("max_whole_tokens * 10**decimals exceeds u256")


@dataclass(frozen=True)
class StorageConfig:
    """
    Where pending mint requests are persisted.

    URIs:
      - memory://            in-process dict (lost on restart)
      - sqlite:///path.db    SQLite file (created on first use)
    """

    pending_uri: str = "memory://"

    def validate(self) -> None:
        u = urlparse(self.pending_uri)
        if u.scheme not in {"memory", "sqlite"}:
            raise ValueError("pending_uri must be memory:// or sqlite:///path")
        if u.scheme == "sqlite" and not (u.path or u.netloc):
            raise ValueError("sqlite pending_uri must name a database path")

    def sqlite_path(self) -> Optional[str]:
        u = urlparse(self.pending_uri)
        if u.scheme != "sqlite":
            return None
        # sqlite:///abs/path.db -> /abs/path.db ; sqlite://rel.db -> rel.db
        return (u.netloc + u.path) if u.netloc else u.path


# -------------------------
# Top-level config
# -------------------------


@dataclass(frozen=True)
class LuckyTokenConfig:
    """
    Oracle / token / storage: nested sub-configs
    log_level: level used by the app factory when configuring logging
    """

    oracle: OracleConfig = field(default_factory=OracleConfig)
    token: TokenConfig = field(default_factory=TokenConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = "INFO"

    def validate(self) -> None:
        self.oracle.validate()
        self.token.validate()
        self.storage.validate()
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["token"]["range_width"] = self.token.range_width
        if data["oracle"]["callback_secret"]:
            data["oracle"]["callback_secret"] = "***"
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = "LUCKY_") -> "LuckyTokenConfig":
        """
        Load configuration from environment variables.

        Supported keys (examples):
          - LUCKY_ORACLE_IDENTITY=0x1111111111111111111111111111111111111111  (required)
          - LUCKY_ORACLE_SUBSCRIPTION_ID=7
          - LUCKY_ORACLE_ENDPOINT=http://127.0.0.1:8645/rpc
          - LUCKY_ORACLE_TIMEOUT_S=10
          - LUCKY_ORACLE_CONFIRMATIONS=3
          - LUCKY_ORACLE_CALLBACK=fulfill_random_words(uint256,uint256[])
          - LUCKY_ORACLE_CALLBACK_SECRET=<shared HMAC key>

          - LUCKY_TOKEN_NAME=Lucky Token
          - LUCKY_TOKEN_SYMBOL=LCK
          - LUCKY_TOKEN_DECIMALS=18
          - LUCKY_TOKEN_MAX_WHOLE=1000

          - LUCKY_STORE_PENDING=sqlite:///./data/lucky/pending.db
          - LUCKY_LOG_LEVEL=INFO
        """

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None:
                return default
            try:
                return cast(raw)
            except Exception as e:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from e

        cfg = LuckyTokenConfig(
            oracle=OracleConfig(
                identity=_get("ORACLE_IDENTITY", str, ""),
                subscription_id=_get("ORACLE_SUBSCRIPTION_ID", _parse_int, 0),
                endpoint=_get("ORACLE_ENDPOINT", str, None),
                timeout_s=_get("ORACLE_TIMEOUT_S", float, 10.0),
                confirmations=_get("ORACLE_CONFIRMATIONS", int, DEFAULT_CONFIRMATIONS),
                callback_signature=_get("ORACLE_CALLBACK", str, CALLBACK_SIGNATURE),
                callback_secret=_get("ORACLE_CALLBACK_SECRET", str, None),
            ),
            token=TokenConfig(
                name=_get("TOKEN_NAME", str, TOKEN_NAME),
                symbol=_get("TOKEN_SYMBOL", str, TOKEN_SYMBOL),
                decimals=_get("TOKEN_DECIMALS", int, DEFAULT_DECIMALS),
                max_whole_tokens=_get("TOKEN_MAX_WHOLE", int, MAX_WHOLE_TOKENS),
            ),
            storage=StorageConfig(
                pending_uri=_get("STORE_PENDING", str, "memory://"),
            ),
            log_level=_get("LOG_LEVEL", str, "INFO"),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "LuckyTokenConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        structure. Example (YAML):

            oracle:
              identity: "0x1111111111111111111111111111111111111111"
              subscription_id: 7
              endpoint: "http://127.0.0.1:8645/rpc"
              confirmations: 3
            token:
              decimals: 18
              max_whole_tokens: 1000
            storage:
              pending_uri: "sqlite:///./data/lucky/pending.db"
            log_level: INFO
        """
        text = _read_text(path)
        data = _parse_json_or_yaml(text, path)

        def _pop(d: Dict[str, Any], key: str, default: Any) -> Any:
            return d.pop(key, default) if isinstance(d, dict) else default

        oracle_d = _pop(data, "oracle", {}) or {}
        token_d = _pop(data, "token", {}) or {}
        storage_d = _pop(data, "storage", {}) or {}

        cfg = LuckyTokenConfig(
            oracle=OracleConfig(
                identity=_pop(oracle_d, "identity", ""),
                subscription_id=_parse_int(_pop(oracle_d, "subscription_id", 0)),
                endpoint=_pop(oracle_d, "endpoint", None),
                timeout_s=float(_pop(oracle_d, "timeout_s", 10.0)),
                confirmations=_pop(oracle_d, "confirmations", DEFAULT_CONFIRMATIONS),
                callback_signature=_pop(oracle_d, "callback_signature", CALLBACK_SIGNATURE),
                callback_secret=_pop(oracle_d, "callback_secret", None),
            ),
            token=TokenConfig(
                name=_pop(token_d, "name", TOKEN_NAME),
                symbol=_pop(token_d, "symbol", TOKEN_SYMBOL),
                decimals=_pop(token_d, "decimals", DEFAULT_DECIMALS),
                max_whole_tokens=_pop(token_d, "max_whole_tokens", MAX_WHOLE_TOKENS),
            ),
            storage=StorageConfig(
                pending_uri=_pop(storage_d, "pending_uri", "memory://"),
            ),
            log_level=_pop(data, "log_level", "INFO"),
        )
        cfg.validate()
        return cfg


# -------------------------
# Utilities
# -------------------------


def _parse_int(raw: Any) -> int:
    """Accept decimal or 0x-hex integers (subscription ids are often hex)."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    s = str(raw).strip()
    return int(s, 16) if s.lower().startswith("0x") else int(s)


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _parse_json_or_yaml(text: str, path_hint: str) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    try:
        import yaml  # type: ignore

        return yaml.safe_load(text) or {}
    except Exception as e:
        raise ValueError(
            f"Failed to parse {path_hint!r} as JSON or YAML. "
            f"Install PyYAML or provide valid JSON. Original error: {e}"
        ) from e


__all__ = [
    "OracleConfig",
    "TokenConfig",
    "StorageConfig",
    "LuckyTokenConfig",
]
