"""
Transport error mapping for the Lucky Token surfaces.

Domain errors (lucky_token.errors) are mapped to:
- an HTTP status for the REST router,
- a JSON-RPC error object for /rpc.

Standard JSON-RPC codes are used for envelope problems; application codes live
in the reserved -32000..-32099 server range and are stable across releases.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..errors import (AlreadyFulfilled, DuplicateHandle, InvalidReceiver,
                      LedgerError, LuckyTokenError, MalformedCallback,
                      MintFailed, OnlyTrustedOracle, RandomnessRequestFailed,
                      UnknownRequest)


class JsonRpcCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class LuckyCode(IntEnum):
    SERVER_ERROR = -32000
    ACCESS_DENIED = -32003
    NOT_FOUND = -32004
    ALREADY_EXISTS = -32005

    MALFORMED_CALLBACK = -32060
    RANDOMNESS_REQUEST_FAILED = -32061
    MINT_FAILED = -32062
    INVALID_RECIPIENT = -32063


@dataclass(eq=False)
class RpcError(Exception):
    code: int
    message: str
    data: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        err: Dict[str, Any] = {"code": int(self.code), "message": str(self.message)}
        if self.data:
            err["data"] = dict(self.data)
        return err

    def __str__(self) -> str:  # pragma: no cover
        return f"[{self.code}] {self.message} ({self.data})"


class InvalidRequest(RpcError):
    def __init__(self, detail: str = "Invalid request", **data: Any) -> None:
        super().__init__(JsonRpcCode.INVALID_REQUEST, detail, data or None)


class MethodNotFound(RpcError):
    def __init__(self, method: str) -> None:
        super().__init__(JsonRpcCode.METHOD_NOT_FOUND, "Method not found", {"method": method})


class InvalidParams(RpcError):
    def __init__(self, detail: str = "Invalid params", **data: Any) -> None:
        super().__init__(JsonRpcCode.INVALID_PARAMS, detail, data or None)


# (http status, json-rpc code), most specific first
_DOMAIN_MAP: Tuple[Tuple[type, int, int], ...] = (
    (OnlyTrustedOracle, 403, LuckyCode.ACCESS_DENIED),
    (UnknownRequest, 404, LuckyCode.NOT_FOUND),
    (AlreadyFulfilled, 409, LuckyCode.ALREADY_EXISTS),
    (DuplicateHandle, 409, LuckyCode.ALREADY_EXISTS),
    (MalformedCallback, 422, LuckyCode.MALFORMED_CALLBACK),
    (RandomnessRequestFailed, 502, LuckyCode.RANDOMNESS_REQUEST_FAILED),
    (MintFailed, 400, LuckyCode.MINT_FAILED),
    # rejected before any oracle request or mint
    (InvalidReceiver, 400, LuckyCode.INVALID_RECIPIENT),
    (LedgerError, 400, LuckyCode.MINT_FAILED),
)


def _lookup(exc: BaseException) -> Tuple[int, int]:
    for cls, status, code in _DOMAIN_MAP:
        if isinstance(exc, cls):
            return status, int(code)
    if isinstance(exc, (ValueError, TypeError)):
        return 400, int(JsonRpcCode.INVALID_PARAMS)
    return 500, int(LuckyCode.SERVER_ERROR)


def http_status_for(exc: BaseException) -> int:
    return _lookup(exc)[0]


def to_rpc_error(exc: BaseException) -> RpcError:
    """Convert any exception into an RpcError suitable for an error envelope."""
    if isinstance(exc, RpcError):
        return exc
    _, code = _lookup(exc)
    if isinstance(exc, LuckyTokenError):
        return RpcError(code, str(exc), {"type": type(exc).__name__})
    if code == JsonRpcCode.INVALID_PARAMS:
        return InvalidParams(str(exc))
    return RpcError(code, "Server error")


def error_response(req_id: Optional[Union[str, int]], err: RpcError) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": req_id, "error": err.to_dict()}


__all__ = [
    "JsonRpcCode",
    "LuckyCode",
    "RpcError",
    "InvalidRequest",
    "MethodNotFound",
    "InvalidParams",
    "http_status_for",
    "to_rpc_error",
    "error_response",
]
