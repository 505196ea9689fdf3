"""
Minimal JSON-RPC 2.0 dispatcher for the Lucky Token methods.

Supports single requests, batches and notifications (no `id` → no response).
`lucky.fulfill` is only accepted from the oracle: the raw HTTP body must be
signed with the shared callback secret in the `X-Lucky-Signature` header (see
`lucky_token.auth`). For a batch the signature covers the whole body.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from fastapi import APIRouter, Request, Response
from pydantic import ValidationError

from ..auth import SIGNATURE_HEADER, CallbackAuth
from ..errors import LuckyTokenError
from ..service import LuckyTokenService
from .errors import (InvalidParams, InvalidRequest, JsonRpcCode,
                     MethodNotFound, RpcError, error_response, to_rpc_error)
from .methods import RPC_METHODS

log = logging.getLogger(__name__)

Json = Dict[str, Any]

_NO_ID = object()  # notification sentinel

_EXPECTED = (RpcError, ValidationError, LuckyTokenError, ValueError, TypeError)


def _validate_request_obj(obj: Any) -> Tuple[str, Any, Any]:
    if not isinstance(obj, dict):
        raise InvalidRequest("Request must be an object")
    if obj.get("jsonrpc") != "2.0":
        raise InvalidRequest("jsonrpc must be '2.0'")
    method = obj.get("method")
    if not isinstance(method, str) or not method:
        raise InvalidRequest("method must be a non-empty string")
    params = obj.get("params")
    if params is not None and not isinstance(params, (list, dict)):
        raise InvalidParams("params, if present, must be array or object")
    req_id = obj["id"] if "id" in obj else _NO_ID
    if req_id is not _NO_ID and not (req_id is None or isinstance(req_id, (str, int))):
        raise InvalidRequest("id must be string, number, or null")
    return method, params, req_id


def _error_obj(exc: BaseException) -> Json:
    if isinstance(exc, ValidationError):
        errs = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]
        return InvalidParams(errors=errs).to_dict()
    return to_rpc_error(exc).to_dict()


async def dispatch_one(
    service: LuckyTokenService,
    obj: Any,
    auth: Optional[CallbackAuth] = None,
) -> Optional[Json]:
    req_id: Any = obj.get("id", _NO_ID) if isinstance(obj, dict) else None
    try:
        method, params, req_id = _validate_request_obj(obj)
        spec = RPC_METHODS.get(method)
        if spec is None:
            raise MethodNotFound(method)
        result = await spec.call(service, params, auth)
        if req_id is _NO_ID:
            return None
        return {"jsonrpc": "2.0", "id": req_id, "result": result}
    except Exception as exc:
        if not isinstance(exc, _EXPECTED):
            log.exception("unhandled error in JSON-RPC call")
        if req_id is _NO_ID:
            log.debug("error in notification: %s", exc)
            return None
        return {"jsonrpc": "2.0", "id": req_id, "error": _error_obj(exc)}


async def dispatch(
    service: LuckyTokenService,
    payload: Any,
    auth: Optional[CallbackAuth] = None,
) -> Union[Json, List[Json], None]:
    """Dispatch a parsed JSON payload (single object or batch)."""
    if isinstance(payload, list):
        if not payload:
            return error_response(None, InvalidRequest("empty batch"))
        out: List[Json] = []
        for obj in payload:
            r = await dispatch_one(service, obj, auth)
            if r is not None:
                out.append(r)
        return out
    if isinstance(payload, dict):
        return await dispatch_one(service, payload, auth)
    return error_response(None, InvalidRequest("payload must be object or array"))


def get_rpc_router(service: LuckyTokenService, *, path: str = "/rpc") -> APIRouter:
    r = APIRouter(tags=["jsonrpc"])

    @r.post(path)
    async def jsonrpc_endpoint(request: Request) -> Response:
        body = await request.body()
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            err = error_response(None, RpcError(JsonRpcCode.PARSE_ERROR, "Parse error"))
            return Response(content=json.dumps(err), status_code=400, media_type="application/json")
        auth = CallbackAuth(body=body, signature=request.headers.get(SIGNATURE_HEADER))
        result = await dispatch(service, payload, auth)
        if result is None:
            return Response(status_code=204)
        return Response(
            content=json.dumps(result, separators=(",", ":")),
            media_type="application/json",
        )

    return r


__all__ = ["dispatch", "dispatch_one", "get_rpc_router"]
