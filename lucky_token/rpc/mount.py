"""
lucky_token.rpc.mount
---------------------

REST endpoints for the token (prefix `/lucky` by default):

    GET  /token                 → token metadata, amount bounds, supply
    GET  /balance/{address}     → ledger balance
    GET  /requests              → still-pending mint requests
    GET  /requests/{handle}     → request record (pending or fulfilled)
    GET  /events?since=N        → MintRequested / Minted signals after N
    POST /mint                  → request a random mint for a recipient
    POST /fulfill               → oracle callback; body signed in X-Lucky-Signature

Domain errors are turned into HTTPException with the status from
`lucky_token.rpc.errors.http_status_for`. The JSON-RPC router lives in
`jsonrpc.py`; `mount_lucky_rpc` attaches both to an existing app.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Optional, TypeVar, Union

from fastapi import APIRouter, FastAPI, Header, HTTPException, Query, Request
from pydantic import BaseModel, Field

from ..auth import CallbackAuth
from ..constants import U256_MAX
from ..errors import LuckyTokenError
from ..service import LuckyTokenService
from .errors import http_status_for
from .jsonrpc import get_rpc_router
from .methods import FulfillParams

logger = logging.getLogger(__name__)

T = TypeVar("T")


# --------------------------------------------------------------------------------------
# Request models
# --------------------------------------------------------------------------------------

class MintReq(BaseModel):
    recipient: str = Field(..., description="0x-prefixed 20-byte address")


class FulfillReq(FulfillParams):
    """Same fields and integer parsing as the `lucky.fulfill` params."""


# --------------------------------------------------------------------------------------
# REST router
# --------------------------------------------------------------------------------------

async def _guard(aw: Awaitable[T]) -> T:
    try:
        return await aw
    except LuckyTokenError as e:
        raise HTTPException(status_code=http_status_for(e), detail=str(e)) from e
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def get_router(service: LuckyTokenService, *, prefix: str = "/lucky") -> APIRouter:
    r = APIRouter(prefix=prefix, tags=["lucky-token"])

    @r.get("/token")
    async def token() -> dict:
        return await service.get_token()

    @r.get("/balance/{address}")
    async def balance(address: str) -> dict:
        return await _guard(service.balance_of(address))

    @r.get("/requests")
    async def pending() -> list[dict]:
        return await service.list_pending()

    @r.get("/requests/{handle}")
    async def request_by_handle(handle: int) -> dict:
        if handle < 0 or handle > U256_MAX:
            raise HTTPException(status_code=400, detail="handle out of range")
        rec = await service.get_request(handle)
        if rec is None:
            raise HTTPException(status_code=404, detail="request not found")
        return rec

    @r.get("/events")
    async def events(
        since: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=1000),
    ) -> list[dict]:
        return await service.get_events(since=since, limit=limit)

    @r.post("/mint")
    async def post_mint(req: MintReq) -> dict:
        return await _guard(service.request_mint(recipient=req.recipient))

    @r.post("/fulfill")
    async def post_fulfill(
        req: FulfillReq,
        request: Request,
        x_lucky_signature: Optional[str] = Header(None),
    ) -> dict:
        auth = CallbackAuth(body=await request.body(), signature=x_lucky_signature)
        return await _guard(
            service.fulfill(auth=auth, handle=req.handle, random_words=req.random_words)
        )

    return r


# --------------------------------------------------------------------------------------
# Mount helper
# --------------------------------------------------------------------------------------

def mount_lucky_rpc(
    app: FastAPI,
    *,
    service: LuckyTokenService,
    rest_prefix: str = "/lucky",
    rpc_path: Union[str, None] = "/rpc",
) -> None:
    """
    Mount REST endpoints and, unless `rpc_path` is None, the JSON-RPC endpoint
    on the given FastAPI app.
    """
    app.include_router(get_router(service, prefix=rest_prefix))
    if rpc_path is not None:
        app.include_router(get_rpc_router(service, path=rpc_path))
    logger.debug("lucky token mounted rest=%s rpc=%s", rest_prefix, rpc_path)


__all__ = ["get_router", "mount_lucky_rpc", "MintReq", "FulfillReq"]
