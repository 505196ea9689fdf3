"""
lucky_token.rpc.methods
=======================

JSON-RPC method table for the token.

    lucky.getToken       → token metadata, amount bounds, total supply
    lucky.balanceOf      → {"address", "balance"}
    lucky.getRequest     → pending/fulfilled record for a handle (or null)
    lucky.requestMint    → ask the oracle for a mint to `recipient`
    lucky.fulfill        → oracle callback (HMAC-signed request body)
    lucky.getEvents      → MintRequested / Minted signals after `since`

Params may be positional (array, in model field order) or named (object).
Every method gets a pydantic model; numeric params also accept 0x-hex or
decimal strings because 256-bit words do not survive JSON number parsing in
most clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..auth import CallbackAuth
from ..constants import U256_MAX
from ..service import LuckyTokenService
from ..types.core import to_address


def as_int(v: Any) -> Any:
    """Integer params may arrive as JSON numbers or as decimal / 0x-hex strings."""
    if isinstance(v, bool):
        raise ValueError("expected integer, got bool")
    if isinstance(v, str):
        s = v.strip()
        try:
            return int(s, 16) if s.lower().startswith("0x") else int(s, 10)
        except ValueError:
            raise ValueError(f"not an integer: {v!r}")
    return v


# -----------------------------------------------------------------------------
# Param models
# -----------------------------------------------------------------------------


class NoParams(BaseModel):
    model_config = ConfigDict(extra="forbid")


class BalanceParams(BaseModel):
    model_config = ConfigDict(extra="forbid")
    address: str

    @field_validator("address")
    @classmethod
    def _addr_ok(cls, v: str) -> str:
        to_address(v)
        return v


class HandleParams(BaseModel):
    model_config = ConfigDict(extra="forbid")
    handle: int = Field(..., ge=0, le=U256_MAX)

    @field_validator("handle", mode="before")
    @classmethod
    def _handle_int(cls, v: Any) -> Any:
        return as_int(v)


class RequestMintParams(BaseModel):
    model_config = ConfigDict(extra="forbid")
    recipient: str


class FulfillParams(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    handle: int = Field(..., ge=0, le=U256_MAX)
    random_words: List[int] = Field(..., alias="randomWords")

    @field_validator("handle", mode="before")
    @classmethod
    def _handle_int(cls, v: Any) -> Any:
        return as_int(v)

    @field_validator("random_words", mode="before")
    @classmethod
    def _words_int(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            raise ValueError("randomWords must be an array")
        return [as_int(x) for x in v]


class EventsParams(BaseModel):
    model_config = ConfigDict(extra="forbid")
    since: int = Field(0, ge=0)
    limit: int = Field(100, ge=1, le=1000)


# -----------------------------------------------------------------------------
# Handlers
# -----------------------------------------------------------------------------

Handler = Callable[[LuckyTokenService, Any, Optional[CallbackAuth]], Awaitable[Any]]


async def _get_token(svc: LuckyTokenService, p: NoParams, auth: Optional[CallbackAuth]) -> dict:
    return await svc.get_token()


async def _balance_of(svc: LuckyTokenService, p: BalanceParams, auth: Optional[CallbackAuth]) -> dict:
    return await svc.balance_of(p.address)


async def _get_request(svc: LuckyTokenService, p: HandleParams, auth: Optional[CallbackAuth]) -> Optional[dict]:
    return await svc.get_request(p.handle)


async def _request_mint(svc: LuckyTokenService, p: RequestMintParams, auth: Optional[CallbackAuth]) -> dict:
    return await svc.request_mint(recipient=p.recipient)


async def _fulfill(svc: LuckyTokenService, p: FulfillParams, auth: Optional[CallbackAuth]) -> dict:
    return await svc.fulfill(auth=auth, handle=p.handle, random_words=p.random_words)


async def _get_events(svc: LuckyTokenService, p: EventsParams, auth: Optional[CallbackAuth]) -> List[dict]:
    return await svc.get_events(since=p.since, limit=p.limit)


@dataclass(frozen=True)
class MethodSpec:
    """A JSON-RPC method binding: handler plus its params model."""

    name: str
    func: Handler
    params_model: Type[BaseModel]
    desc: str = ""

    def bind(self, params: Union[None, List[Any], Dict[str, Any]]) -> BaseModel:
        """Validate positional or named params into the method's model."""
        if params is None:
            return self.params_model()
        # [{...}] is accepted as named params
        if isinstance(params, list) and len(params) == 1 and isinstance(params[0], dict):
            params = params[0]
        if isinstance(params, list):
            names = list(self.params_model.model_fields)
            if len(params) > len(names):
                raise ValueError(f"{self.name} takes at most {len(names)} params, got {len(params)}")
            params = dict(zip(names, params))
        return self.params_model.model_validate(params)

    async def call(
        self,
        service: LuckyTokenService,
        params: Union[None, List[Any], Dict[str, Any]],
        auth: Optional[CallbackAuth] = None,
    ) -> Any:
        return await self.func(service, self.bind(params), auth)


def _spec(name: str, func: Handler, model: Type[BaseModel], desc: str) -> MethodSpec:
    return MethodSpec(name=name, func=func, params_model=model, desc=desc)


RPC_METHODS: Dict[str, MethodSpec] = {
    s.name: s
    for s in (
        _spec("lucky.getToken", _get_token, NoParams, "Token metadata and amount bounds"),
        _spec("lucky.balanceOf", _balance_of, BalanceParams, "Ledger balance of an address"),
        _spec("lucky.getRequest", _get_request, HandleParams, "Mint request record by handle"),
        _spec("lucky.requestMint", _request_mint, RequestMintParams, "Request a random mint"),
        _spec("lucky.fulfill", _fulfill, FulfillParams, "Oracle randomness callback"),
        _spec("lucky.getEvents", _get_events, EventsParams, "Signals after a sequence number"),
    )
}


__all__ = [
    "RPC_METHODS",
    "as_int",
    "MethodSpec",
    "NoParams",
    "BalanceParams",
    "HandleParams",
    "RequestMintParams",
    "FulfillParams",
    "EventsParams",
]
