"""
HTTP oracle adapter.

Submits `vrf.requestRandomWords` to an oracle coordinator over JSON-RPC 2.0:

    → {"jsonrpc": "2.0", "id": 1, "method": "vrf.requestRandomWords",
       "params": [{"callback": "...", "numWords": 1, "confirmations": 3,
                   "subscriptionId": 7}]}
    ← {"jsonrpc": "2.0", "id": 1, "result": {"requestId": 42}}

`requestId` may be an int or a 0x-hex string; a bare result value is accepted
too. Transport errors, non-200 responses, non-JSON bodies and error envelopes
all raise OracleAdapterError.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from ..types.core import RandomnessRequest
from . import OracleAdapterError

log = logging.getLogger(__name__)

METHOD_REQUEST = "vrf.requestRandomWords"


def _parse_request_id(result: Any) -> int:
    value = result.get("requestId") if isinstance(result, dict) else result
    if isinstance(value, bool):
        raise OracleAdapterError(f"unexpected requestId: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s, 16) if s.lower().startswith("0x") else int(s)
        except ValueError as e:
            raise OracleAdapterError(f"unparseable requestId: {value!r}") from e
    raise OracleAdapterError(f"missing requestId in oracle result: {result!r}")


class HttpOracleAdapter:
    def __init__(self, endpoint: str, *, timeout: float = 10.0, session: "requests.Session | None" = None) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()
        self._id = 0

    def request(self, req: RandomnessRequest) -> int:
        self._id += 1
        body = {"jsonrpc": "2.0", "id": self._id, "method": METHOD_REQUEST, "params": [req.to_dict()]}
        try:
            r = self._session.post(self.endpoint, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise OracleAdapterError(f"oracle POST failed: {e}") from e
        if r.status_code != 200:
            raise OracleAdapterError(f"oracle HTTP {r.status_code}: {r.text[:200]}")
        try:
            data = r.json()
        except ValueError as e:
            raise OracleAdapterError(f"oracle response not JSON: {r.text[:200]}") from e
        if not isinstance(data, dict):
            raise OracleAdapterError(f"oracle response is not an object: {data!r}")
        if data.get("error"):
            raise OracleAdapterError(f"oracle error: {data['error']}")
        handle = _parse_request_id(data.get("result"))
        log.debug("oracle %s accepted request id=%d", self.endpoint, handle)
        return handle


__all__ = ["HttpOracleAdapter", "METHOD_REQUEST"]
