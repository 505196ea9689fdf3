from typing import Any, Dict, List

import pytest
import requests

from lucky_token.constants import CALLBACK_SIGNATURE
from lucky_token.errors import RandomnessRequestFailed
from lucky_token.oracle import (HttpOracleAdapter, OracleAdapterError,
                                RandomnessClient, StubOracleAdapter)
from lucky_token.oracle.http import METHOD_REQUEST
from lucky_token.types import RandomnessRequest


class _Resp:
    def __init__(self, status: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status
        self._payload = payload
        self.text = text or repr(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _Session:
    def __init__(self, resp: Any) -> None:
        self.resp = resp
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, json: Any = None, timeout: float = 0.0) -> Any:
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if isinstance(self.resp, Exception):
            raise self.resp
        return self.resp


def test_stub_hands_out_queued_then_counter(metrics):
    stub = StubOracleAdapter([42], start=100)
    client = RandomnessClient(stub, metrics=metrics)
    assert client.request(CALLBACK_SIGNATURE, 1, 3, 7) == 42
    assert client.request(CALLBACK_SIGNATURE, 1, 3, 7) == 100
    assert client.request(CALLBACK_SIGNATURE, 1, 3, 7) == 101
    assert stub.requests[0] == RandomnessRequest(CALLBACK_SIGNATURE, 1, 3, 7)


def test_adapter_failure_becomes_randomness_request_failed(metrics):
    stub = StubOracleAdapter()
    stub.fail_with = "subscription underfunded"
    client = RandomnessClient(stub, metrics=metrics)
    with pytest.raises(RandomnessRequestFailed) as ei:
        client.request(CALLBACK_SIGNATURE, 1, 3, 7)
    assert "underfunded" in ei.value.reason
    assert isinstance(ei.value.__cause__, OracleAdapterError)
    assert stub.requests == []


@pytest.mark.parametrize("bad", [-1, 2**256, "42", None])
def test_invalid_handle_from_adapter(metrics, bad):
    class _Bad:
        def request(self, req):
            return bad

    with pytest.raises(RandomnessRequestFailed) as ei:
        RandomnessClient(_Bad(), metrics=metrics).request(CALLBACK_SIGNATURE, 1, 3, 7)
    assert ei.value.reason.startswith("bad-handle")


def test_invalid_request_parameters_fail_before_adapter(metrics):
    stub = StubOracleAdapter()
    with pytest.raises(RandomnessRequestFailed):
        RandomnessClient(stub, metrics=metrics).request(CALLBACK_SIGNATURE, 0, 3, 7)
    assert stub.requests == []


# ---------------------------------------------------------------------------
# HTTP adapter
# ---------------------------------------------------------------------------

REQ = RandomnessRequest(CALLBACK_SIGNATURE, 1, 3, 7)


@pytest.mark.parametrize(
    "result, handle",
    [({"requestId": 42}, 42), ({"requestId": "0x2a"}, 42), ("42", 42), (9, 9)],
)
def test_http_adapter_parses_request_id(result, handle):
    session = _Session(_Resp(payload={"jsonrpc": "2.0", "id": 1, "result": result}))
    adapter = HttpOracleAdapter("http://oracle.local/rpc", timeout=2.5, session=session)
    assert adapter.request(REQ) == handle
    call = session.calls[0]
    assert call["url"] == "http://oracle.local/rpc"
    assert call["timeout"] == 2.5
    assert call["json"]["method"] == METHOD_REQUEST
    assert call["json"]["params"] == [
        {"callback": CALLBACK_SIGNATURE, "numWords": 1, "confirmations": 3, "subscriptionId": 7}
    ]


@pytest.mark.parametrize(
    "resp",
    [
        requests.ConnectionError("refused"),
        _Resp(status=503, payload={"error": "down"}),
        _Resp(payload=None, text="<html>"),
        _Resp(payload={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "no funds"}}),
        _Resp(payload={"jsonrpc": "2.0", "id": 1, "result": {"foo": 1}}),
        _Resp(payload=["not", "an", "object"]),
    ],
)
def test_http_adapter_failures(resp):
    adapter = HttpOracleAdapter("http://oracle.local/rpc", session=_Session(resp))
    with pytest.raises(OracleAdapterError):
        adapter.request(REQ)


def test_http_failure_surfaces_through_client(metrics):
    adapter = HttpOracleAdapter("http://oracle.local/rpc", session=_Session(_Resp(status=500, payload={})))
    with pytest.raises(RandomnessRequestFailed):
        RandomnessClient(adapter, metrics=metrics).request(CALLBACK_SIGNATURE, 1, 3, 7)
