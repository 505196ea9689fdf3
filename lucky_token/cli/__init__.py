"""
lucky_token.cli
---------------

Small convenience CLI for interacting with a Lucky Token node via JSON-RPC.

Commands:
  - token        : Show token metadata, amount bounds and total supply.
  - balance      : Show the balance of an address.
  - request-mint : Request a randomly sized mint for a recipient.
  - fulfill      : Deliver an oracle callback signed with the callback secret.
  - status       : Show the request record for a handle.
  - events       : List MintRequested / Minted signals.
  - serve        : Run a node (FastAPI + uvicorn).

Environment:
  LUCKY_RPC_URL may be set to override the default RPC endpoint.
  LUCKY_ORACLE_CALLBACK_SECRET supplies the default for `fulfill --secret`.

Example:
  lucky token
  lucky request-mint 0x2222222222222222222222222222222222222222
  lucky fulfill --handle 42 --word 12345 --secret "$LUCKY_ORACLE_CALLBACK_SECRET"
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional, Sequence, Union

import requests
import typer

from ..auth import SIGNATURE_HEADER, sign_callback

__all__ = ["app", "main"]

_DEFAULT_RPC = os.getenv("LUCKY_RPC_URL") or "http://127.0.0.1:8650/rpc"


def _rpc_call(
    url: str,
    method: str,
    params: Optional[Union[Sequence[Any], Dict[str, Any]]] = None,
    *,
    secret: Optional[str] = None,
    timeout: float = 10.0,
) -> Any:
    """
    Minimal JSON-RPC 2.0 helper.

    With `secret`, the exact request bytes are signed into X-Lucky-Signature.
    """
    body = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": method,
        "params": params if isinstance(params, dict) else list(params or []),
    }
    raw = json.dumps(body, separators=(",", ":")).encode()
    headers = {"Content-Type": "application/json"}
    if secret:
        headers[SIGNATURE_HEADER] = sign_callback(secret, raw)
    try:
        r = requests.post(url, data=raw, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise SystemExit(f"RPC POST failed: {e}")
    if r.status_code != 200:
        raise SystemExit(f"RPC error HTTP {r.status_code}: {r.text}")
    try:
        data = r.json()
    except ValueError:
        raise SystemExit(f"RPC response not JSON: {r.text}")
    if "error" in data and data["error"]:
        raise SystemExit(f"RPC error: {json.dumps(data['error'], indent=2)}")
    return data.get("result")


app = typer.Typer(
    name="lucky",
    help="Lucky Token CLI (request a mint → oracle callback → minted).",
    no_args_is_help=True,
    add_completion=False,
)


def _opt_rpc() -> str:
    return typer.Option(_DEFAULT_RPC, "--rpc", help=f"JSON-RPC endpoint (default: {_DEFAULT_RPC})")  # type: ignore[return-value]


def _echo(res: Any) -> None:
    typer.echo(json.dumps(res, indent=2))


@app.command("token")
def cmd_token(rpc: str = _opt_rpc()) -> None:
    """Show token metadata, amount bounds and total supply."""
    _echo(_rpc_call(rpc, "lucky.getToken"))


@app.command("balance")
def cmd_balance(
    address: str = typer.Argument(..., help="0x-hex address."),
    rpc: str = _opt_rpc(),
) -> None:
    """Show the ledger balance of an address (base units)."""
    _echo(_rpc_call(rpc, "lucky.balanceOf", [{"address": address}]))


@app.command("request-mint")
def cmd_request_mint(
    recipient: str = typer.Argument(..., help="0x-hex address that will receive the mint."),
    rpc: str = _opt_rpc(),
) -> None:
    """
    Request a randomly sized mint.

    The node asks the oracle for one random word and records the returned
    handle; the amount is only known once the oracle calls back.
    """
    _echo(_rpc_call(rpc, "lucky.requestMint", [{"recipient": recipient}]))


@app.command("fulfill")
def cmd_fulfill(
    handle: str = typer.Option(..., "--handle", help="Request handle (decimal or 0x-hex)."),
    words: List[str] = typer.Option(..., "--word", "-w", help="Random word (decimal or 0x-hex); repeatable."),
    secret: str = typer.Option(
        ...,
        "--secret",
        envvar="LUCKY_ORACLE_CALLBACK_SECRET",
        help="Callback secret shared with the node; signs the request body.",
    ),
    rpc: str = _opt_rpc(),
) -> None:
    """Deliver an oracle callback for a pending handle."""
    res = _rpc_call(
        rpc,
        "lucky.fulfill",
        [{"handle": handle, "randomWords": list(words)}],
        secret=secret,
    )
    _echo(res)


@app.command("status")
def cmd_status(
    handle: str = typer.Argument(..., help="Request handle (decimal or 0x-hex)."),
    rpc: str = _opt_rpc(),
) -> None:
    """Show the request record for a handle."""
    res = _rpc_call(rpc, "lucky.getRequest", [{"handle": handle}])
    if res is None:
        typer.echo(f"no request with handle {handle}", err=True)
        raise typer.Exit(code=1)
    _echo(res)


@app.command("events")
def cmd_events(
    since: int = typer.Option(0, "--since", "-s", min=0, help="Return signals after this sequence number."),
    limit: int = typer.Option(100, "--limit", "-n", min=1, max=1000, help="Max number of signals."),
    rpc: str = _opt_rpc(),
) -> None:
    """List MintRequested / Minted signals, oldest first."""
    _echo(_rpc_call(rpc, "lucky.getEvents", [{"since": since, "limit": limit}]))


@app.command("serve")
def cmd_serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8650, "--port", "-p", help="Bind port."),
    config: Optional[str] = typer.Option(None, "--config", help="JSON/YAML config file (default: LUCKY_* env)."),
    stub_oracle: bool = typer.Option(False, "--stub-oracle", help="Use deterministic local handles instead of an oracle endpoint."),
) -> None:
    """Run a Lucky Token node."""
    from ..config import LuckyTokenConfig
    from ..rpc.app import serve

    try:
        cfg = LuckyTokenConfig.from_file(config) if config else LuckyTokenConfig.from_env()
    except (OSError, ValueError) as e:
        typer.echo(f"invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)
    serve(cfg, host=host, port=port, stub_oracle=stub_oracle)


def main(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover - thin wrapper
    """Entry-point for the `lucky` console script and `python -m lucky_token.cli`."""
    try:
        app(args=list(argv) if argv is not None else None, prog_name="lucky")
    except KeyboardInterrupt:
        typer.echo("", err=True)
        sys.exit(130)
