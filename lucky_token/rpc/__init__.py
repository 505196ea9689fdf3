"""
lucky_token.rpc
===============

HTTP surfaces for the token: REST router, JSON-RPC method table and
dispatcher, and a standalone FastAPI app factory.
"""

from ..auth import SIGNATURE_HEADER
from .app import create_app, serve
from .jsonrpc import dispatch
from .methods import RPC_METHODS
from .mount import get_router, mount_lucky_rpc

__all__ = [
    "create_app",
    "serve",
    "dispatch",
    "get_router",
    "mount_lucky_rpc",
    "RPC_METHODS",
    "SIGNATURE_HEADER",
]
