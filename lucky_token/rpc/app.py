"""
FastAPI application factory for a standalone Lucky Token node.

    create_app(config)  → FastAPI with
        /lucky/*   REST endpoints
        /rpc       JSON-RPC 2.0
        /metrics   Prometheus exposition
        /healthz   liveness
        /version   package version

`serve()` runs the app under uvicorn (imported lazily so the package stays
importable without it).
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from ..config import LuckyTokenConfig
from ..oracle import OracleAdapter, StubOracleAdapter
from ..orchestrator import RequestOrchestrator, build_orchestrator
from ..service import LuckyTokenService
from ..version import __version__
from .mount import mount_lucky_rpc

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def create_app(
    config: Optional[LuckyTokenConfig] = None,
    *,
    orchestrator: Optional[RequestOrchestrator] = None,
    adapter: Optional[OracleAdapter] = None,
) -> FastAPI:
    """
    Build the app. Without an explicit orchestrator one is wired from config
    (HTTP oracle adapter from `oracle.endpoint` unless `adapter` is given).
    """
    cfg = config or (orchestrator.config if orchestrator is not None else LuckyTokenConfig.from_env())

    # Basic logging if caller hasn't configured it
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, cfg.log_level.upper(), logging.INFO),
            format=LOG_FORMAT,
        )

    orch = orchestrator or build_orchestrator(cfg, adapter=adapter)
    service = LuckyTokenService(orch)

    app = FastAPI(title="Lucky Token", version=__version__)
    app.state.orchestrator = orch
    app.state.service = service

    mount_lucky_rpc(app, service=service)

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"ok": True}

    @app.get("/version")
    async def version() -> dict:
        return {"version": __version__}

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    log.info(
        "lucky token app ready oracle=%s subscription=%d store=%s",
        cfg.oracle.identity,
        cfg.oracle.subscription_id,
        cfg.storage.pending_uri,
    )
    return app


def serve(
    config: Optional[LuckyTokenConfig] = None,
    *,
    host: str = "127.0.0.1",
    port: int = 8650,
    stub_oracle: bool = False,
) -> None:
    cfg = config or LuckyTokenConfig.from_env()
    app = create_app(cfg, adapter=StubOracleAdapter() if stub_oracle else None)
    # Lazy import uvicorn so the module is importable in tests without uvicorn installed
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level=cfg.log_level.lower(), workers=1)


__all__ = ["create_app", "serve", "LOG_FORMAT"]
