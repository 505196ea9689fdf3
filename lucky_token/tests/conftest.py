from __future__ import annotations

from typing import Iterable, Optional

import pytest
from prometheus_client import CollectorRegistry

from lucky_token.config import LuckyTokenConfig, OracleConfig, StorageConfig
from lucky_token.events import EventLog
from lucky_token.ledger import InMemoryLedger, Ledger
from lucky_token.metrics import Metrics
from lucky_token.oracle import RandomnessClient, StubOracleAdapter
from lucky_token.orchestrator import RequestOrchestrator
from lucky_token.store import open_kv
from lucky_token.store.pending import PendingRequestStore

ORACLE = "0x" + "11" * 20
ALICE = "0x" + "22" * 20
BOB = "0x" + "33" * 20
MALLORY = "0x" + "44" * 20
SUBSCRIPTION = 7
SECRET = "oracle-callback-secret"

RANGE_WIDTH = 1000 * 10**18


@pytest.fixture
def metrics() -> Metrics:
    return Metrics(registry=CollectorRegistry())


@pytest.fixture
def config() -> LuckyTokenConfig:
    return LuckyTokenConfig(
        oracle=OracleConfig(identity=ORACLE, subscription_id=SUBSCRIPTION, callback_secret=SECRET),
    )


@pytest.fixture
def make_orchestrator(config: LuckyTokenConfig, metrics: Metrics):
    """
    Factory for an orchestrator over a stub oracle, in-memory ledger and the
    given pending store URI. Returns (orchestrator, stub adapter).
    """

    def _make(
        handles: Optional[Iterable[int]] = None,
        *,
        ledger: Optional[Ledger] = None,
        pending_uri: str = "memory://",
    ):
        adapter = StubOracleAdapter(handles)
        cfg = LuckyTokenConfig(
            oracle=config.oracle,
            token=config.token,
            storage=StorageConfig(pending_uri=pending_uri),
        )
        orch = RequestOrchestrator(
            cfg,
            client=RandomnessClient(adapter, metrics=metrics),
            store=PendingRequestStore(open_kv(pending_uri)),
            ledger=ledger if ledger is not None else InMemoryLedger(),
            events=EventLog(),
            metrics=metrics,
        )
        return orch, adapter

    return _make
