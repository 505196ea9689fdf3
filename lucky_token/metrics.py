"""
Prometheus metrics for the Lucky Token pipeline.

Counters and histograms for the two entry points:
  • requests_total        - mint requests per outcome
  • fulfillments_total    - oracle callbacks per outcome
  • minted_amount_tokens  - derived amounts, in whole tokens
  • oracle_request_seconds - latency of the outbound oracle request

Label cardinality is kept low: only an `outcome` label with a small, finite
vocabulary. Handles and addresses never become labels.

Usage
-----
    from lucky_token.metrics import METRICS

    METRICS.record_request("accepted")
    with METRICS.oracle_timer():
        handle = adapter.request(req)
    METRICS.observe_minted(amount, decimals=18)
"""

from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter
from typing import Iterable

from prometheus_client import REGISTRY, Counter, Histogram

# --------- Vocabularies (kept small for bounded cardinality) ---------

_REQUEST_OUTCOMES = (
    "accepted",        # handle obtained and recorded
    "oracle_failed",   # oracle request call failed
    "duplicate",       # oracle returned a handle we already know
    "invalid",         # bad recipient / malformed input
)

_FULFILL_OUTCOMES = (
    "minted",          # amount derived and minted
    "unauthorized",    # caller is not the trusted oracle
    "unknown",         # no request recorded for the handle
    "replayed",        # handle already fulfilled
    "malformed",       # wrong number / type of random words
    "mint_failed",     # ledger refused the mint
)

# --------- Default histogram buckets ---------

_AMOUNT_BUCKETS = (1.0, 10.0, 50.0, 100.0, 250.0, 500.0, 750.0, 1000.0)

_ORACLE_LATENCY_BUCKETS = (
    0.005, 0.01, 0.025, 0.05,
    0.1, 0.25, 0.5,
    1.0, 2.5, 5.0, 10.0,
)


class Metrics:
    """
    Container for all Lucky Token Prometheus instruments.

    Args:
        namespace: Prometheus metric namespace (prefix).
        subsystem: Prometheus metric subsystem.
        registry:  Prometheus registry to register the metrics with.
    """

    def __init__(
        self,
        *,
        namespace: str = "lucky",
        subsystem: str = "token",
        registry=REGISTRY,
        amount_buckets: Iterable[float] = _AMOUNT_BUCKETS,
        latency_buckets: Iterable[float] = _ORACLE_LATENCY_BUCKETS,
    ) -> None:
        self.requests_total = Counter(
            "requests_total",
            "Mint requests processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.fulfillments_total = Counter(
            "fulfillments_total",
            "Oracle callbacks processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.minted_amount_tokens = Histogram(
            "minted_amount_tokens",
            "Derived mint amounts, in whole tokens.",
            buckets=tuple(amount_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.oracle_request_seconds = Histogram(
            "oracle_request_seconds",
            "Time spent issuing randomness requests to the oracle (seconds).",
            buckets=tuple(latency_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    # ----- Recording helpers -------------------------------------------------

    def record_request(self, outcome: str) -> None:
        if outcome not in _REQUEST_OUTCOMES:
            outcome = "invalid"
        self.requests_total.labels(outcome=outcome).inc()

    def record_fulfillment(self, outcome: str) -> None:
        if outcome not in _FULFILL_OUTCOMES:
            outcome = "malformed"
        self.fulfillments_total.labels(outcome=outcome).inc()

    def observe_minted(self, amount: int, *, decimals: int) -> None:
        """Record a minted amount given in base units."""
        self.minted_amount_tokens.observe(amount / float(10 ** decimals))

    # ----- Context managers --------------------------------------------------

    @contextmanager
    def oracle_timer(self):
        """
        Time an outbound oracle request.

            with METRICS.oracle_timer():
                adapter.request(req)
        """
        start = perf_counter()
        try:
            yield
        finally:
            self.oracle_request_seconds.observe(perf_counter() - start)


# Singleton used by most components
METRICS = Metrics()

__all__ = [
    "Metrics",
    "METRICS",
    "_REQUEST_OUTCOMES",
    "_FULFILL_OUTCOMES",
]
