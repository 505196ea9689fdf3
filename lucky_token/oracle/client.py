"""
Randomness client: issues one oracle request and returns its handle.

There is no retry here. A failed request surfaces as RandomnessRequestFailed
and the caller decides whether to try again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..errors import RandomnessRequestFailed
from ..metrics import METRICS, Metrics
from ..types.core import RandomnessRequest, RequestHandle, SubscriptionId, to_handle

if TYPE_CHECKING:  # pragma: no cover
    from . import OracleAdapter

log = logging.getLogger(__name__)


class RandomnessClient:
    def __init__(self, adapter: "OracleAdapter", *, metrics: Optional[Metrics] = None) -> None:
        self.adapter = adapter
        self.metrics = metrics or METRICS

    def request(
        self,
        callback_signature: str,
        num_words: int,
        confirmations: int,
        subscription: SubscriptionId,
    ) -> RequestHandle:
        try:
            req = RandomnessRequest(
                callback_signature=callback_signature,
                num_words=num_words,
                confirmations=confirmations,
                subscription=subscription,
            )
        except (TypeError, ValueError) as e:
            raise RandomnessRequestFailed(reason=f"bad-request: {e}") from e

        try:
            with self.metrics.oracle_timer():
                raw = self.adapter.request(req)
        except Exception as e:
            log.warning("oracle request failed: %s", e)
            raise RandomnessRequestFailed(reason=str(e) or type(e).__name__) from e

        try:
            handle = to_handle(raw)
        except (TypeError, ValueError) as e:
            log.warning("oracle returned an invalid handle: %r", raw)
            raise RandomnessRequestFailed(reason=f"bad-handle: {raw!r}") from e

        log.info("randomness requested handle=%d subscription=%d", handle, int(subscription))
        return handle


__all__ = ["RandomnessClient"]
