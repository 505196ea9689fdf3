import pytest

from lucky_token.config import LuckyTokenConfig, OracleConfig
from lucky_token.constants import CALLBACK_SIGNATURE, EV_MINT_REQUESTED, EV_MINTED
from lucky_token.errors import (AlreadyFulfilled, DuplicateHandle,
                                InvalidReceiver, LedgerError,
                                MalformedCallback, MintFailed,
                                OnlyTrustedOracle, RandomnessRequestFailed,
                                UnknownRequest)
from lucky_token.ledger import InMemoryLedger
from lucky_token.oracle import StubOracleAdapter
from lucky_token.orchestrator import build_orchestrator
from lucky_token.types import RandomnessRequest, RequestStatus

from .conftest import ALICE, BOB, MALLORY, ORACLE, RANGE_WIDTH, SUBSCRIPTION


def _counter(metrics, name, outcome):
    return getattr(metrics, name).labels(outcome=outcome)._value.get()


# ---------------------------------------------------------------------------
# request_mint
# ---------------------------------------------------------------------------


def test_request_mint_records_and_signals(make_orchestrator, metrics):
    orch, stub = make_orchestrator([42])
    handle = orch.request_mint(ALICE)

    assert handle == 42
    assert stub.requests == [RandomnessRequest(CALLBACK_SIGNATURE, 1, 3, SUBSCRIPTION)]
    assert orch.store.resolve(42) == bytes.fromhex(ALICE[2:])
    [sig] = orch.events.named(EV_MINT_REQUESTED)
    assert sig.fields == {"handle": 42, "recipient": ALICE}
    assert orch.total_supply() == 0
    assert _counter(metrics, "requests_total", "accepted") == 1


def test_request_mint_oracle_failure_changes_nothing(make_orchestrator, metrics):
    orch, stub = make_orchestrator()
    stub.fail_with = "coordinator unavailable"

    with pytest.raises(RandomnessRequestFailed):
        orch.request_mint(ALICE)

    assert orch.pending_requests() == []
    assert len(orch.events) == 0
    assert _counter(metrics, "requests_total", "oracle_failed") == 1


@pytest.mark.parametrize("bad", ["0x" + "00" * 20, "0x1234", "alice", b"\x01" * 3])
def test_request_mint_rejects_invalid_recipient_before_oracle(make_orchestrator, bad):
    orch, stub = make_orchestrator()
    with pytest.raises(InvalidReceiver):
        orch.request_mint(bad)
    assert stub.requests == []
    assert len(orch.events) == 0


def test_request_mint_duplicate_handle_from_oracle(make_orchestrator, metrics):
    orch, _ = make_orchestrator([5, 5])
    orch.request_mint(ALICE)
    with pytest.raises(DuplicateHandle):
        orch.request_mint(BOB)
    assert orch.store.resolve(5) == bytes.fromhex(ALICE[2:])
    assert len(orch.events.named(EV_MINT_REQUESTED)) == 1
    assert _counter(metrics, "requests_total", "duplicate") == 1


def test_many_outstanding_requests(make_orchestrator):
    orch, _ = make_orchestrator([1, 2, 3])
    for who in (ALICE, BOB, ALICE):
        orch.request_mint(who)
    assert [r.handle for r in orch.pending_requests()] == [1, 2, 3]
    orch.fulfill(ORACLE, 2, [0])
    assert [r.handle for r in orch.pending_requests()] == [1, 3]
    assert orch.balance_of(BOB) == 1


# ---------------------------------------------------------------------------
# fulfill
# ---------------------------------------------------------------------------


def test_scenario_handle_42(make_orchestrator):
    orch, _ = make_orchestrator([42])
    assert orch.request_mint(ALICE) == 42
    before = orch.balance_of(ALICE)

    outcome = orch.fulfill(ORACLE, 42, [12345])

    expected = (12345 % RANGE_WIDTH) + 1
    assert outcome.amount == expected == 12346
    assert orch.balance_of(ALICE) == before + expected
    assert orch.total_supply() == expected
    [minted] = orch.events.named(EV_MINTED)
    assert minted.fields == {"handle": 42, "recipient": ALICE, "amount": expected}
    rec = orch.get_request(42)
    assert rec.status is RequestStatus.FULFILLED
    assert rec.amount == expected


@pytest.mark.parametrize("word", [0, RANGE_WIDTH - 1, RANGE_WIDTH, RANGE_WIDTH + 5, 2**256 - 1])
def test_fulfilment_amount_is_derived(make_orchestrator, word):
    orch, _ = make_orchestrator([1])
    orch.request_mint(BOB)
    outcome = orch.fulfill(ORACLE, 1, [word])
    assert outcome.amount == word % RANGE_WIDTH + 1
    assert 1 <= outcome.amount <= RANGE_WIDTH
    assert orch.balance_of(BOB) == outcome.amount


def test_untrusted_caller_has_no_effect(make_orchestrator, metrics):
    orch, _ = make_orchestrator([42])
    orch.request_mint(ALICE)
    events_before = len(orch.events)

    with pytest.raises(OnlyTrustedOracle):
        orch.fulfill(MALLORY, 42, [12345])

    assert orch.store.resolve(42) is not None
    assert orch.balance_of(ALICE) == 0
    assert len(orch.events) == events_before
    assert _counter(metrics, "fulfillments_total", "unauthorized") == 1
    # the real oracle can still deliver afterwards
    assert orch.fulfill(ORACLE, 42, [1]).amount == 2


def test_untrusted_caller_rejected_even_for_unknown_handle(make_orchestrator):
    orch, _ = make_orchestrator()
    with pytest.raises(OnlyTrustedOracle):
        orch.fulfill(MALLORY, 999, [1])


def test_double_fulfilment_mints_once(make_orchestrator, metrics):
    orch, _ = make_orchestrator([42])
    orch.request_mint(ALICE)
    first = orch.fulfill(ORACLE, 42, [12345])

    with pytest.raises(AlreadyFulfilled):
        orch.fulfill(ORACLE, 42, [12345])

    assert orch.balance_of(ALICE) == first.amount
    assert len(orch.events.named(EV_MINTED)) == 1
    assert _counter(metrics, "fulfillments_total", "replayed") == 1


def test_unknown_handle(make_orchestrator, metrics):
    orch, _ = make_orchestrator()
    with pytest.raises(UnknownRequest) as ei:
        orch.fulfill(ORACLE, 7, [1])
    assert ei.value.handle == 7
    assert orch.total_supply() == 0
    assert _counter(metrics, "fulfillments_total", "unknown") == 1


@pytest.mark.parametrize("words", [[], [1, 2], "1", None, [-1], ["12"], [1.0]])
def test_malformed_randomness_values(make_orchestrator, words):
    orch, _ = make_orchestrator([42])
    orch.request_mint(ALICE)
    with pytest.raises(MalformedCallback):
        orch.fulfill(ORACLE, 42, words)
    assert orch.get_request(42).is_pending
    assert orch.balance_of(ALICE) == 0


@pytest.mark.parametrize("handle", [-1, 2**256, "42", None, True])
def test_malformed_handle(make_orchestrator, handle):
    orch, _ = make_orchestrator([42])
    orch.request_mint(ALICE)
    with pytest.raises(MalformedCallback):
        orch.fulfill(ORACLE, handle, [1])


class _RefusingLedger(InMemoryLedger):
    def mint(self, recipient, amount):
        raise LedgerError("ledger paused")


def test_ledger_refusal_rolls_back(make_orchestrator, metrics):
    orch, _ = make_orchestrator([42], ledger=_RefusingLedger())
    orch.request_mint(ALICE)

    with pytest.raises(MintFailed) as ei:
        orch.fulfill(ORACLE, 42, [12345])

    assert isinstance(ei.value.__cause__, LedgerError)
    assert ei.value.amount == 12346
    assert orch.get_request(42).is_pending
    assert orch.events.named(EV_MINTED) == []
    assert _counter(metrics, "fulfillments_total", "mint_failed") == 1


def test_ledger_refusal_rolls_back_on_sqlite(make_orchestrator, tmp_path):
    orch, _ = make_orchestrator([42], ledger=_RefusingLedger(), pending_uri=f"sqlite://{tmp_path / 'p.db'}")
    orch.request_mint(ALICE)
    with pytest.raises(MintFailed):
        orch.fulfill(ORACLE, 42, [1])
    assert orch.store.resolve(42) is not None


def test_raising_listener_does_not_break_single_mint(make_orchestrator, metrics):
    orch, _ = make_orchestrator([42])
    orch.request_mint(ALICE)

    def on_signal(sig):
        if sig.name == EV_MINTED:
            raise RuntimeError("subscriber crashed")

    orch.events.subscribe(on_signal)
    first = orch.fulfill(ORACLE, 42, [0])

    assert first.amount == 1
    assert not orch.get_request(42).is_pending
    with pytest.raises(AlreadyFulfilled):
        orch.fulfill(ORACLE, 42, [0])

    assert orch.balance_of(ALICE) == 1
    assert len(orch.events.named(EV_MINTED)) == 1
    assert _counter(metrics, "fulfillments_total", "minted") == 1


# ---------------------------------------------------------------------------
# views & wiring
# ---------------------------------------------------------------------------


def test_token_metadata(make_orchestrator):
    orch, _ = make_orchestrator()
    assert orch.token_metadata() == {
        "name": "Lucky Token",
        "symbol": "LCK",
        "decimals": 18,
        "minAmount": 1,
        "maxAmount": RANGE_WIDTH,
        "totalSupply": 0,
        "oracle": ORACLE,
        "subscriptionId": SUBSCRIPTION,
    }


def test_build_orchestrator_requires_endpoint_or_adapter(metrics):
    cfg = LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE, subscription_id=SUBSCRIPTION))
    with pytest.raises(ValueError):
        build_orchestrator(cfg, metrics=metrics)

    orch = build_orchestrator(cfg, adapter=StubOracleAdapter([3]), metrics=metrics)
    assert orch.request_mint(ALICE) == 3


def test_invalid_config_is_rejected(metrics):
    cfg = LuckyTokenConfig(oracle=OracleConfig(identity="0x" + "00" * 20))
    with pytest.raises(ValueError):
        build_orchestrator(cfg, adapter=StubOracleAdapter(), metrics=metrics)
