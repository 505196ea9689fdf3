import pytest

from lucky_token.constants import EV_MINT_REQUESTED, EV_MINTED
from lucky_token.errors import InvalidReceiver, MintFailed
from lucky_token.events import EventLog
from lucky_token.ledger import InMemoryLedger
from lucky_token.mint import MintEffector
from lucky_token.types import to_address

from .conftest import ALICE


def test_event_log_sequence_and_paging():
    log = EventLog()
    for i in range(5):
        log.emit("X", {"i": i})
    assert [s.seq for s in log.since(0)] == [1, 2, 3, 4, 5]
    assert [s.fields["i"] for s in log.since(3)] == [3, 4]
    assert len(log.since(0, limit=2)) == 2
    assert log.since(5) == []


def test_subscribe_and_unsubscribe():
    log = EventLog()
    seen = []
    unsubscribe = log.subscribe(seen.append)
    log.emit("A", {})
    unsubscribe()
    log.emit("B", {})
    assert [s.name for s in seen] == ["A"]


def test_effector_mints_and_signals():
    ledger, log = InMemoryLedger(), EventLog()
    eff = MintEffector(ledger, log)
    eff.announce_request(7, to_address(ALICE))
    outcome = eff.apply(7, to_address(ALICE), 500)

    assert outcome.amount == 500
    assert ledger.balance_of(to_address(ALICE)) == 500
    assert [s.name for s in log.since(0)] == [EV_MINT_REQUESTED]

    eff.announce_minted(outcome)
    assert [s.name for s in log.since(0)] == [EV_MINT_REQUESTED, EV_MINTED]
    assert log.named(EV_MINTED)[0].to_dict() == {
        "seq": 2,
        "name": EV_MINTED,
        "fields": {"handle": 7, "recipient": ALICE, "amount": 500},
    }


def test_effector_wraps_ledger_errors():
    ledger, log = InMemoryLedger(), EventLog()
    eff = MintEffector(ledger, log)
    zero = to_address("0x" + "00" * 20)
    with pytest.raises(MintFailed) as ei:
        eff.apply(1, zero, 10)
    assert isinstance(ei.value.__cause__, InvalidReceiver)
    assert len(log) == 0
    assert ledger.total_supply() == 0


def test_failing_listener_is_isolated(caplog):
    log = EventLog()
    seen = []

    def boom(sig):
        raise RuntimeError("listener down")

    log.subscribe(boom)
    log.subscribe(seen.append)
    with caplog.at_level("ERROR", logger="lucky_token.events"):
        sig = log.emit("A", {"x": 1})

    assert sig.seq == 1
    assert [s.name for s in seen] == ["A"]
    assert len(log) == 1
    assert "listener" in caplog.text
