import pytest

from lucky_token.errors import OnlyTrustedOracle
from lucky_token.gate import TrustedCallerGate

from .conftest import MALLORY, ORACLE


def test_trusted_oracle_passes():
    gate = TrustedCallerGate(ORACLE)
    gate.authorize(ORACLE)
    gate.authorize(ORACLE.upper().replace("0X", "0x"))
    gate.authorize(bytes.fromhex(ORACLE[2:]))
    assert gate.is_trusted(ORACLE)


def test_other_caller_rejected():
    gate = TrustedCallerGate(ORACLE)
    with pytest.raises(OnlyTrustedOracle) as ei:
        gate.authorize(MALLORY)
    assert ei.value.caller == MALLORY


@pytest.mark.parametrize("caller", ["", "0x1234", "not-an-address", 42])
def test_garbage_caller_is_untrusted(caller):
    gate = TrustedCallerGate(ORACLE)
    assert gate.is_trusted(caller) is False
    with pytest.raises(OnlyTrustedOracle):
        gate.authorize(caller)


def test_identity_must_be_an_address():
    with pytest.raises(ValueError):
        TrustedCallerGate("0xdead")
