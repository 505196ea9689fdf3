import json

import pytest

from lucky_token.config import LuckyTokenConfig, OracleConfig, StorageConfig, TokenConfig

from .conftest import ORACLE


def test_defaults_need_an_oracle_identity():
    with pytest.raises(ValueError):
        LuckyTokenConfig().validate()


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LUCKY_ORACLE_IDENTITY", ORACLE)
    monkeypatch.setenv("LUCKY_ORACLE_SUBSCRIPTION_ID", "0x10")
    monkeypatch.setenv("LUCKY_ORACLE_ENDPOINT", "http://127.0.0.1:8645/rpc")
    monkeypatch.setenv("LUCKY_ORACLE_CONFIRMATIONS", "5")
    monkeypatch.setenv("LUCKY_TOKEN_DECIMALS", "6")
    monkeypatch.setenv("LUCKY_TOKEN_MAX_WHOLE", "10")
    monkeypatch.setenv("LUCKY_STORE_PENDING", f"sqlite://{tmp_path / 'p.db'}")
    monkeypatch.setenv("LUCKY_LOG_LEVEL", "debug")
    monkeypatch.setenv("LUCKY_ORACLE_CALLBACK_SECRET", "s3cret")

    cfg = LuckyTokenConfig.from_env()

    assert cfg.oracle.identity == ORACLE
    assert cfg.oracle.subscription_id == 16
    assert cfg.oracle.confirmations == 5
    assert cfg.token.range_width == 10 * 10**6
    assert cfg.storage.sqlite_path() == str(tmp_path / "p.db")
    assert cfg.oracle.callback_secret == "s3cret"
    assert cfg.to_dict()["token"]["range_width"] == 10_000_000
    assert cfg.to_dict()["oracle"]["callback_secret"] == "***"
    assert "s3cret" not in repr(cfg)


def test_from_env_bad_number(monkeypatch):
    monkeypatch.setenv("LUCKY_ORACLE_IDENTITY", ORACLE)
    monkeypatch.setenv("LUCKY_TOKEN_DECIMALS", "eighteen")
    with pytest.raises(ValueError, match="LUCKY_TOKEN_DECIMALS"):
        LuckyTokenConfig.from_env()


def test_from_json_file(tmp_path):
    p = tmp_path / "lucky.json"
    p.write_text(json.dumps({
        "oracle": {"identity": ORACLE, "subscription_id": 7, "confirmations": 1},
        "token": {"max_whole_tokens": 5},
        "log_level": "WARNING",
    }))
    cfg = LuckyTokenConfig.from_file(str(p))
    assert cfg.oracle.subscription_id == 7
    assert cfg.token.range_width == 5 * 10**18
    assert cfg.storage.pending_uri == "memory://"
    assert cfg.log_level == "WARNING"


def test_from_yaml_file(tmp_path):
    pytest.importorskip("yaml")
    p = tmp_path / "lucky.yaml"
    p.write_text(
        "oracle:\n"
        f"  identity: \"{ORACLE}\"\n"
        "  subscription_id: 9\n"
        "  endpoint: https://oracle.example/rpc\n"
        "token:\n"
        "  decimals: 0\n"
        "  max_whole_tokens: 100\n"
    )
    cfg = LuckyTokenConfig.from_file(str(p))
    assert cfg.oracle.endpoint == "https://oracle.example/rpc"
    assert cfg.token.range_width == 100


@pytest.mark.parametrize(
    "cfg",
    [
        LuckyTokenConfig(oracle=OracleConfig(identity="0xnothex")),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE, endpoint="ftp://oracle")),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE, confirmations=-1)),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE, subscription_id=-1)),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE, callback_secret="")),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE), token=TokenConfig(decimals=99)),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE), token=TokenConfig(max_whole_tokens=0)),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE), storage=StorageConfig(pending_uri="redis://x")),
        LuckyTokenConfig(oracle=OracleConfig(identity=ORACLE), log_level="LOUD"),
    ],
)
def test_validation_errors(cfg):
    with pytest.raises(ValueError):
        cfg.validate()
