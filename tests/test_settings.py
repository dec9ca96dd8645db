from __future__ import annotations

import json
from datetime import timedelta

import pytest

from core.config import ErrorPolicy
from core.errors import ConfigError
from settings import load_settings


def _write_config(tmp_path, payload: dict) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_loads_config_file(tmp_path) -> None:
    path = _write_config(
        tmp_path,
        {
            "network_name": "testnet",
            "aws": {"region": "us-west-2", "bucket": "uptime", "max_attempts": 3, "page_size": 500},
            "analyzer": {"lookback_hours": 6, "error_policy": "skip"},
            "db_path": str(tmp_path / "state.db"),
        },
    )

    settings = load_settings(path, environ={})

    assert settings.run.network_name == "testnet"
    assert settings.run.region == "us-west-2"
    assert settings.run.bucket == "uptime"
    assert settings.analyzer.lookback == timedelta(hours=6)
    assert settings.analyzer.error_policy is ErrorPolicy.SKIP
    assert settings.store.max_attempts == 3
    assert settings.store.page_size == 500
    assert settings.db_path == str(tmp_path / "state.db")


def test_environment_overrides_file(tmp_path) -> None:
    path = _write_config(tmp_path, {"network_name": "testnet", "aws": {"region": "us-west-2", "bucket": "a"}})
    settings = load_settings(
        path,
        environ={"NETWORK_NAME": "mainnet", "AWS_REGION": "eu-west-1", "AWS_S3_BUCKET": "b"},
    )
    assert settings.run.network_name == "mainnet"
    assert settings.run.region == "eu-west-1"
    assert settings.run.bucket == "b"
    assert settings.analyzer.error_policy is ErrorPolicy.ABORT
    assert settings.analyzer.lookback == timedelta(hours=12)


def test_config_path_from_environment(tmp_path) -> None:
    path = _write_config(tmp_path, {"network_name": "testnet", "aws": {"region": "r", "bucket": "b"}})
    settings = load_settings(environ={"ANALYZER_CONFIG": path})
    assert settings.run.network_name == "testnet"


@pytest.mark.parametrize(
    "payload",
    [
        {"aws": {"region": "r", "bucket": "b"}},
        {"network_name": "n", "aws": {"bucket": "b"}},
        {"network_name": "n", "aws": {"region": "r", "bucket": "  "}},
        {"network_name": "n", "aws": {"region": "r", "bucket": "b"}, "analyzer": {"lookback_hours": 0}},
        {"network_name": "n", "aws": {"region": "r", "bucket": "b"}, "analyzer": {"error_policy": "retry"}},
        {"network_name": "n", "aws": {"region": "r", "bucket": "b", "read_timeout": "slow"}},
    ],
)
def test_invalid_settings_raise_config_error(tmp_path, payload: dict) -> None:
    with pytest.raises(ConfigError):
        load_settings(_write_config(tmp_path, payload), environ={})


def test_missing_config_file_raises_config_error(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_settings(str(tmp_path / "nope.json"), environ={})
