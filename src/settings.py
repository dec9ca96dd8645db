"""Static configuration for the uptime analyzer.

Run settings (network, bucket, window, error policy, logging) live in a
single JSON file; anything deployment-specific can be overridden from the
environment or a .env file without touching Python.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from core.config import AnalyzerConfig, ErrorPolicy, RunConfig
from core.errors import ConfigError

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Default config location; ANALYZER_CONFIG points elsewhere.
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")

# Where to store the SQLite database holding the execution marker.
DB_PATH = os.path.join(PROJECT_ROOT, "analyzer.db")


@dataclass(frozen=True)
class StoreSettings:
    """Client-side limits applied to every S3 call."""

    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    max_attempts: int = 5
    page_size: Optional[int] = None


@dataclass(frozen=True)
class Settings:
    run: RunConfig
    analyzer: AnalyzerConfig
    store: StoreSettings
    db_path: str
    logging: dict[str, Any] = field(default_factory=dict)


def _load_json_config(path: str) -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as handle:
            config = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(config, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return config


def _require(value: Any, name: str) -> str:
    if value is None or not str(value).strip():
        raise ConfigError(f"Missing required setting: {name}")
    return str(value).strip()


def _positive_number(value: Any, name: str, cast=float):
    try:
        number = cast(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


def _error_policy(value: Any) -> ErrorPolicy:
    try:
        return ErrorPolicy(str(value).lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in ErrorPolicy)
        raise ConfigError(f"analyzer.error_policy must be one of {allowed}, got {value!r}") from exc


def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build Settings from config.json plus environment overrides.

    Environment wins over the file for NETWORK_NAME, AWS_REGION and
    AWS_S3_BUCKET so one config can serve several deployments. Credentials
    are left to the standard AWS chain.
    """

    if environ is None:
        load_dotenv()
        environ = os.environ

    path = config_path or environ.get("ANALYZER_CONFIG") or CONFIG_PATH
    config = _load_json_config(path)

    aws = config.get("aws", {})
    run = RunConfig(
        network_name=_require(environ.get("NETWORK_NAME") or config.get("network_name"), "network_name"),
        region=_require(environ.get("AWS_REGION") or aws.get("region"), "aws.region"),
        bucket=_require(environ.get("AWS_S3_BUCKET") or aws.get("bucket"), "aws.bucket"),
    )

    # Lookback only matters for the very first run or after the marker is lost.
    analyzer_cfg = config.get("analyzer", {})
    lookback_hours = _positive_number(analyzer_cfg.get("lookback_hours", 12), "analyzer.lookback_hours")
    analyzer = AnalyzerConfig(
        lookback=timedelta(hours=lookback_hours),
        error_policy=_error_policy(analyzer_cfg.get("error_policy", ErrorPolicy.ABORT.value)),
    )

    page_size = aws.get("page_size")
    store = StoreSettings(
        connect_timeout=_positive_number(aws.get("connect_timeout", 10), "aws.connect_timeout"),
        read_timeout=_positive_number(aws.get("read_timeout", 30), "aws.read_timeout"),
        max_attempts=_positive_number(aws.get("max_attempts", 5), "aws.max_attempts", cast=int),
        page_size=_positive_number(page_size, "aws.page_size", cast=int) if page_size is not None else None,
    )

    db_path = config.get("db_path") or DB_PATH
    if not os.path.isabs(db_path):
        db_path = os.path.join(PROJECT_ROOT, db_path)

    return Settings(
        run=run,
        analyzer=analyzer,
        store=store,
        db_path=db_path,
        logging=config.get("logging", {}),
    )
