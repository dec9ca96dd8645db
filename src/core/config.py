"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


class ErrorPolicy(str, Enum):
    """What a run does with a key it cannot fetch, parse, or decode."""

    ABORT = "abort"
    SKIP = "skip"


@dataclass(frozen=True)
class RunConfig:
    """Which network's submissions to audit and where they live."""

    network_name: str
    region: str
    bucket: str


@dataclass(frozen=True)
class AnalyzerConfig:
    """Windowing and failure handling for a single run."""

    lookback: timedelta = timedelta(hours=12)
    error_policy: ErrorPolicy = ErrorPolicy.ABORT
