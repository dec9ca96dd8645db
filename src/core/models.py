"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any store-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from core.identity import IdentityRegistry


@dataclass(frozen=True)
class TimeWindow:
    """Open interval of submission times covered by one run."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Window start {self.start} must be before end {self.end}")

    def contains(self, moment: datetime) -> bool:
        # Both bounds are exclusive, a submission exactly on a run boundary
        # belongs to neither run.
        return self.start < moment < self.end


@dataclass(frozen=True)
class ObjectPage:
    """One page of an object listing."""

    keys: list[str]
    next_token: Optional[str] = None


@dataclass(frozen=True)
class ScannedKey:
    """A listed key whose embedded timestamp falls inside the run window."""

    key: str
    timestamp: datetime


@dataclass(frozen=True)
class SubmissionRecord:
    """Decoded uptime submission."""

    key: str
    timestamp: datetime
    submitter: str
    remote_addr: str
    peer_id: Optional[str] = None
    block_hash: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Identity:
    """Deduplicated submitter, keyed by a hash of public key and IP."""

    id: str
    public_key: str
    public_ip: str

    def as_dict(self) -> dict[str, str]:
        return {"id": self.id, "public-key": self.public_key, "public-ip": self.public_ip}


@dataclass(frozen=True)
class SkippedKey:
    """A key the run gave up on under the skip policy."""

    key: str
    error: str


@dataclass
class AnalysisResult:
    """Everything a single analyzer run produced."""

    window: TimeWindow
    registry: IdentityRegistry
    submissions: list[SubmissionRecord] = field(default_factory=list)
    skipped: list[SkippedKey] = field(default_factory=list)
