"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the object store, the execution
marker, and the identity sheet so that the core can be reused with
different backends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Protocol

from core.models import Identity, ObjectPage


class ObjectStorePort(Protocol):
    """Read access to the submissions bucket."""

    def list_page(self, prefix: str, continuation_token: Optional[str] = None) -> ObjectPage:
        ...

    def get_object(self, key: str) -> bytes:
        ...


class ExecutionMarkerPort(Protocol):
    """Persistence of the time the last successful run ended."""

    def read(self) -> Optional[datetime]:
        ...

    def write(self, executed_at: datetime) -> None:
        ...


class IdentitySinkPort(Protocol):
    """Tabular destination keyed by identity id."""

    def upsert_row(self, identity: Identity, metrics: Mapping[str, object]) -> None:
        ...
