"""Identity resolution and deduplication helpers (core domain)."""

from __future__ import annotations

import hashlib
from typing import Iterator, Optional

from core.models import Identity

# Base58 public keys and IP addresses never contain a dash.
IDENTITY_SEPARATOR = "-"


def compute_identity_id(public_key: str, public_ip: str) -> str:
    """Return the stable hex id for a (public key, IP) pair.

    MD5 is only a dedup key here, so ids stay comparable with registries
    produced by earlier tooling.
    """

    payload = f"{public_key}{IDENTITY_SEPARATOR}{public_ip}"
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def resolve_identity(public_key: str, public_ip: str) -> Identity:
    return Identity(
        id=compute_identity_id(public_key, public_ip),
        public_key=public_key,
        public_ip=public_ip,
    )


class IdentityRegistry:
    """Per-run mapping of identity id to Identity, first write wins."""

    def __init__(self) -> None:
        self._identities: dict[str, Identity] = {}

    def register(self, identity: Identity) -> bool:
        """Insert the identity unless its id is already present.

        Returns True when the registry grew.
        """

        if identity.id in self._identities:
            return False
        self._identities[identity.id] = identity
        return True

    def get(self, identity_id: str) -> Optional[Identity]:
        return self._identities.get(identity_id)

    def identities(self) -> list[Identity]:
        return list(self._identities.values())

    def as_dict(self) -> dict[str, dict[str, str]]:
        return {identity_id: identity.as_dict() for identity_id, identity in self._identities.items()}

    def __contains__(self, identity_id: object) -> bool:
        return identity_id in self._identities

    def __iter__(self) -> Iterator[Identity]:
        return iter(self._identities.values())

    def __len__(self) -> int:
        return len(self._identities)
