"""Object store scanning and window filtering (core domain).

Submission keys look like::

    <network>/submissions/<YYYY-MM-DD>/<YYYY-MM-DDTHH:MM:SSZ>-<submitter>.json

The timestamp sits at a fixed offset right after the date prefix, so keys are
filtered without fetching any object bodies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from core.errors import KeyFormatError, StoreAccessError
from core.models import ScannedKey, TimeWindow
from core.ports import ObjectStorePort

LOGGER = logging.getLogger(__name__)

KEY_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
KEY_TIMESTAMP_LENGTH = len("2024-01-01T00:00:00Z")


def parse_key_timestamp(key: str, prefix: str) -> datetime:
    """Return the submission time embedded in a key under `prefix`."""

    if key[len(prefix) : len(prefix) + 1] != "/":
        raise KeyFormatError(key, f"expected '/' after partition prefix {prefix!r}")
    offset = len(prefix) + 1
    raw = key[offset : offset + KEY_TIMESTAMP_LENGTH]
    if len(raw) < KEY_TIMESTAMP_LENGTH:
        raise KeyFormatError(key, f"expected a {KEY_TIMESTAMP_LENGTH}-character timestamp at offset {offset}")
    try:
        parsed = datetime.strptime(raw, KEY_TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise KeyFormatError(key, f"timestamp {raw!r} is not RFC3339 UTC") from exc
    return parsed.replace(tzinfo=timezone.utc)


class ObjectStoreScanner:
    """Lists a date partition and keeps the keys inside the run window."""

    def __init__(self, store: ObjectStorePort, logger: Optional[logging.Logger] = None) -> None:
        self._store = store
        self._log = logger or LOGGER

    def list_all(self, prefix: str) -> list[str]:
        """Return every key under the prefix, following all listing pages."""

        keys: list[str] = []
        seen_tokens: set[str] = set()
        token: Optional[str] = None
        pages = 0
        while True:
            page = self._store.list_page(prefix, token)
            pages += 1
            keys.extend(page.keys)
            token = page.next_token
            if not token:
                break
            # A store that hands back a token twice would keep us listing forever.
            if token in seen_tokens:
                raise StoreAccessError(f"Listing of {prefix!r} repeated continuation token {token!r}")
            seen_tokens.add(token)
        self._log.debug("Listed %s keys under %s in %s page(s)", len(keys), prefix, pages)
        return keys

    def scan(
        self,
        prefix: str,
        window: TimeWindow,
        on_malformed: Optional[Callable[[KeyFormatError], None]] = None,
    ) -> list[ScannedKey]:
        """Return keys under the prefix whose timestamp is inside the window.

        Malformed keys raise KeyFormatError unless `on_malformed` is given, in
        which case it receives the error and the key is left out.
        """

        selected: list[ScannedKey] = []
        for key in self.list_all(prefix):
            if not key.startswith(prefix):
                continue
            try:
                timestamp = parse_key_timestamp(key, prefix)
            except KeyFormatError as exc:
                if on_malformed is None:
                    raise
                on_malformed(exc)
                continue
            if window.contains(timestamp):
                selected.append(ScannedKey(key=key, timestamp=timestamp))

        self._log.info(
            "%s submission(s) under %s fall inside %s .. %s",
            len(selected),
            prefix,
            window.start.isoformat(),
            window.end.isoformat(),
        )
        return selected
