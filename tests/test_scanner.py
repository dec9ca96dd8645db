from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytest

from core.errors import KeyFormatError, StoreAccessError
from core.models import ObjectPage, TimeWindow
from core.scanner import ObjectStoreScanner, parse_key_timestamp

PREFIX = "testnet/submissions/2024-01-01"
WINDOW = TimeWindow(
    start=datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc),
    end=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
)


def _key(timestamp: str, submitter: str = "B62qabc") -> str:
    return f"{PREFIX}/{timestamp}-{submitter}.json"


class PagedStore:
    def __init__(self, pages: list[list[str]]) -> None:
        self._pages = pages
        self.calls: list[tuple[str, Optional[str]]] = []

    def list_page(self, prefix: str, continuation_token: Optional[str] = None) -> ObjectPage:
        self.calls.append((prefix, continuation_token))
        index = int(continuation_token) if continuation_token else 0
        next_token = str(index + 1) if index + 1 < len(self._pages) else None
        return ObjectPage(keys=list(self._pages[index]), next_token=next_token)

    def get_object(self, key: str) -> bytes:
        raise AssertionError("scanner must not fetch bodies")


def test_parse_key_timestamp() -> None:
    parsed = parse_key_timestamp(_key("2024-01-01T06:00:00Z"), PREFIX)
    assert parsed == datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "key",
    [
        f"{PREFIX}/2024-01-01T06:00",
        f"{PREFIX}/not-a-timestamp-at-all-B62q.json",
        f"{PREFIX}/2024-13-01T06:00:00Z-B62q.json",
    ],
)
def test_parse_key_timestamp_rejects_malformed_keys(key: str) -> None:
    with pytest.raises(KeyFormatError) as excinfo:
        parse_key_timestamp(key, PREFIX)
    assert excinfo.value.key == key


def test_scan_excludes_window_boundaries() -> None:
    before = _key("2023-12-31T23:00:00Z")
    inside = _key("2024-01-01T06:00:00Z")
    at_end = _key("2024-01-01T12:00:00Z")
    at_start = _key("2024-01-01T00:00:00Z")
    store = PagedStore([[before, inside, at_end, at_start]])

    scanned = ObjectStoreScanner(store).scan(PREFIX, WINDOW)

    assert [item.key for item in scanned] == [inside]
    assert scanned[0].timestamp == datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc)


def test_scan_consumes_every_page() -> None:
    pages = [
        [_key("2024-01-01T01:00:00Z", "a"), _key("2024-01-01T13:00:00Z", "b")],
        [_key("2024-01-01T02:00:00Z", "c")],
        [_key("2024-01-01T00:00:00Z", "d"), _key("2024-01-01T11:59:59Z", "e")],
    ]
    store = PagedStore(pages)

    scanned = ObjectStoreScanner(store).scan(PREFIX, WINDOW)

    assert [item.key for item in scanned] == [
        _key("2024-01-01T01:00:00Z", "a"),
        _key("2024-01-01T02:00:00Z", "c"),
        _key("2024-01-01T11:59:59Z", "e"),
    ]
    assert store.calls == [(PREFIX, None), (PREFIX, "1"), (PREFIX, "2")]


def test_scan_ignores_keys_outside_prefix() -> None:
    store = PagedStore([["testnet/submissions/2024-01-02/2024-01-01T06:00:00Z-x.json"]])
    assert ObjectStoreScanner(store).scan(PREFIX, WINDOW) == []


def test_scan_raises_on_malformed_key_by_default() -> None:
    store = PagedStore([[_key("2024-01-01T06:00:00Z"), f"{PREFIX}/garbage"]])
    with pytest.raises(KeyFormatError):
        ObjectStoreScanner(store).scan(PREFIX, WINDOW)


def test_scan_reports_malformed_keys_to_callback() -> None:
    bad = f"{PREFIX}/garbage"
    good = _key("2024-01-01T06:00:00Z")
    store = PagedStore([[bad, good]])
    errors: list[KeyFormatError] = []

    scanned = ObjectStoreScanner(store).scan(PREFIX, WINDOW, on_malformed=errors.append)

    assert [item.key for item in scanned] == [good]
    assert [error.key for error in errors] == [bad]


def test_repeated_continuation_token_is_an_error() -> None:
    class LoopingStore(PagedStore):
        def list_page(self, prefix: str, continuation_token: Optional[str] = None) -> ObjectPage:
            return ObjectPage(keys=[], next_token="same")

    with pytest.raises(StoreAccessError):
        ObjectStoreScanner(LoopingStore([])).list_all(PREFIX)


def test_parse_key_timestamp_requires_separator_after_prefix() -> None:
    key = f"{PREFIX}X2024-01-01T06:00:00Z-B62qabc.json"
    with pytest.raises(KeyFormatError):
        parse_key_timestamp(key, PREFIX)
