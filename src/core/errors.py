"""Error taxonomy shared by the core and its adapters."""

from __future__ import annotations


class AnalyzerError(RuntimeError):
    """Base class for every failure the analyzer reports."""


class ConfigError(AnalyzerError):
    """Missing or invalid run parameters, raised before a run starts."""


class StoreAccessError(AnalyzerError):
    """Listing or fetching from the object store failed."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class KeyFormatError(AnalyzerError):
    """An object key does not carry a parseable submission timestamp."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Malformed submission key {key!r}: {reason}")
        self.key = key
        self.reason = reason


class DecodeError(AnalyzerError):
    """An object body is not a valid submission payload."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Cannot decode submission {key!r}: {reason}")
        self.key = key
        self.reason = reason
