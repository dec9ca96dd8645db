"""Core submission analysis pipeline.

This module is integration-agnostic. It only relies on ports for the object
store and the execution marker. The pipeline enforces a strict order:
1) Resolve the run window from the marker and the clock
2) Scan every date partition the window touches and keep keys inside it
3) Fetch and decode each selected submission
4) Resolve identities and register each one once
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from core.config import AnalyzerConfig, ErrorPolicy, RunConfig
from core.decoder import decode_submission
from core.errors import AnalyzerError, DecodeError, KeyFormatError, StoreAccessError
from core.identity import IdentityRegistry, resolve_identity
from core.models import AnalysisResult, ScannedKey, SkippedKey
from core.ports import ExecutionMarkerPort, ObjectStorePort
from core.scanner import ObjectStoreScanner
from core.time_window import resolve_window, utc_now, window_prefixes

LOGGER = logging.getLogger(__name__)


class UptimeAnalyzer:
    """Orchestrates windowing, scanning, decoding, and identity dedup."""

    def __init__(
        self,
        store: ObjectStorePort,
        run_config: RunConfig,
        analyzer_config: Optional[AnalyzerConfig] = None,
        marker: Optional[ExecutionMarkerPort] = None,
        clock: Callable[[], datetime] = utc_now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._run = run_config
        self._config = analyzer_config or AnalyzerConfig()
        self._marker = marker
        self._clock = clock
        self._log = logger or LOGGER
        self._scanner = ObjectStoreScanner(store, logger=self._log)

    def run(self) -> AnalysisResult:
        """Process one window and return the identity registry it produced.

        Under ErrorPolicy.ABORT the first failing key aborts the run and no
        registry is returned. Under ErrorPolicy.SKIP every failing key is
        logged, recorded in `skipped`, and the run carries on.
        """

        last_execution = self._marker.read() if self._marker is not None else None
        window = resolve_window(self._clock(), last_execution, self._config.lookback, logger=self._log)
        prefixes = window_prefixes(self._run.network_name, window)
        result = AnalysisResult(window=window, registry=IdentityRegistry())

        self._log.info(
            "Analyzing %s from %s to %s (policy=%s)",
            ", ".join(prefixes),
            window.start.isoformat(),
            window.end.isoformat(),
            self._config.error_policy.value,
        )

        def skip_malformed(exc: KeyFormatError) -> None:
            self._skip(result, exc.key, exc)

        on_malformed = skip_malformed if self._config.error_policy is ErrorPolicy.SKIP else None
        selected: list[ScannedKey] = []
        for prefix in prefixes:
            selected.extend(self._scanner.scan(prefix, window, on_malformed=on_malformed))

        for scanned in selected:
            try:
                self._process(scanned, result)
            except (StoreAccessError, DecodeError) as exc:
                if self._config.error_policy is ErrorPolicy.ABORT:
                    self._log.error("Aborting run on %s: %s", scanned.key, exc)
                    raise
                self._skip(result, scanned.key, exc)

        self._log.info(
            "Run complete: submissions=%s, identities=%s, skipped=%s",
            len(result.submissions),
            len(result.registry),
            len(result.skipped),
        )
        return result

    def _process(self, scanned: ScannedKey, result: AnalysisResult) -> None:
        body = self._store.get_object(scanned.key)
        submission = decode_submission(scanned.key, scanned.timestamp, body)
        result.submissions.append(submission)

        identity = resolve_identity(submission.submitter, submission.remote_addr)
        if result.registry.register(identity):
            self._log.debug("New identity %s (%s, %s)", identity.id, identity.public_key, identity.public_ip)

    def _skip(self, result: AnalysisResult, key: str, exc: AnalyzerError) -> None:
        self._log.warning("Skipping %s: %s", key, exc)
        result.skipped.append(SkippedKey(key=key, error=str(exc)))


def submission_metrics(result: AnalysisResult) -> dict[str, dict[str, object]]:
    """Return per-identity submission counts and last-seen times for export."""

    counts: dict[str, int] = {}
    last_seen: dict[str, datetime] = {}
    for submission in result.submissions:
        identity_id = resolve_identity(submission.submitter, submission.remote_addr).id
        counts[identity_id] = counts.get(identity_id, 0) + 1
        if identity_id not in last_seen or submission.timestamp > last_seen[identity_id]:
            last_seen[identity_id] = submission.timestamp
    return {
        identity_id: {"submissions": counts[identity_id], "last_seen": last_seen[identity_id].isoformat()}
        for identity_id in counts
    }
