"""Application entry point for the uptime analyzer."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import text2art

import settings
from adapters.csv_sheet import CsvIdentitySheet
from adapters.s3_store import S3ObjectStore
from adapters.sqlite_storage import SQLiteStorage
from client import build_client
from core.analyzer import UptimeAnalyzer, submission_metrics
from core.errors import AnalyzerError
from core.models import AnalysisResult
from core.ports import IdentitySinkPort
from core.time_window import resolve_window, utc_now, window_prefixes

NAME = "UPTIME"
FONT = "tarty-1"

# Some keys were skipped; the next run covers the same window again.
EXIT_PARTIAL = 3


def _print_banner() -> None:
    # stdout carries the registry, so the banner goes to stderr.
    print(text2art(NAME, font=FONT, space=1), file=sys.stderr)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", ["AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN"]):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging(config: dict) -> None:
    config = config or {}
    if not config.get("enabled", True):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        # Logs go to stderr so stdout stays machine-readable.
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/analyzer.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)

    # botocore is chatty at DEBUG and logs request signing details.
    logging.getLogger("botocore").setLevel(max(level, logging.INFO))


def export_identities(result: AnalysisResult, sink: IdentitySinkPort) -> int:
    """Upsert one row per registered identity into the sink."""

    metrics = submission_metrics(result)
    for identity in result.registry:
        sink.upsert_row(identity, metrics.get(identity.id, {}))
    return len(result.registry)


def _run(args: argparse.Namespace) -> int:
    _print_banner()
    app_settings = settings.load_settings(args.config)
    _configure_logging(app_settings.logging)
    logger = logging.getLogger(__name__)

    logger.info("Starting uptime analyzer for %s", app_settings.run.network_name)

    storage = SQLiteStorage(app_settings.db_path)
    storage.init_db()

    client = build_client(app_settings.run, app_settings.store)
    store = S3ObjectStore(client, app_settings.run.bucket, page_size=app_settings.store.page_size)
    analyzer = UptimeAnalyzer(
        store=store,
        run_config=app_settings.run,
        analyzer_config=app_settings.analyzer,
        marker=storage,
        logger=logging.getLogger("core.analyzer"),
    )

    try:
        result = analyzer.run()
    except AnalyzerError:
        logger.exception("Run aborted, execution marker left unchanged")
        return 1

    print(json.dumps(result.registry.as_dict(), indent=2, sort_keys=True))

    if args.export:
        exported = export_identities(result, CsvIdentitySheet(args.export))
        logger.info("Exported %s identities to %s", exported, args.export)

    # The marker only moves after a complete run so the next window picks up
    # where this one ended. Skipped keys keep it in place to be retried.
    if result.skipped:
        logger.warning(
            "%s key(s) were skipped, execution marker left unchanged",
            len(result.skipped),
        )
        return EXIT_PARTIAL
    if args.no_mark:
        logger.info("Execution marker not updated (--no-mark)")
    else:
        storage.write(result.window.end)
        logger.info("Execution marker set to %s", result.window.end.isoformat())
    return 0


def _window(args: argparse.Namespace) -> int:
    app_settings = settings.load_settings(args.config)
    _configure_logging(app_settings.logging)

    storage = SQLiteStorage(app_settings.db_path)
    storage.init_db()
    window = resolve_window(utc_now(), storage.read(), app_settings.analyzer.lookback)
    payload = {
        "prefixes": window_prefixes(app_settings.run.network_name, window),
        "start": window.start.isoformat(),
        "end": window.end.isoformat(),
    }
    print(json.dumps(payload, indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="uptime-analyzer")
    parser.add_argument("--config", help="Path to config.json (defaults to ANALYZER_CONFIG or ./config.json)")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run",
        help="Analyze submissions since the last run (exits 3 and keeps the marker if keys were skipped)",
    )
    run_parser.add_argument("--export", metavar="PATH", help="Upsert identities into a CSV sheet")
    run_parser.add_argument("--no-mark", action="store_true", help="Do not update the execution marker")
    subparsers.add_parser("window", help="Show the window the next run would cover")

    args = parser.parse_args(argv)
    try:
        if args.command == "window":
            return _window(args)
        if args.command is None:
            args.export = None
            args.no_mark = False
        return _run(args)
    except AnalyzerError as exc:
        # Config errors surface before logging is configured.
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
