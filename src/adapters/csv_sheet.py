"""CSV identity sheet adapter.

Implements the core IdentitySinkPort as a local CSV file: one row per
identity, matched by id, new identities appended at the end.
"""

from __future__ import annotations

import csv
import os
from typing import Mapping

from core.models import Identity

BASE_COLUMNS = ["id", "public_key", "public_ip"]


class CsvIdentitySheet:
    """Upserts identity rows into a CSV file."""

    def __init__(self, path: str) -> None:
        self._path = path

    def _load(self) -> tuple[list[str], list[dict[str, str]]]:
        if not os.path.exists(self._path):
            return list(BASE_COLUMNS), []
        with open(self._path, "r", encoding="utf-8", newline="") as handle:
            reader = csv.DictReader(handle)
            columns = list(reader.fieldnames or BASE_COLUMNS)
            return columns, list(reader)

    def _save(self, columns: list[str], rows: list[dict[str, str]]) -> None:
        directory = os.path.dirname(self._path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self._path, "w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=columns, restval="")
            writer.writeheader()
            writer.writerows(rows)

    def upsert_row(self, identity: Identity, metrics: Mapping[str, object]) -> None:
        """Update the row with the identity's id, or append a new one."""

        columns, rows = self._load()
        for name in metrics:
            if name not in columns:
                columns.append(name)

        values = {
            "id": identity.id,
            "public_key": identity.public_key,
            "public_ip": identity.public_ip,
        }
        values.update({name: str(value) for name, value in metrics.items()})

        for row in rows:
            if row.get("id") == identity.id:
                row.update(values)
                break
        else:
            rows.append(values)
        self._save(columns, rows)

    def rows(self) -> list[dict[str, str]]:
        return self._load()[1]
