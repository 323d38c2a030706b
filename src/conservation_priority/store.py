"""Tiered data store for pipeline inputs and outputs.

Manages read/write of data files organized into tiers:
  - raw/: Provider rows as fetched, 7-day TTL (GBIF, iNaturalist)
  - processed/: Canonical occurrence table, species list, cleaning summary
  - outputs/: Priority tables and the HTML report, always recomputed

JSON files are wrapped in a metadata envelope with ``valid_until`` so the
fetch flow can skip providers that are still fresh.

Tables are written as CSV with a fixed column order and a sidecar
``.meta.json`` holding the same metadata fields.
"""

from __future__ import annotations

import csv
import dataclasses
import json
from datetime import UTC, date, datetime
from enum import Enum
from pathlib import Path  # noqa: TC003
from typing import Any

from pydantic import BaseModel


def _cell(value: Any) -> Any:
    """Flatten one value for CSV output."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def to_record(item: Any) -> dict[str, Any]:
    """Dict view of a dataclass, pydantic model or mapping."""
    if isinstance(item, BaseModel):
        return item.model_dump()
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    return dict(item)


def table_rows(items: Any, columns: list[str]) -> list[dict[str, Any]]:
    """Project items onto ``columns`` in order, ready for ``write_table``."""
    rows = []
    for item in items:
        record = to_record(item)
        rows.append({column: _cell(record.get(column)) for column in columns})
    return rows


class DataStore:
    """Manages read/write of data files with TTL metadata."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.raw = base_dir / "raw"
        self.processed = base_dir / "processed"
        self.outputs = base_dir / "outputs"

    def _meta(
        self,
        source: str,
        valid_until: datetime | None,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()
        if params:
            meta.update(params)
        return meta

    def read(self, path: Path) -> Any:
        """Read data payload from a metadata-enveloped JSON file.

        Returns the ``data`` field, or None if the file doesn't exist.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``raw/gbif.json``).
            data: Payload to store under the ``data`` key.
            source: Data source identifier (e.g. ``"api.gbif.org"``).
            valid_until: Expiry timestamp. None means derived/no-cache.
            **params: Extra metadata fields (bounding box, query params, etc.).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        envelope = {"meta": self._meta(source, valid_until, params), "data": data}
        with full.open("w") as f:
            json.dump(envelope, f, indent=2, default=str)

        return full

    def write_table(
        self,
        path: Path,
        rows: list[dict[str, Any]],
        columns: list[str],
        source: str,
        **params: Any,
    ) -> Path:
        """Write rows as CSV in ``columns`` order with a ``.meta.json`` sidecar.

        Returns:
            Absolute path of the CSV file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        with full.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)

        meta = self._meta(source, None, {"rows": len(rows), **params})
        meta_path = full.with_suffix(full.suffix + ".meta.json")
        with meta_path.open("w") as f:
            json.dump({"meta": meta}, f, indent=2)

        return full

    def read_table(self, path: Path) -> list[dict[str, str]] | None:
        """Read a CSV table as string-valued dicts, or None if missing."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open(newline="") as f:
            return list(csv.DictReader(f))

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    def _read_meta(self, full: Path) -> dict[str, Any]:
        """Read metadata from either a JSON envelope or a sidecar .meta.json."""
        sidecar = full.with_suffix(full.suffix + ".meta.json")
        if sidecar.exists():
            with sidecar.open() as f:
                result: dict[str, Any] = json.load(f)
            return result.get("meta", {})

        if full.suffix == ".json" and full.exists():
            with full.open() as f:
                envelope: dict[str, Any] = json.load(f)
            return envelope.get("meta", {})

        return {}

    def is_fresh(self, path: Path) -> bool:
        """Check if a file exists and hasn't expired.

        Returns False if the file is missing, has no ``valid_until``, or
        the expiry time has passed.
        """
        full = self._resolve(path)
        if not full.exists():
            return False

        meta = self._read_meta(full)
        valid_until = meta.get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) < expiry
