"""Collapse the same observation carried by both providers.

Duplicates are records with identical (species, latitude, longitude, date),
compared exactly. The first record in input order is kept. Near-duplicates
with slightly different coordinates or date precision are not merged.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from conservation_priority.schemas import Occurrence, OccurrenceTable

DedupKey = tuple[str | None, float | None, float | None, dt.date | None]


@dataclass(frozen=True)
class DedupResult:
    records: OccurrenceTable
    removed: int


def dedup_key(occ: Occurrence) -> DedupKey:
    return (occ.species, occ.latitude, occ.longitude, occ.date)


def remove_duplicates(records: OccurrenceTable) -> DedupResult:
    """Keep the first occurrence of each (species, lat, lon, date) group."""
    seen: set[DedupKey] = set()
    kept: list[Occurrence] = []
    for occ in records:
        key = dedup_key(occ)
        if key in seen:
            continue
        seen.add(key)
        kept.append(occ)
    return DedupResult(records=tuple(kept), removed=len(records) - len(kept))
