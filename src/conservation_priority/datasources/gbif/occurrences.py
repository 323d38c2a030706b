"""GBIF occurrence fetching, flattened to the GBIF column set."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from conservation_priority.cleaning.reconcile import GBIF_COLUMNS
from conservation_priority.datasources.gbif import client

if TYPE_CHECKING:
    from conservation_priority.config import BoundingBox


def flatten_occurrence(result: dict[str, Any]) -> dict[str, Any]:
    """Project one search result onto the columns the reconciler reads.

    ``occurrenceID`` is optional in GBIF; the numeric ``key`` stands in.
    """
    row = {column: result.get(column) for column in GBIF_COLUMNS}
    if not row["occurrenceID"]:
        row["occurrenceID"] = result.get("key")
    return row


def fetch_occurrences(
    bbox: BoundingBox,
    *,
    taxon_key: int = client.AVES,
    max_records: int = 10_000,
) -> list[dict[str, Any]]:
    """
    Fetch georeferenced GBIF occurrences inside a bounding box.

    Args:
        bbox: Study region.
        taxon_key: GBIF backbone taxon key (default: Aves).
        max_records: Upper bound on rows returned.

    Returns:
        Flat GBIF rows in API order.
    """
    params: dict[str, Any] = {
        "taxonKey": taxon_key,
        "hasCoordinate": "true",
        "hasGeospatialIssue": "false",
        **bbox.as_gbif_params(),
    }
    raw = client.search_occurrences_paginated(params, max_records=max_records)
    return [flatten_occurrence(r) for r in raw]
