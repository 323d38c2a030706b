"""
Prefect flow for fetching raw occurrence data.

Both providers are queried with the configured bounding box and stored
unmodified (as flat provider rows) in the ``raw/`` tier. Reconciliation
happens in the build flow.

Run locally:
    python -m conservation_priority.flows.fetch
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from prefect import flow, task

from conservation_priority.config import BoundingBox, PipelineConfig
from conservation_priority.datasources import gbif, inaturalist
from conservation_priority.store import DataStore

# Data store with tiered directories
store = DataStore(Path("data"))

# Relative paths within the store
GBIF_PATH = Path("raw/gbif.json")
INAT_PATH = Path("raw/inaturalist.json")

RAW_TTL = timedelta(days=7)


@task(name="fetch-gbif", retries=2, retry_delay_seconds=10)
def fetch_gbif(bbox: BoundingBox, max_records: int = 10_000) -> list[dict[str, Any]]:
    """Fetch georeferenced bird occurrences from GBIF."""
    return gbif.fetch_occurrences(bbox, max_records=max_records)


@task(name="save-gbif")
def save_gbif(rows: list[dict[str, Any]], bbox: BoundingBox) -> Path:
    """Save raw GBIF rows via store."""
    return store.write(
        GBIF_PATH,
        rows,
        source="api.gbif.org",
        valid_until=datetime.now(UTC) + RAW_TTL,
        bounding_box=bbox.model_dump(),
    )


@task(name="fetch-inaturalist", retries=2, retry_delay_seconds=10)
def fetch_inaturalist(bbox: BoundingBox, max_pages: int = 50) -> list[dict[str, Any]]:
    """Fetch research-grade bird observations from iNaturalist."""
    return inaturalist.fetch_observations(bbox, max_pages=max_pages)


@task(name="save-inaturalist")
def save_inaturalist(rows: list[dict[str, Any]], bbox: BoundingBox) -> Path:
    """Save raw iNaturalist rows via store."""
    return store.write(
        INAT_PATH,
        rows,
        source="api.inaturalist.org",
        valid_until=datetime.now(UTC) + RAW_TTL,
        bounding_box=bbox.model_dump(),
    )


@flow(name="fetch-occurrences", log_prints=True)
def fetch_all(config: PipelineConfig | None = None, force: bool = False) -> dict[str, Any]:
    """
    Fetch both occurrence sources.

    Checks freshness before fetching and skips sources that are still valid
    unless ``force`` is set.
    """
    config = config or PipelineConfig()
    bbox = config.bounding_box
    results: dict[str, Any] = {}

    # --- GBIF ---
    if store.is_fresh(GBIF_PATH) and not force:
        print("GBIF data is fresh, skipping fetch.")
        gbif_rows = store.read(GBIF_PATH) or []
    else:
        print(f"Fetching GBIF occurrences for {bbox.model_dump()}...")
        gbif_rows = fetch_gbif(bbox)
        gbif_path = save_gbif(gbif_rows, bbox)
        print(f"Saved {len(gbif_rows)} GBIF records to {gbif_path}")

    results["gbif_records"] = len(gbif_rows)

    # --- iNaturalist ---
    if store.is_fresh(INAT_PATH) and not force:
        print("iNaturalist data is fresh, skipping fetch.")
        inat_rows = store.read(INAT_PATH) or []
    else:
        print("Fetching iNaturalist observations...")
        inat_rows = fetch_inaturalist(bbox)
        inat_path = save_inaturalist(inat_rows, bbox)
        print(f"Saved {len(inat_rows)} iNaturalist records to {inat_path}")

    results["inat_records"] = len(inat_rows)

    return results


if __name__ == "__main__":
    result = fetch_all()
    print(f"Flow complete: {result}")
