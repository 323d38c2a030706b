"""
Prefect flow for building the priority tables from raw occurrences.

Loads the raw provider rows written by the fetch flow, runs the
reconciliation + scoring pipeline, and writes the canonical occurrence
table, species tables, grid table and an HTML summary report.

Run locally:
    python -m conservation_priority.flows.build
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from prefect import flow, task

from conservation_priority.analysis.area import GRID_CELL_COLUMNS, critical_areas, priority_areas
from conservation_priority.analysis.exploratory import (
    YEAR_SUMMARY_COLUMNS,
    rare_species,
    top_species,
    yearly_summary,
)
from conservation_priority.analysis.priority import SPECIES_PRIORITY_COLUMNS, priority_species
from conservation_priority.analysis.species import SPECIES_SUMMARY_COLUMNS
from conservation_priority.config import PipelineConfig
from conservation_priority.pipeline import CLEANING_SUMMARY_COLUMNS, PipelineResult, run_pipeline
from conservation_priority.renderers.report import build_report_html
from conservation_priority.schemas import OCCURRENCE_COLUMNS
from conservation_priority.store import DataStore, table_rows

# Store and output paths
store = DataStore(Path("data"))
REPORT_PATH = store.outputs / "report.html"

# Paths matching what fetch.py writes
GBIF_PATH = Path("raw/gbif.json")
INAT_PATH = Path("raw/inaturalist.json")

OCCURRENCES_PATH = Path("processed/occurrences.csv")
SPECIES_LIST_PATH = Path("processed/species_list.csv")
CLEANING_SUMMARY_PATH = Path("processed/cleaning_summary.csv")
SPECIES_PRIORITY_PATH = Path("outputs/species_priority.csv")
HIGH_PRIORITY_SPECIES_PATH = Path("outputs/high_priority_species.csv")
GRID_PRIORITY_PATH = Path("outputs/grid_priority.csv")
HIGH_PRIORITY_AREAS_PATH = Path("outputs/high_priority_areas.csv")
YEARLY_SUMMARY_PATH = Path("outputs/yearly_summary.csv")
TOP_SPECIES_PATH = Path("outputs/top_species.csv")
RARE_SPECIES_PATH = Path("outputs/rare_species.csv")
CRITICAL_AREAS_PATH = Path("outputs/critical_areas.csv")

SOURCE = "conservation-priority"


# =============================================================================
# Data loading tasks
# =============================================================================


@task(name="load-gbif")
def load_gbif() -> list[dict[str, Any]] | None:
    """Load raw GBIF rows from store."""
    return store.read(GBIF_PATH)


@task(name="load-inaturalist")
def load_inaturalist() -> list[dict[str, Any]] | None:
    """Load raw iNaturalist rows from store."""
    return store.read(INAT_PATH)


# =============================================================================
# Processing and output tasks
# =============================================================================


@task(name="run-pipeline")
def process(
    gbif_rows: list[dict[str, Any]],
    inat_rows: list[dict[str, Any]],
    config: PipelineConfig,
) -> PipelineResult:
    """Reconcile, clean and score one snapshot."""
    return run_pipeline(gbif_rows, inat_rows, config)


@task(name="write-tables")
def write_tables(result: PipelineResult) -> list[Path]:
    """Write every output table as CSV."""
    summary = result.cleaning.summary
    tables: list[tuple[Path, Any, list[str]]] = [
        (OCCURRENCES_PATH, result.occurrences, OCCURRENCE_COLUMNS),
        (SPECIES_LIST_PATH, result.species_summary, SPECIES_SUMMARY_COLUMNS),
        (CLEANING_SUMMARY_PATH, [summary], CLEANING_SUMMARY_COLUMNS),
        (SPECIES_PRIORITY_PATH, result.species_priority, SPECIES_PRIORITY_COLUMNS),
        (
            HIGH_PRIORITY_SPECIES_PATH,
            priority_species(result.species_priority),
            SPECIES_PRIORITY_COLUMNS,
        ),
        (GRID_PRIORITY_PATH, result.grid_priority, GRID_CELL_COLUMNS),
        (HIGH_PRIORITY_AREAS_PATH, priority_areas(result.grid_priority), GRID_CELL_COLUMNS),
        (CRITICAL_AREAS_PATH, critical_areas(result.grid_priority), GRID_CELL_COLUMNS),
        (YEARLY_SUMMARY_PATH, yearly_summary(result.occurrences), YEAR_SUMMARY_COLUMNS),
        (TOP_SPECIES_PATH, top_species(result.species_summary), SPECIES_SUMMARY_COLUMNS),
        (RARE_SPECIES_PATH, rare_species(result.species_summary), SPECIES_SUMMARY_COLUMNS),
    ]
    return [
        store.write_table(path, table_rows(items, columns), columns, source=SOURCE)
        for path, items, columns in tables
    ]


@task(name="write-report")
def write_report(html: str) -> Path:
    """Write the HTML report to the outputs tier."""
    REPORT_PATH.parent.mkdir(parents=True, exist_ok=True)
    with REPORT_PATH.open("w") as f:
        f.write(html)
    return REPORT_PATH


def print_cleaning_report(result: PipelineResult) -> None:
    """Print the running retained count after each cleaning stage."""
    cleaning = result.cleaning
    print(f"Combined records: {cleaning.filter_report.input_count}")
    for stage in cleaning.filter_report.stages:
        print(f"  after {stage.stage} filter: {stage.retained}")
    print(f"Duplicates removed: {cleaning.duplicates_removed}")
    print(f"Species names: {cleaning.names_before} -> {cleaning.names_after} after normalization")
    print(f"Rare species identified: {len(rare_species(result.species_summary))}")


# =============================================================================
# Main flow
# =============================================================================


@flow(name="build-priorities", log_prints=True)
def build_all(config: PipelineConfig | None = None) -> dict[str, Any]:
    """
    Build priority tables and report from fetched data.

    This is the main Prefect flow for the processing side of the pipeline.
    """
    config = config or PipelineConfig()

    print("Loading GBIF data...")
    gbif_rows = load_gbif()
    print("Loading iNaturalist data...")
    inat_rows = load_inaturalist()

    if gbif_rows is None and inat_rows is None:
        print("No raw occurrence data found. Run fetch flow first.")
        return {"error": "no data"}
    if gbif_rows is None:
        print("Warning: No GBIF data found. Building from iNaturalist only.")
    if inat_rows is None:
        print("Warning: No iNaturalist data found. Building from GBIF only.")

    print("Running pipeline...")
    result = process(gbif_rows or [], inat_rows or [], config)
    print_cleaning_report(result)

    print("Writing tables...")
    paths = write_tables(result)

    print("Writing report...")
    generated_at = datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC")
    report_path = write_report(build_report_html(result, config, generated_at))

    print(f"Report built: {report_path}")
    return {
        "occurrences": len(result.occurrences),
        "species": len(result.species_priority),
        "grid_cells": len(result.grid_priority),
        "tables": [str(p) for p in paths],
        "report": str(report_path),
    }


if __name__ == "__main__":
    result = build_all()
    print(f"Flow complete: {result}")
