"""
End-to-end reconciliation and scoring pipeline.

Composes the pure stages in a fixed order::

    raw GBIF rows ─┐
                   ├─ reconcile ─ combine ─ quality filters ─ dedup ─ normalize names
    raw iNat rows ─┘                                                      │
                                              canonical occurrence table ◄┘
                                                │
                         ┌──────────────────────┼─────────────────────┐
                  species summary        species priority        grid priority

Every aggregate is recomputed from the canonical table on each run; the same
input and config always give identical outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from conservation_priority.analysis.area import GridCell, score_cells
from conservation_priority.analysis.priority import SpeciesPriority, score_all_species
from conservation_priority.analysis.species import SpeciesSummary, summarize_species
from conservation_priority.cleaning import (
    FilterReport,
    apply_quality_filters,
    combine,
    normalize_species,
    reconcile_gbif,
    reconcile_inat,
    remove_duplicates,
)
from conservation_priority.config import PipelineConfig, validate_config
from conservation_priority.schemas import DataSource, OccurrenceTable


@dataclass(frozen=True)
class CleaningSummary:
    """Record counts through the cleaning stages."""

    original_records: int
    records_removed: int
    percent_removed: float
    duplicates_removed: int
    final_records: int
    unique_species: int
    gbif_records: int
    inat_records: int
    year_min: int | None
    year_max: int | None


CLEANING_SUMMARY_COLUMNS: list[str] = [
    "original_records",
    "records_removed",
    "percent_removed",
    "duplicates_removed",
    "final_records",
    "unique_species",
    "gbif_records",
    "inat_records",
    "year_min",
    "year_max",
]


@dataclass(frozen=True)
class CleaningResult:
    occurrences: OccurrenceTable
    filter_report: FilterReport
    duplicates_removed: int
    names_before: int
    names_after: int
    summary: CleaningSummary


@dataclass(frozen=True)
class PipelineResult:
    """Every output table of one run."""

    cleaning: CleaningResult
    species_summary: tuple[SpeciesSummary, ...]
    species_priority: tuple[SpeciesPriority, ...]
    grid_priority: tuple[GridCell, ...]

    @property
    def occurrences(self) -> OccurrenceTable:
        return self.cleaning.occurrences


def _summarize_cleaning(
    occurrences: OccurrenceTable,
    report: FilterReport,
    duplicates_removed: int,
) -> CleaningSummary:
    years = [occ.year for occ in occurrences if occ.year is not None]
    return CleaningSummary(
        original_records=report.input_count,
        records_removed=report.removed,
        percent_removed=report.percent_removed,
        duplicates_removed=duplicates_removed,
        final_records=len(occurrences),
        unique_species=len({occ.species for occ in occurrences}),
        gbif_records=sum(1 for occ in occurrences if occ.data_source == DataSource.GBIF),
        inat_records=sum(1 for occ in occurrences if occ.data_source == DataSource.INATURALIST),
        year_min=min(years) if years else None,
        year_max=max(years) if years else None,
    )


def clean_occurrences(
    gbif_rows: list[dict[str, Any]],
    inat_rows: list[dict[str, Any]],
    config: PipelineConfig,
) -> CleaningResult:
    """Raw provider rows -> canonical occurrence table."""
    combined = combine(reconcile_gbif(gbif_rows), reconcile_inat(inat_rows, config))
    filtered = apply_quality_filters(combined, config)
    deduped = remove_duplicates(filtered.records)
    normalized = normalize_species(deduped.records)
    return CleaningResult(
        occurrences=normalized.records,
        filter_report=filtered.report,
        duplicates_removed=deduped.removed,
        names_before=normalized.names_before,
        names_after=normalized.names_after,
        summary=_summarize_cleaning(normalized.records, filtered.report, deduped.removed),
    )


def run_pipeline(
    gbif_rows: list[dict[str, Any]],
    inat_rows: list[dict[str, Any]],
    config: PipelineConfig | None = None,
) -> PipelineResult:
    """
    Run cleaning and scoring over one snapshot of provider data.

    Args:
        gbif_rows: Raw GBIF occurrence rows (GBIF column names).
        inat_rows: Raw iNaturalist observation rows (iNaturalist column names).
        config: Pipeline configuration; defaults to the study-region defaults.

    Raises:
        ConfigurationError: Before any record is processed, if ``config`` is invalid.
    """
    config = validate_config(config or PipelineConfig())

    cleaning = clean_occurrences(gbif_rows, inat_rows, config)
    summaries = summarize_species(cleaning.occurrences)
    priorities = score_all_species(cleaning.occurrences, summaries, config)
    cells = score_cells(cleaning.occurrences, priorities, config)

    return PipelineResult(
        cleaning=cleaning,
        species_summary=summaries,
        species_priority=priorities,
        grid_priority=cells,
    )
