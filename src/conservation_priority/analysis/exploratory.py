"""Descriptive summaries of the cleaned occurrence table."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from conservation_priority.analysis.species import SpeciesSummary
from conservation_priority.reference.scales import FREQUENCY_CATEGORIES
from conservation_priority.schemas import DataSource, OccurrenceTable, Season

SEASON_ORDER = (Season.WINTER, Season.SPRING, Season.SUMMER, Season.AUTUMN)


@dataclass(frozen=True)
class YearSummary:
    year: int
    total_records: int
    unique_species: int
    gbif_records: int
    inat_records: int


YEAR_SUMMARY_COLUMNS: list[str] = [
    "year",
    "total_records",
    "unique_species",
    "gbif_records",
    "inat_records",
]


def records_by_year(records: OccurrenceTable) -> dict[int, int]:
    counts = Counter(occ.year for occ in records if occ.year is not None)
    return dict(sorted(counts.items()))


def records_by_month(records: OccurrenceTable) -> dict[int, int]:
    counts = Counter(occ.month for occ in records if occ.month is not None)
    return dict(sorted(counts.items()))


def records_by_season(records: OccurrenceTable) -> dict[str, int]:
    counts = Counter(occ.season for occ in records if occ.season is not None)
    return {season.value: counts[season] for season in SEASON_ORDER if counts[season]}


def records_by_source(records: OccurrenceTable) -> dict[str, int]:
    counts = Counter(occ.data_source for occ in records)
    return {source.value: counts[source] for source in DataSource}


def frequency_category(total_records: int) -> str:
    """Bucket a species by how often it was recorded."""
    for lower_bound, label in FREQUENCY_CATEGORIES:
        if total_records >= lower_bound:
            return label
    return FREQUENCY_CATEGORIES[-1][1]


def frequency_table(summaries: tuple[SpeciesSummary, ...]) -> dict[str, int]:
    """Species count per frequency category, rarest category first."""
    counts = Counter(frequency_category(s.total_records) for s in summaries)
    return {label: counts[label] for _, label in reversed(FREQUENCY_CATEGORIES)}


def yearly_summary(records: OccurrenceTable) -> tuple[YearSummary, ...]:
    by_year: dict[int, list[tuple[str | None, DataSource]]] = {}
    for occ in records:
        if occ.year is not None:
            by_year.setdefault(occ.year, []).append((occ.species, occ.data_source))

    return tuple(
        YearSummary(
            year=year,
            total_records=len(rows),
            unique_species=len({species for species, _ in rows if species}),
            gbif_records=sum(1 for _, src in rows if src == DataSource.GBIF),
            inat_records=sum(1 for _, src in rows if src == DataSource.INATURALIST),
        )
        for year, rows in sorted(by_year.items())
    )


def rare_species(
    summaries: tuple[SpeciesSummary, ...], below: int = 5
) -> tuple[SpeciesSummary, ...]:
    """Species with fewer than ``below`` records, fewest first then by name."""
    rare = [s for s in summaries if s.total_records < below]
    return tuple(sorted(rare, key=lambda s: (s.total_records, s.species)))


def top_species(summaries: tuple[SpeciesSummary, ...], n: int = 30) -> tuple[SpeciesSummary, ...]:
    """The ``n`` most-recorded species (summaries are already sorted that way)."""
    return summaries[:n]
