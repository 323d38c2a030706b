"""Per-species summary statistics over the canonical occurrence table.

A pure group-by: the result depends only on the multiset of occurrences,
never on their order, and is sorted by total records (descending) then
species name.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from conservation_priority.schemas import DataSource, Occurrence, OccurrenceTable


@dataclass(frozen=True)
class SpeciesSummary:
    """Observation counts and temporal extent for one species."""

    species: str
    scientific_name: str | None
    total_records: int
    gbif_records: int
    inat_records: int
    first_year: int | None
    last_year: int | None


SPECIES_SUMMARY_COLUMNS: list[str] = [
    "species",
    "scientific_name",
    "total_records",
    "gbif_records",
    "inat_records",
    "first_year",
    "last_year",
]


def group_by_species(records: OccurrenceTable) -> dict[str, list[Occurrence]]:
    """Occurrences keyed by (normalized) species; records without one are skipped."""
    groups: dict[str, list[Occurrence]] = {}
    for occ in records:
        if occ.species:
            groups.setdefault(occ.species, []).append(occ)
    return groups


def _representative_name(group: list[Occurrence]) -> str | None:
    """Most frequent scientific name, ties broken alphabetically."""
    counts = Counter(occ.scientific_name for occ in group if occ.scientific_name)
    if not counts:
        return None
    return min(counts, key=lambda name: (-counts[name], name))


def summarize_group(species: str, group: list[Occurrence]) -> SpeciesSummary:
    years = [occ.year for occ in group if occ.year is not None]
    return SpeciesSummary(
        species=species,
        scientific_name=_representative_name(group),
        total_records=len(group),
        gbif_records=sum(1 for occ in group if occ.data_source == DataSource.GBIF),
        inat_records=sum(1 for occ in group if occ.data_source == DataSource.INATURALIST),
        first_year=min(years) if years else None,
        last_year=max(years) if years else None,
    )


def summary_sort_key(summary: SpeciesSummary) -> tuple[int, str]:
    return (-summary.total_records, summary.species)


def summarize_species(records: OccurrenceTable) -> tuple[SpeciesSummary, ...]:
    """Build the species list, most-recorded first."""
    summaries = [
        summarize_group(species, group) for species, group in group_by_species(records).items()
    ]
    return tuple(sorted(summaries, key=summary_sort_key))
