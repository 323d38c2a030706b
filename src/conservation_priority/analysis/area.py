"""Grid-cell (area) conservation priority scoring.

Per cell: species richness, priority-species richness (species tiered
Critical or High), and richness corrected for sampling effort (distinct
survey dates). Each axis is normalized against its maximum over all cells,
so scores are relative to the full run and must be recomputed from the
whole table every time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from conservation_priority.analysis.grid import GridKey, grid_key
from conservation_priority.analysis.priority import SpeciesPriority, priority_species, tier_for
from conservation_priority.config import PipelineConfig
from conservation_priority.schemas import Occurrence, OccurrenceTable, PriorityLevel


@dataclass(frozen=True)
class GridCell:
    """Richness metrics and priority score for one grid cell."""

    grid_lon: float
    grid_lat: float
    species_richness: int
    total_observations: int
    priority_species_richness: int
    survey_date_count: int
    corrected_richness: float
    priority_richness_norm: float
    corrected_richness_norm: float
    total_richness_norm: float
    area_priority_score: float
    area_priority_level: PriorityLevel

    @property
    def key(self) -> GridKey:
        return GridKey(self.grid_lon, self.grid_lat)


GRID_CELL_COLUMNS: list[str] = [
    "grid_lon",
    "grid_lat",
    "species_richness",
    "total_observations",
    "priority_species_richness",
    "survey_date_count",
    "corrected_richness",
    "priority_richness_norm",
    "corrected_richness_norm",
    "total_richness_norm",
    "area_priority_score",
    "area_priority_level",
]


@dataclass(frozen=True)
class _CellCounts:
    key: GridKey
    species_richness: int
    total_observations: int
    priority_species_richness: int
    survey_date_count: int
    corrected_richness: float


def corrected_richness(species_richness: int, survey_date_count: int) -> float:
    """Richness per ln(survey dates + 1); 0.0 for a cell with no dated records."""
    if survey_date_count <= 0:
        return 0.0
    return species_richness / math.log(survey_date_count + 1)


def normalize(value: float, maximum: float) -> float:
    """Scale to 0-100 against ``maximum``; 0.0 when the maximum is not positive."""
    if maximum <= 0:
        return 0.0
    return value / maximum * 100


def group_by_cell(records: OccurrenceTable, cell_size: float) -> dict[GridKey, list[Occurrence]]:
    cells: dict[GridKey, list[Occurrence]] = {}
    for occ in records:
        cells.setdefault(grid_key(occ, cell_size), []).append(occ)
    return cells


def _count_cell(
    key: GridKey,
    group: list[Occurrence],
    priority_names: frozenset[str],
) -> _CellCounts:
    species = {occ.species for occ in group if occ.species}
    dates = {occ.date for occ in group if occ.date is not None}
    richness = len(species)
    return _CellCounts(
        key=key,
        species_richness=richness,
        total_observations=len(group),
        priority_species_richness=len(species & priority_names),
        survey_date_count=len(dates),
        corrected_richness=corrected_richness(richness, len(dates)),
    )


def score_cells(
    records: OccurrenceTable,
    priorities: tuple[SpeciesPriority, ...],
    config: PipelineConfig,
) -> tuple[GridCell, ...]:
    """Score every occupied grid cell, ordered by (grid_lon, grid_lat)."""
    priority_names = frozenset(p.species for p in priority_species(priorities))
    counts = [
        _count_cell(key, group, priority_names)
        for key, group in sorted(group_by_cell(records, config.grid_cell_size_deg).items())
    ]
    if not counts:
        return ()

    max_priority = max(c.priority_species_richness for c in counts)
    max_corrected = max(c.corrected_richness for c in counts)
    max_richness = max(c.species_richness for c in counts)
    weights = config.area_weights

    cells: list[GridCell] = []
    for c in counts:
        priority_norm = normalize(c.priority_species_richness, max_priority)
        corrected_norm = normalize(c.corrected_richness, max_corrected)
        total_norm = normalize(c.species_richness, max_richness)
        score = (
            priority_norm * weights.priority_richness
            + corrected_norm * weights.corrected_richness
            + total_norm * weights.total_richness
        )
        cells.append(
            GridCell(
                grid_lon=c.key.grid_lon,
                grid_lat=c.key.grid_lat,
                species_richness=c.species_richness,
                total_observations=c.total_observations,
                priority_species_richness=c.priority_species_richness,
                survey_date_count=c.survey_date_count,
                corrected_richness=c.corrected_richness,
                priority_richness_norm=priority_norm,
                corrected_richness_norm=corrected_norm,
                total_richness_norm=total_norm,
                area_priority_score=score,
                area_priority_level=tier_for(score, config.area_tiers),
            )
        )
    return tuple(cells)


# =============================================================================
# Derived views
# =============================================================================


def priority_areas(cells: tuple[GridCell, ...]) -> tuple[GridCell, ...]:
    """Critical and High cells, highest score first."""
    selected = [
        c
        for c in cells
        if c.area_priority_level in (PriorityLevel.CRITICAL, PriorityLevel.HIGH)
    ]
    return tuple(sorted(selected, key=lambda c: (-c.area_priority_score, c.key)))


def critical_areas(cells: tuple[GridCell, ...]) -> tuple[GridCell, ...]:
    selected = [c for c in cells if c.area_priority_level == PriorityLevel.CRITICAL]
    return tuple(sorted(selected, key=lambda c: (-c.area_priority_score, c.key)))


def conservation_gaps(cells: tuple[GridCell, ...], config: PipelineConfig) -> tuple[GridCell, ...]:
    """Species-rich cells holding no priority species, richest first."""
    selected = [
        c
        for c in cells
        if c.species_richness >= config.gap_richness_min and c.priority_species_richness == 0
    ]
    return tuple(sorted(selected, key=lambda c: (-c.species_richness, c.key)))
