"""Species-level conservation priority scoring.

Three sub-scores, each on a 0-100 scale, combined by fixed weights:

  - rarity: step function of total records (fewer records -> higher score)
  - range: step function of distinct grid cells occupied
  - trend: recent-period minus early-period observation counts

The combined score is mapped to a tier (Critical / High / Medium / Low)
using inclusive lower-bound thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass

from conservation_priority.analysis.grid import grid_key
from conservation_priority.analysis.species import SpeciesSummary, group_by_species
from conservation_priority.config import PipelineConfig, TierThresholds, TrendScoring
from conservation_priority.schemas import Occurrence, OccurrenceTable, PriorityLevel


@dataclass(frozen=True)
class SpeciesPriority:
    """SpeciesSummary plus sub-scores, combined score and tier."""

    species: str
    scientific_name: str | None
    total_records: int
    gbif_records: int
    inat_records: int
    first_year: int | None
    last_year: int | None
    rarity_score: float
    n_grid_cells: int
    lat_range: float
    lon_range: float
    range_score: float
    early_count: int
    recent_count: int
    trend: int | None
    trend_score: float
    priority_score: float
    priority_level: PriorityLevel


SPECIES_PRIORITY_COLUMNS: list[str] = [
    "species",
    "scientific_name",
    "total_records",
    "gbif_records",
    "inat_records",
    "first_year",
    "last_year",
    "rarity_score",
    "n_grid_cells",
    "lat_range",
    "lon_range",
    "range_score",
    "early_count",
    "recent_count",
    "trend",
    "trend_score",
    "priority_score",
    "priority_level",
]

#: Tiers whose species count towards an area's priority richness.
PRIORITY_TIERS = frozenset({PriorityLevel.CRITICAL, PriorityLevel.HIGH})


# =============================================================================
# Sub-scores
# =============================================================================


def rarity_score(total_records: int, config: PipelineConfig) -> float:
    return config.rarity.score(total_records)


def range_score(n_grid_cells: int, config: PipelineConfig) -> float:
    return config.range.score(n_grid_cells)


def period_counts(group: list[Occurrence], split_year: int) -> tuple[int, int]:
    """(early, recent) counts; occurrences without a year are in neither period."""
    early = sum(1 for occ in group if occ.year is not None and occ.year < split_year)
    recent = sum(1 for occ in group if occ.year is not None and occ.year >= split_year)
    return early, recent


def trend_score(early: int, recent: int, scoring: TrendScoring) -> float:
    """Score the recent-minus-early trend.

    A species with no dated occurrences at all gets ``scoring.missing_default``
    (neutral 50) rather than a computed score.
    """
    if early == 0 and recent == 0:
        return scoring.missing_default
    if early > 0 and recent == 0:
        return scoring.disappeared
    trend = recent - early
    if trend < scoring.strong_decline_below:
        return scoring.strong_decline
    if trend < 0:
        return scoring.decline
    if trend <= scoring.stable_max:
        return scoring.stable
    return scoring.increase


def tier_for(score: float, thresholds: TierThresholds) -> PriorityLevel:
    if score >= thresholds.critical:
        return PriorityLevel.CRITICAL
    if score >= thresholds.high:
        return PriorityLevel.HIGH
    if score >= thresholds.medium:
        return PriorityLevel.MEDIUM
    return PriorityLevel.LOW


def combined_species_score(
    rarity: float, range_: float, trend: float, config: PipelineConfig
) -> float:
    weights = config.species_weights
    return rarity * weights.rarity + range_ * weights.range + trend * weights.trend


# =============================================================================
# Scoring
# =============================================================================


def score_species(
    summary: SpeciesSummary,
    group: list[Occurrence],
    config: PipelineConfig,
) -> SpeciesPriority:
    """Score one species from its summary and its occurrences."""
    cells = {grid_key(occ, config.grid_cell_size_deg) for occ in group}
    lats = [occ.latitude for occ in group if occ.latitude is not None]
    lons = [occ.longitude for occ in group if occ.longitude is not None]

    early, recent = period_counts(group, config.trend_split_year)
    has_dates = early + recent > 0

    rarity = rarity_score(summary.total_records, config)
    range_ = range_score(len(cells), config)
    trend = trend_score(early, recent, config.trend)
    score = combined_species_score(rarity, range_, trend, config)

    return SpeciesPriority(
        species=summary.species,
        scientific_name=summary.scientific_name,
        total_records=summary.total_records,
        gbif_records=summary.gbif_records,
        inat_records=summary.inat_records,
        first_year=summary.first_year,
        last_year=summary.last_year,
        rarity_score=rarity,
        n_grid_cells=len(cells),
        lat_range=max(lats) - min(lats) if lats else 0.0,
        lon_range=max(lons) - min(lons) if lons else 0.0,
        range_score=range_,
        early_count=early,
        recent_count=recent,
        trend=recent - early if has_dates else None,
        trend_score=trend,
        priority_score=score,
        priority_level=tier_for(score, config.species_tiers),
    )


def priority_sort_key(priority: SpeciesPriority) -> tuple[float, str]:
    return (-priority.priority_score, priority.species)


def score_all_species(
    records: OccurrenceTable,
    summaries: tuple[SpeciesSummary, ...],
    config: PipelineConfig,
) -> tuple[SpeciesPriority, ...]:
    """One SpeciesPriority per summary, highest priority first."""
    groups = group_by_species(records)
    scored = [score_species(summary, groups[summary.species], config) for summary in summaries]
    return tuple(sorted(scored, key=priority_sort_key))


def priority_species(priorities: tuple[SpeciesPriority, ...]) -> tuple[SpeciesPriority, ...]:
    """Species in the Critical or High tiers, in input order."""
    return tuple(p for p in priorities if p.priority_level in PRIORITY_TIERS)
