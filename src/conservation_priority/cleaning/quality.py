"""Ordered quality filters over the canonical occurrence table.

Each predicate runs against the output of the previous one and the retained
count after every stage is reported. A record rejected at any stage is never
seen again. All predicates are stable, so filtering an already-filtered table
returns it unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from conservation_priority.config import PipelineConfig
from conservation_priority.reference.geography import NULL_ISLAND
from conservation_priority.schemas import Occurrence, OccurrenceTable

Predicate = Callable[[Occurrence, PipelineConfig], bool]

MISSING_SPECIES_MARKERS = frozenset({"", "NA"})


@dataclass(frozen=True)
class StageCount:
    """Records retained after one filter stage."""

    stage: str
    retained: int


@dataclass(frozen=True)
class FilterReport:
    """Stage-by-stage diagnostics for one filter run."""

    input_count: int
    stages: list[StageCount] = field(default_factory=list)

    @property
    def output_count(self) -> int:
        return self.stages[-1].retained if self.stages else self.input_count

    @property
    def removed(self) -> int:
        return self.input_count - self.output_count

    @property
    def percent_removed(self) -> float:
        if self.input_count == 0:
            return 0.0
        return round(self.removed / self.input_count * 100, 1)


@dataclass(frozen=True)
class FilterResult:
    records: OccurrenceTable
    report: FilterReport


# =============================================================================
# Predicates
# =============================================================================


def has_species(occ: Occurrence, _config: PipelineConfig) -> bool:
    return occ.species is not None and occ.species.strip() not in MISSING_SPECIES_MARKERS


def has_coordinates(occ: Occurrence, _config: PipelineConfig) -> bool:
    return occ.latitude is not None and occ.longitude is not None


def within_bounding_box(occ: Occurrence, config: PipelineConfig) -> bool:
    if occ.latitude is None or occ.longitude is None:
        return False
    return config.bounding_box.contains(occ.latitude, occ.longitude)


def not_null_island(occ: Occurrence, _config: PipelineConfig) -> bool:
    # Exact (0, 0) only; (0, 74) passes
    return (occ.latitude, occ.longitude) != NULL_ISLAND


def uncertainty_acceptable(occ: Occurrence, config: PipelineConfig) -> bool:
    return (
        occ.coordinate_uncertainty_m is None
        or occ.coordinate_uncertainty_m <= config.uncertainty_ceiling_m
    )


#: Applied in this order.
QUALITY_STAGES: list[tuple[str, Predicate]] = [
    ("species", has_species),
    ("coordinates", has_coordinates),
    ("bounding_box", within_bounding_box),
    ("null_island", not_null_island),
    ("uncertainty", uncertainty_acceptable),
]


def apply_quality_filters(records: OccurrenceTable, config: PipelineConfig) -> FilterResult:
    """Run every quality stage in order, reporting the running retained count."""
    current = records
    stages: list[StageCount] = []
    for name, predicate in QUALITY_STAGES:
        current = tuple(occ for occ in current if predicate(occ, config))
        stages.append(StageCount(stage=name, retained=len(current)))
    return FilterResult(
        records=current,
        report=FilterReport(input_count=len(records), stages=stages),
    )
