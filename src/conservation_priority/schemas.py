"""
Domain models for the conservation priority pipeline.

``Occurrence`` is the canonical record both providers are reconciled into.
It is frozen: every pipeline stage returns new records (``model_copy``)
instead of mutating, so any intermediate table can be reused safely.
"""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field

# =============================================================================
# Enums
# =============================================================================


class DataSource(StrEnum):
    """Provider an occurrence came from."""

    GBIF = "GBIF"
    INATURALIST = "iNaturalist"


class BasisOfRecord(StrEnum):
    """Darwin Core basisOfRecord values seen in practice."""

    HUMAN_OBSERVATION = "HumanObservation"
    PRESERVED_SPECIMEN = "PreservedSpecimen"
    MACHINE_OBSERVATION = "MachineObservation"
    MATERIAL_SAMPLE = "MaterialSample"
    OCCURRENCE = "Occurrence"
    LIVING_SPECIMEN = "LivingSpecimen"
    FOSSIL_SPECIMEN = "FossilSpecimen"
    MATERIAL_CITATION = "MaterialCitation"


class Season(StrEnum):
    WINTER = "Winter"
    SPRING = "Spring"
    SUMMER = "Summer"
    AUTUMN = "Autumn"


class PriorityLevel(StrEnum):
    """Discrete conservation priority tier."""

    CRITICAL = "Critical Priority"
    HIGH = "High Priority"
    MEDIUM = "Medium Priority"
    LOW = "Low Priority"


_SEASON_BY_MONTH: dict[int, Season] = {
    12: Season.WINTER,
    1: Season.WINTER,
    2: Season.WINTER,
    3: Season.SPRING,
    4: Season.SPRING,
    5: Season.SPRING,
    6: Season.SUMMER,
    7: Season.SUMMER,
    8: Season.SUMMER,
    9: Season.AUTUMN,
    10: Season.AUTUMN,
    11: Season.AUTUMN,
}


def season_for_month(month: int | None) -> Season | None:
    """Meteorological season for a month number, None if unknown."""
    if month is None:
        return None
    return _SEASON_BY_MONTH.get(month)


# =============================================================================
# Canonical occurrence
# =============================================================================


class Occurrence(BaseModel):
    """A single species observation, normalized across providers.

    Coordinates, species and dates may be missing straight out of the
    reconciler; the quality filter guarantees species and in-bounds
    coordinates on everything it retains.
    """

    model_config = ConfigDict(frozen=True)

    species: str | None
    scientific_name: str | None = None
    original_name: str | None = None
    common_name: str | None = None
    latitude: float | None
    longitude: float | None
    date: dt.date | None = None
    year: int | None = None
    month: int | None = None
    day: int | None = None
    basis_of_record: str | None = None
    individual_count: int | None = Field(default=1, ge=0)
    locality: str | None = None
    state_province: str | None = None
    coordinate_uncertainty_m: float | None = Field(default=None, ge=0)
    quality_grade: str | None = None
    observer: str | None = None
    record_id: str
    data_source: DataSource

    @computed_field  # type: ignore[prop-decorator]
    @property
    def season(self) -> Season | None:
        return season_for_month(self.month)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def decade(self) -> int | None:
        if self.year is None:
            return None
        return (self.year // 10) * 10


#: Column order for the canonical occurrence table.
OCCURRENCE_COLUMNS: list[str] = [
    "species",
    "scientific_name",
    "original_name",
    "common_name",
    "latitude",
    "longitude",
    "date",
    "year",
    "month",
    "day",
    "basis_of_record",
    "individual_count",
    "locality",
    "state_province",
    "coordinate_uncertainty_m",
    "quality_grade",
    "observer",
    "record_id",
    "data_source",
    "season",
    "decade",
]

#: An immutable snapshot of the occurrence table, in row order.
OccurrenceTable = tuple[Occurrence, ...]
