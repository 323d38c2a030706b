"""Map each provider's raw rows onto the canonical ``Occurrence`` schema.

Field coercion never raises: an unparsable value becomes None and the
record carries on, so later stages must tolerate nulls anywhere except
``record_id`` and ``data_source``.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any

from conservation_priority.config import PipelineConfig
from conservation_priority.schemas import BasisOfRecord, DataSource, Occurrence, OccurrenceTable

# GBIF occurrence/search column set consumed here
GBIF_COLUMNS = (
    "species",
    "scientificName",
    "decimalLatitude",
    "decimalLongitude",
    "eventDate",
    "year",
    "month",
    "day",
    "basisOfRecord",
    "individualCount",
    "locality",
    "stateProvince",
    "coordinateUncertaintyInMeters",
    "occurrenceID",
)

BASIS_OF_RECORD_VALUES = frozenset(b.value for b in BasisOfRecord)

# iNaturalist export column set consumed here
INAT_COLUMNS = (
    "scientific_name",
    "common_name",
    "latitude",
    "longitude",
    "observed_on",
    "quality_grade",
    "place_guess",
    "user_login",
    "id",
)


# =============================================================================
# Field coercion
# =============================================================================


def _to_str(value: Any) -> str | None:
    """Stripped string, None for missing/blank."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


def _to_float(value: Any) -> float | None:
    """Finite float, None for anything unparsable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _to_non_negative(value: float | int | None) -> Any:
    if value is None or value < 0:
        return None
    return value


def _to_date(value: Any) -> date | None:
    """Parse the calendar date part of an ISO date/datetime/interval string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _to_str(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _to_basis(value: Any) -> str | None:
    """Map GBIF enum spellings (``HUMAN_OBSERVATION``) onto Darwin Core terms.

    Values outside ``BasisOfRecord`` pass through unchanged.
    """
    text = _to_str(value)
    if text is None or text in BASIS_OF_RECORD_VALUES:
        return text
    camel = "".join(part.capitalize() for part in text.split("_"))
    if camel in BASIS_OF_RECORD_VALUES:
        return camel
    return text


def _valid_month(value: int | None) -> int | None:
    return value if value is not None and 1 <= value <= 12 else None


def _valid_day(value: int | None) -> int | None:
    return value if value is not None and 1 <= value <= 31 else None


# =============================================================================
# Providers
# =============================================================================


def reconcile_gbif_row(row: dict[str, Any]) -> Occurrence:
    """Conform one GBIF row.

    ``individualCount`` keeps its original (possibly missing) value. The
    provider's own year/month/day columns win; they fall back to the parsed
    ``eventDate`` when absent.
    """
    event_date = _to_date(row.get("eventDate"))
    year = _to_int(row.get("year"))
    month = _valid_month(_to_int(row.get("month")))
    day = _valid_day(_to_int(row.get("day")))
    if event_date is not None:
        year = year if year is not None else event_date.year
        month = month if month is not None else event_date.month
        day = day if day is not None else event_date.day

    record_id = row.get("occurrenceID") or row.get("gbifID") or row.get("key")
    return Occurrence(
        species=_to_str(row.get("species")),
        scientific_name=_to_str(row.get("scientificName")),
        latitude=_to_float(row.get("decimalLatitude")),
        longitude=_to_float(row.get("decimalLongitude")),
        date=event_date,
        year=year,
        month=month,
        day=day,
        basis_of_record=_to_basis(row.get("basisOfRecord")),
        individual_count=_to_non_negative(_to_int(row.get("individualCount"))),
        locality=_to_str(row.get("locality")),
        state_province=_to_str(row.get("stateProvince")),
        coordinate_uncertainty_m=_to_non_negative(
            _to_float(row.get("coordinateUncertaintyInMeters"))
        ),
        record_id=_to_str(record_id) or "",
        data_source=DataSource.GBIF,
    )


def reconcile_inat_row(row: dict[str, Any], region_name: str) -> Occurrence:
    """Conform one iNaturalist row.

    Citizen-science records are single human observations without a
    coordinate uncertainty, attributed to the study region.
    """
    observed_on = _to_date(row.get("observed_on"))
    name = _to_str(row.get("scientific_name"))
    return Occurrence(
        species=name,
        scientific_name=name,
        common_name=_to_str(row.get("common_name")),
        latitude=_to_float(row.get("latitude")),
        longitude=_to_float(row.get("longitude")),
        date=observed_on,
        year=observed_on.year if observed_on else None,
        month=observed_on.month if observed_on else None,
        day=observed_on.day if observed_on else None,
        basis_of_record=BasisOfRecord.HUMAN_OBSERVATION.value,
        individual_count=1,
        locality=_to_str(row.get("place_guess")),
        state_province=region_name,
        coordinate_uncertainty_m=None,
        quality_grade=_to_str(row.get("quality_grade")),
        observer=_to_str(row.get("user_login")),
        record_id=_to_str(row.get("id")) or "",
        data_source=DataSource.INATURALIST,
    )


def reconcile_gbif(rows: list[dict[str, Any]]) -> OccurrenceTable:
    """Conform a GBIF record set, preserving input order."""
    return tuple(reconcile_gbif_row(row) for row in rows)


def reconcile_inat(rows: list[dict[str, Any]], config: PipelineConfig) -> OccurrenceTable:
    """Conform an iNaturalist record set, preserving input order."""
    return tuple(reconcile_inat_row(row, config.region_name) for row in rows)


def combine(*tables: OccurrenceTable) -> OccurrenceTable:
    """Concatenate conformed tables in argument order."""
    return tuple(occ for table in tables for occ in table)
