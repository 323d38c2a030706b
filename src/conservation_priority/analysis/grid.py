"""Assign occurrences to fixed-size lat/lon grid cells."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from conservation_priority.schemas import Occurrence


class GridKey(NamedTuple):
    """Cell centre, in the same (lon, lat) order as the output table."""

    grid_lon: float
    grid_lat: float


def snap(value: float, cell_size: float) -> float:
    """Round ``value`` to the nearest multiple of ``cell_size``, ties away from zero.

    Works on the shortest decimal repr of both floats so that 0.25 / 0.1 is
    exactly 2.5 (and rounds to 3) rather than 2.4999999999999996.
    """
    size = Decimal(repr(cell_size))
    steps = (Decimal(repr(value)) / size).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return float(steps * size)


def grid_key(occ: Occurrence, cell_size: float) -> GridKey:
    """Grid cell for a quality-filtered occurrence (coordinates required)."""
    if occ.latitude is None or occ.longitude is None:
        msg = f"Occurrence {occ.record_id} has no coordinates"
        raise ValueError(msg)
    return GridKey(
        grid_lon=snap(occ.longitude, cell_size),
        grid_lat=snap(occ.latitude, cell_size),
    )
