"""Geographic bounds for the study region."""

from __future__ import annotations

# Gilgit-Baltistan, Pakistan (decimal degrees)
STUDY_REGION_NAME = "Gilgit-Baltistan"

STUDY_REGION_BBOX: dict[str, float] = {
    "lat_min": 34.0,
    "lat_max": 37.0,
    "lon_min": 72.0,
    "lon_max": 77.5,
}

# Coordinates of the "null island" data-entry error
NULL_ISLAND = (0.0, 0.0)
