"""iNaturalist observation fetching, flattened to the export column set."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from conservation_priority.datasources.inaturalist import client

if TYPE_CHECKING:
    from conservation_priority.config import BoundingBox


def _split_location(location: Any) -> tuple[str | None, str | None]:
    """Split the API's ``"lat,lon"`` string; (None, None) when absent or malformed."""
    if not location:
        return None, None
    parts = str(location).split(",")
    if len(parts) != 2:
        return None, None
    return parts[0].strip(), parts[1].strip()


def flatten_observation(obs: dict[str, Any]) -> dict[str, Any]:
    """Flatten one API result into the CSV-export style row the reconciler reads.

    Coordinates stay as strings; the reconciler does the numeric coercion.
    """
    taxon = obs.get("taxon") or {}
    user = obs.get("user") or {}
    latitude, longitude = _split_location(obs.get("location"))
    return {
        "scientific_name": taxon.get("name"),
        "common_name": taxon.get("preferred_common_name"),
        "latitude": latitude,
        "longitude": longitude,
        "observed_on": obs.get("observed_on"),
        "quality_grade": obs.get("quality_grade"),
        "place_guess": obs.get("place_guess"),
        "user_login": user.get("login"),
        "id": obs.get("id"),
    }


def fetch_observations(
    bbox: BoundingBox,
    *,
    taxon_id: int = client.AVES,
    quality_grade: str = "research",
    max_pages: int = 50,
) -> list[dict[str, Any]]:
    """
    Fetch verified iNaturalist observations inside a bounding box.

    Args:
        bbox: Study region.
        taxon_id: iNaturalist taxon (default: Aves).
        quality_grade: Filter by quality grade.
        max_pages: Maximum API pages to fetch (200 results each).

    Returns:
        Flat iNaturalist rows in ascending id order.
    """
    params: dict[str, Any] = {
        "taxon_id": taxon_id,
        **bbox.as_inat_params(),
        "quality_grade": quality_grade,
        "verifiable": "true",
    }
    raw = client.get_observations_paginated(params, max_pages=max_pages)
    return [flatten_observation(obs) for obs in raw]
