"""
GBIF API client.

Low-level HTTP client for the GBIF occurrence search API.

API docs: https://techdocs.gbif.org/en/openapi/v1/occurrence
Paging: ``offset`` + ``limit`` (max 300); search results are capped at
100,000 records per query, larger pulls need the download API.
"""

from __future__ import annotations

from typing import Any

from conservation_priority.services.http import session

# Taxon keys (GBIF backbone)
AVES = 212

API_BASE = "https://api.gbif.org/v1"
MAX_LIMIT = 300
MAX_OFFSET = 100_000


def _get(endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    url = f"{API_BASE}/{endpoint}"
    resp = session.get(url, params=params or {})
    resp.raise_for_status()
    data: dict[str, Any] = resp.json()
    return data


def search_occurrences(params: dict[str, Any]) -> dict[str, Any]:
    """GET /occurrence/search: one page of occurrences."""
    return _get("occurrence/search", params)


def search_occurrences_paginated(
    params: dict[str, Any],
    *,
    max_records: int = 10_000,
) -> list[dict[str, Any]]:
    """
    Page through /occurrence/search with ``offset``/``limit``.

    Stops at ``endOfRecords``, an empty page, ``max_records``, or the
    search API's offset ceiling.
    """
    all_results: list[dict[str, Any]] = []
    offset = 0
    while len(all_results) < max_records and offset < MAX_OFFSET:
        limit = min(MAX_LIMIT, max_records - len(all_results))
        data = search_occurrences({**params, "offset": offset, "limit": limit})
        results: list[dict[str, Any]] = data.get("results", [])
        all_results.extend(results)
        if not results or data.get("endOfRecords", True):
            break
        offset += len(results)
    return all_results[:max_records]
