"""GBIF occurrence data source.

Public API:
  - client: Low-level HTTP (offset/limit paging)
  - occurrences: fetch_occurrences, flatten_occurrence
"""

from conservation_priority.datasources.gbif.client import AVES
from conservation_priority.datasources.gbif.occurrences import (
    fetch_occurrences,
    flatten_occurrence,
)

__all__ = ["AVES", "fetch_occurrences", "flatten_occurrence"]
