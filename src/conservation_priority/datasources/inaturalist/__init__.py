"""iNaturalist observation data source.

Public API:
  - client: Low-level HTTP (rate-limited, ``id_above`` paging)
  - observations: fetch_observations, flatten_observation
"""

from conservation_priority.datasources.inaturalist.client import AVES
from conservation_priority.datasources.inaturalist.observations import (
    fetch_observations,
    flatten_observation,
)

__all__ = ["AVES", "fetch_observations", "flatten_observation"]
