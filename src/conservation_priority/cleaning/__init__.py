"""Record-level cleaning: reconcile, filter, deduplicate, normalize names.

Stages run in this order (see ``pipeline.py``)::

    reconcile_gbif / reconcile_inat -> combine
        -> apply_quality_filters -> remove_duplicates -> normalize_species

Rules:
  - Every stage takes an ``OccurrenceTable`` (tuple) and returns a new one.
  - No I/O, no printing, no Prefect decorators. Diagnostics are returned
    as dataclasses next to the records.
"""

from conservation_priority.cleaning.dedup import DedupResult, remove_duplicates
from conservation_priority.cleaning.quality import (
    FilterReport,
    FilterResult,
    StageCount,
    apply_quality_filters,
)
from conservation_priority.cleaning.reconcile import combine, reconcile_gbif, reconcile_inat
from conservation_priority.cleaning.taxonomy import (
    NormalizationResult,
    binomial,
    normalize_species,
)

__all__ = [
    "DedupResult",
    "FilterReport",
    "FilterResult",
    "NormalizationResult",
    "StageCount",
    "apply_quality_filters",
    "binomial",
    "combine",
    "normalize_species",
    "reconcile_gbif",
    "reconcile_inat",
    "remove_duplicates",
]
