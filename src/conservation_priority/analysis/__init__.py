"""Aggregation and scoring over the cleaned occurrence table.

Dependency rule: analysis/ imports ``schemas`` and ``config`` only.
It never fetches data, touches the store, or produces HTML.

Modules:
  - grid: occurrence -> grid cell key (round half away from zero)
  - species: per-species counts and temporal extent
  - priority: rarity / range / trend sub-scores -> species priority tier
  - area: per-cell richness metrics -> area priority tier
  - exploratory: descriptive tables (records by year/season, frequency classes)

Adding an analysis module
-------------------------
1. Create ``analysis/{name}.py`` with a pure function over an
   ``OccurrenceTable`` (and, if needed, earlier results)::

       def summarize_something(
           records: OccurrenceTable,
           config: PipelineConfig,
       ) -> tuple[SomeRow, ...]:
           ...

2. Return frozen dataclasses sorted by a documented key so reruns are
   byte-identical.

3. Wire it into ``pipeline.run_pipeline`` and add tests in
   ``tests/test_{name}.py``.
"""

from conservation_priority.analysis.area import (
    GridCell,
    conservation_gaps,
    critical_areas,
    priority_areas,
    score_cells,
)
from conservation_priority.analysis.grid import GridKey, grid_key, snap
from conservation_priority.analysis.priority import (
    SpeciesPriority,
    priority_species,
    score_all_species,
    tier_for,
)
from conservation_priority.analysis.species import SpeciesSummary, summarize_species

__all__ = [
    "GridCell",
    "GridKey",
    "SpeciesPriority",
    "SpeciesSummary",
    "conservation_gaps",
    "critical_areas",
    "grid_key",
    "priority_areas",
    "priority_species",
    "score_all_species",
    "score_cells",
    "snap",
    "summarize_species",
    "tier_for",
]
