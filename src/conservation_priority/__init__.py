"""Conservation Priority - species and area priorities from bird occurrence records.

Architecture::

    datasources/   External APIs (GBIF occurrence search, iNaturalist observations)
    store.py       Tiered file store with TTL (raw -> processed -> outputs)
    cleaning/      Record-level stages (reconcile, quality filter, dedup, names)
    analysis/      Aggregation and scoring (species, grid cells, exploratory tables)
    pipeline.py    Pure composition of cleaning + analysis over one snapshot
    renderers/     Pure data -> HTML (summary report)
    flows/         Prefect orchestration (fetch checks freshness, build writes tables)
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources -> store (raw) -> pipeline -> store (processed, outputs)

Extension points, see each package's docstring for step-by-step guides:
  - New data source:   datasources/__init__.py
  - New analysis:      analysis/__init__.py
"""

__version__ = "0.1.0"
__author__ = "Syed Inzimam Ali Shah"

from conservation_priority.config import (
    ConfigurationError,
    PipelineConfig,
    Settings,
    load_config,
)
from conservation_priority.pipeline import PipelineResult, run_pipeline
from conservation_priority.schemas import Occurrence

__all__ = [
    "ConfigurationError",
    "Occurrence",
    "PipelineConfig",
    "PipelineResult",
    "Settings",
    "__version__",
    "load_config",
    "run_pipeline",
]
