"""
Pipeline configuration and application settings.

``PipelineConfig`` is passed explicitly into every stage; nothing reads
module-level constants at run time. Defaults reproduce the
Gilgit-Baltistan analysis. Values can be overridden from a YAML file and/or
keyword arguments via ``load_config``.

``Settings`` holds application-level values (environment, debug flag, config path)
read from ``CONSERVATION_PRIORITY_*`` environment variables.
"""

from __future__ import annotations

import math
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from conservation_priority.reference import scales
from conservation_priority.reference.geography import STUDY_REGION_BBOX, STUDY_REGION_NAME

WEIGHT_TOLERANCE = 1e-6


class ConfigurationError(Exception):
    """Invalid pipeline configuration. Fatal, raised before any processing."""


# =============================================================================
# Pipeline configuration
# =============================================================================


class BoundingBox(BaseModel):
    """Inclusive lat/lon rectangle used to re-validate coordinates."""

    lat_min: float = STUDY_REGION_BBOX["lat_min"]
    lat_max: float = STUDY_REGION_BBOX["lat_max"]
    lon_min: float = STUDY_REGION_BBOX["lon_min"]
    lon_max: float = STUDY_REGION_BBOX["lon_max"]

    def contains(self, lat: float, lon: float) -> bool:
        return self.lat_min <= lat <= self.lat_max and self.lon_min <= lon <= self.lon_max

    def as_gbif_params(self) -> dict[str, str]:
        """``decimalLatitude``/``decimalLongitude`` range params for GBIF search."""
        return {
            "decimalLatitude": f"{self.lat_min},{self.lat_max}",
            "decimalLongitude": f"{self.lon_min},{self.lon_max}",
        }

    def as_inat_params(self) -> dict[str, float]:
        """``swlat``/``swlng``/``nelat``/``nelng`` params for iNaturalist search."""
        return {
            "swlat": self.lat_min,
            "swlng": self.lon_min,
            "nelat": self.lat_max,
            "nelng": self.lon_max,
        }


class StepScale(BaseModel):
    """Step function: inclusive upper bounds in ascending order, first match wins."""

    bounds: list[float]
    scores: list[float]
    fallback: float

    def score(self, value: float) -> float:
        for bound, score in zip(self.bounds, self.scores, strict=True):
            if value <= bound:
                return score
        return self.fallback


def _rarity_default() -> StepScale:
    return StepScale(
        bounds=[b for b, _ in scales.RARITY_STEPS],
        scores=[s for _, s in scales.RARITY_STEPS],
        fallback=scales.RARITY_FALLBACK,
    )


def _range_default() -> StepScale:
    return StepScale(
        bounds=[b for b, _ in scales.RANGE_STEPS],
        scores=[s for _, s in scales.RANGE_STEPS],
        fallback=scales.RANGE_FALLBACK,
    )


class TrendScoring(BaseModel):
    """Scores for the recent-minus-early observation trend."""

    disappeared: float = 100.0
    strong_decline_below: int = -5
    strong_decline: float = 80.0
    decline: float = 60.0
    stable_max: int = 5
    stable: float = 40.0
    increase: float = 20.0
    # Species without any dated occurrence get this instead of a computed score
    missing_default: float = 50.0


class SpeciesWeights(BaseModel):
    rarity: float = 0.40
    range: float = 0.30
    trend: float = 0.30


class AreaWeights(BaseModel):
    priority_richness: float = 0.50
    corrected_richness: float = 0.30
    total_richness: float = 0.20


class TierThresholds(BaseModel):
    """Inclusive lower bounds for Critical, High and Medium tiers."""

    critical: float
    high: float
    medium: float


class PipelineConfig(BaseModel):
    """All tunable inputs of the reconciliation + scoring pipeline."""

    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    region_name: str = STUDY_REGION_NAME
    uncertainty_ceiling_m: float = 10_000.0
    grid_cell_size_deg: float = 0.1
    trend_split_year: int = 2020
    rarity: StepScale = Field(default_factory=_rarity_default)
    range: StepScale = Field(default_factory=_range_default)
    trend: TrendScoring = Field(default_factory=TrendScoring)
    species_weights: SpeciesWeights = Field(default_factory=SpeciesWeights)
    area_weights: AreaWeights = Field(default_factory=AreaWeights)
    species_tiers: TierThresholds = Field(
        default_factory=lambda: TierThresholds(
            critical=scales.SPECIES_TIER_THRESHOLDS[0],
            high=scales.SPECIES_TIER_THRESHOLDS[1],
            medium=scales.SPECIES_TIER_THRESHOLDS[2],
        )
    )
    area_tiers: TierThresholds = Field(
        default_factory=lambda: TierThresholds(
            critical=scales.AREA_TIER_THRESHOLDS[0],
            high=scales.AREA_TIER_THRESHOLDS[1],
            medium=scales.AREA_TIER_THRESHOLDS[2],
        )
    )
    gap_richness_min: int = 30


def _check_weights(name: str, weights: dict[str, float]) -> None:
    negative = [k for k, w in weights.items() if w < 0]
    if negative:
        msg = f"{name}: negative weights {negative}"
        raise ConfigurationError(msg)
    total = sum(weights.values())
    if not math.isclose(total, 1.0, abs_tol=WEIGHT_TOLERANCE):
        msg = f"{name}: weights must sum to 1.0, got {total:g}"
        raise ConfigurationError(msg)


def _check_scale(name: str, scale: StepScale) -> None:
    if len(scale.bounds) != len(scale.scores):
        msg = f"{name}: {len(scale.bounds)} bounds but {len(scale.scores)} scores"
        raise ConfigurationError(msg)
    if any(b2 <= b1 for b1, b2 in zip(scale.bounds, scale.bounds[1:], strict=False)):
        msg = f"{name}: bounds must be strictly ascending, got {scale.bounds}"
        raise ConfigurationError(msg)


def _check_tiers(name: str, tiers: TierThresholds) -> None:
    if not tiers.critical > tiers.high > tiers.medium:
        msg = (
            f"{name}: thresholds must be strictly descending "
            f"(critical={tiers.critical}, high={tiers.high}, medium={tiers.medium})"
        )
        raise ConfigurationError(msg)


def validate_config(config: PipelineConfig) -> PipelineConfig:
    """Check cross-field constraints. Returns the config unchanged.

    Raises:
        ConfigurationError: On the first violated constraint.
    """
    bbox = config.bounding_box
    if bbox.lat_min > bbox.lat_max:
        msg = f"bounding_box: lat_min {bbox.lat_min} > lat_max {bbox.lat_max}"
        raise ConfigurationError(msg)
    if bbox.lon_min > bbox.lon_max:
        msg = f"bounding_box: lon_min {bbox.lon_min} > lon_max {bbox.lon_max}"
        raise ConfigurationError(msg)
    if not (-90 <= bbox.lat_min and bbox.lat_max <= 90):
        msg = "bounding_box: latitude must lie within [-90, 90]"
        raise ConfigurationError(msg)
    if not (-180 <= bbox.lon_min and bbox.lon_max <= 180):
        msg = "bounding_box: longitude must lie within [-180, 180]"
        raise ConfigurationError(msg)
    if not config.grid_cell_size_deg > 0:
        msg = f"grid_cell_size_deg must be positive, got {config.grid_cell_size_deg}"
        raise ConfigurationError(msg)
    if config.uncertainty_ceiling_m < 0:
        msg = f"uncertainty_ceiling_m must be >= 0, got {config.uncertainty_ceiling_m}"
        raise ConfigurationError(msg)

    _check_scale("rarity", config.rarity)
    _check_scale("range", config.range)
    if config.trend.strong_decline_below >= 0 or config.trend.stable_max < 0:
        msg = "trend: strong_decline_below must be negative and stable_max non-negative"
        raise ConfigurationError(msg)

    _check_weights("species_weights", config.species_weights.model_dump())
    _check_weights("area_weights", config.area_weights.model_dump())
    _check_tiers("species_tiers", config.species_tiers)
    _check_tiers("area_tiers", config.area_tiers)
    return config


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None, **overrides: Any) -> PipelineConfig:
    """
    Build and validate a ``PipelineConfig``.

    Args:
        path: Optional YAML file; its keys mirror ``PipelineConfig`` fields.
        **overrides: Field values applied on top of the file (nested dicts merge).

    Raises:
        ConfigurationError: If the file is missing/unreadable, a value has the
            wrong type, or a cross-field constraint fails.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise ConfigurationError(msg)
        try:
            with path.open() as f:
                loaded = yaml.safe_load(f) or {}
        except OSError as e:
            msg = f"Cannot read config file {path}: {e}"
            raise ConfigurationError(msg) from e
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {path}: {e}"
            raise ConfigurationError(msg) from e
        if not isinstance(loaded, dict):
            msg = f"Config file must contain a mapping: {path}"
            raise ConfigurationError(msg)
        raw = loaded

    try:
        config = PipelineConfig.model_validate(_merge(raw, overrides))
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
    return validate_config(config)


# =============================================================================
# Application settings
# =============================================================================

ENV_PREFIX = "CONSERVATION_PRIORITY_"


class Settings(BaseModel):
    """Application-level settings (not scoring parameters)."""

    app_name: str = "conservation-priority"
    app_env: str = "development"
    debug: bool = False
    config_path: Path | None = None

    @classmethod
    def from_env(cls) -> Settings:
        values: dict[str, Any] = {}
        for field in cls.model_fields:
            env_value = os.environ.get(f"{ENV_PREFIX}{field.upper()}")
            if env_value:
                values[field] = env_value
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            msg = f"Invalid {ENV_PREFIX}* environment variable: {e}"
            raise ConfigurationError(msg) from e


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings.from_env()
