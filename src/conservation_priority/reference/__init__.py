"""Static constants for the study region and the priority scoring scales.

Reference data that doesn't change between runs: the default bounding box,
the step tables used for rarity / range scores, and the tier labels.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from conservation_priority.reference.geography import STUDY_REGION_BBOX as STUDY_REGION_BBOX
from conservation_priority.reference.geography import STUDY_REGION_NAME as STUDY_REGION_NAME
from conservation_priority.reference.scales import AREA_TIER_THRESHOLDS as AREA_TIER_THRESHOLDS
from conservation_priority.reference.scales import FREQUENCY_CATEGORIES as FREQUENCY_CATEGORIES
from conservation_priority.reference.scales import RANGE_STEPS as RANGE_STEPS
from conservation_priority.reference.scales import RARITY_STEPS as RARITY_STEPS
from conservation_priority.reference.scales import (
    SPECIES_TIER_THRESHOLDS as SPECIES_TIER_THRESHOLDS,
)
