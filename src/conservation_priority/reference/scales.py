"""Score step tables and tier thresholds.

Step tables are ``(inclusive upper bound, score)`` pairs evaluated in
ascending order; the first bound that is >= the value wins, otherwise the
fallback score applies.
"""

from __future__ import annotations

# totalRecords -> rarity score
RARITY_STEPS: tuple[tuple[int, float], ...] = ((5, 100), (10, 80), (20, 60), (50, 40), (100, 20))
RARITY_FALLBACK = 10.0

# distinct grid cells -> range-restriction score
RANGE_STEPS: tuple[tuple[int, float], ...] = ((2, 100), (5, 80), (10, 60), (20, 40), (50, 20))
RANGE_FALLBACK = 10.0

# Lower bounds (inclusive) for Critical / High / Medium; anything below is Low
SPECIES_TIER_THRESHOLDS = (80.0, 60.0, 40.0)
AREA_TIER_THRESHOLDS = (70.0, 50.0, 30.0)

# totalRecords lower bound -> frequency category label, checked top-down
FREQUENCY_CATEGORIES: tuple[tuple[int, str], ...] = (
    (100, "Very Common (100+)"),
    (50, "Common (50-99)"),
    (20, "Moderate (20-49)"),
    (10, "Uncommon (10-19)"),
    (5, "Rare (5-9)"),
    (0, "Very Rare (1-4)"),
)
