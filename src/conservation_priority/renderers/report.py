"""HTML summary report of one pipeline run."""

from __future__ import annotations

import calendar
from collections import Counter
from typing import TYPE_CHECKING

from conservation_priority.analysis.area import conservation_gaps, priority_areas
from conservation_priority.analysis.exploratory import (
    frequency_table,
    records_by_month,
    records_by_season,
    records_by_source,
)
from conservation_priority.analysis.priority import priority_species
from conservation_priority.renderers import render_template
from conservation_priority.schemas import PriorityLevel

if TYPE_CHECKING:
    from conservation_priority.config import PipelineConfig
    from conservation_priority.pipeline import PipelineResult

TOP_N = 20


def tier_counts(levels: list[PriorityLevel]) -> dict[str, int]:
    """Count per tier, every tier present, Critical first."""
    counts = Counter(levels)
    return {level.value: counts[level] for level in PriorityLevel}


def build_report_html(
    result: PipelineResult,
    config: PipelineConfig,
    generated_at: str = "",
) -> str:
    """Render cleaning diagnostics, tier counts and the top priority tables."""
    cleaning = result.cleaning
    return render_template(
        "report.html.j2",
        generated_at=generated_at,
        region=config.region_name,
        summary=cleaning.summary,
        stages=cleaning.filter_report.stages,
        names_before=cleaning.names_before,
        names_after=cleaning.names_after,
        by_source=records_by_source(result.occurrences),
        by_season=records_by_season(result.occurrences),
        by_month={
            calendar.month_abbr[month]: n
            for month, n in records_by_month(result.occurrences).items()
        },
        frequency=frequency_table(result.species_summary),
        species_tiers=tier_counts([p.priority_level for p in result.species_priority]),
        area_tiers=tier_counts([c.area_priority_level for c in result.grid_priority]),
        top_species=priority_species(result.species_priority)[:TOP_N],
        top_areas=priority_areas(result.grid_priority)[:TOP_N],
        gaps=conservation_gaps(result.grid_priority, config),
        gap_richness_min=config.gap_richness_min,
    )
