"""Reduce species names to genus + species binomials."""

from __future__ import annotations

from dataclasses import dataclass

from conservation_priority.schemas import Occurrence, OccurrenceTable


@dataclass(frozen=True)
class NormalizationResult:
    records: OccurrenceTable
    names_before: int
    names_after: int


def binomial(name: str) -> str:
    """First two whitespace-separated tokens of a scientific name.

    "Passer domesticus domesticus" -> "Passer domesticus". A name with fewer
    than two tokens (e.g. a bare genus) is returned unchanged, stripped.
    """
    tokens = name.split()
    if len(tokens) < 2:
        return name.strip()
    return f"{tokens[0]} {tokens[1]}"


def normalize_species(records: OccurrenceTable) -> NormalizationResult:
    """Replace each species with its binomial, keeping the original in ``original_name``."""
    normalized = tuple(
        occ.model_copy(
            update={
                "original_name": occ.species,
                "species": binomial(occ.species) if occ.species is not None else None,
            }
        )
        for occ in records
    )
    return NormalizationResult(
        records=normalized,
        names_before=len({occ.species for occ in records}),
        names_after=len({occ.species for occ in normalized}),
    )
