"""Tests for per-species summaries."""

from __future__ import annotations

from conservation_priority.analysis.species import summarize_species
from conservation_priority.schemas import DataSource, Occurrence


def make_occurrence(
    species: str | None,
    year: int | None = 2019,
    source: DataSource = DataSource.GBIF,
    scientific_name: str | None = None,
) -> Occurrence:
    return Occurrence(
        species=species,
        scientific_name=scientific_name or species,
        latitude=35.5,
        longitude=74.5,
        year=year,
        record_id=f"{species}-{year}",
        data_source=source,
    )


class TestSummarizeSpecies:
    """Tests for summarize_species."""

    def test_counts_by_source(self) -> None:
        records = (
            make_occurrence("Corvus corax", 2015),
            make_occurrence("Corvus corax", 2021, DataSource.INATURALIST),
            make_occurrence("Corvus corax", 2018),
        )
        (summary,) = summarize_species(records)
        assert summary.species == "Corvus corax"
        assert summary.total_records == 3
        assert summary.gbif_records == 2
        assert summary.inat_records == 1
        assert (summary.first_year, summary.last_year) == (2015, 2021)

    def test_sorted_by_total_then_name(self) -> None:
        records = (
            make_occurrence("Passer domesticus"),
            make_occurrence("Corvus corax"),
            make_occurrence("Aquila chrysaetos"),
            make_occurrence("Corvus corax"),
        )
        species = [s.species for s in summarize_species(records)]
        assert species == ["Corvus corax", "Aquila chrysaetos", "Passer domesticus"]

    def test_order_independent(self) -> None:
        records = (
            make_occurrence("Passer domesticus", 2001),
            make_occurrence("Corvus corax", 2010),
            make_occurrence("Passer domesticus", 2020, DataSource.INATURALIST),
        )
        assert summarize_species(records) == summarize_species(tuple(reversed(records)))

    def test_years_all_missing(self) -> None:
        (summary,) = summarize_species((make_occurrence("Corvus corax", None),))
        assert summary.first_year is None
        assert summary.last_year is None

    def test_representative_scientific_name(self) -> None:
        """Most frequent authority string wins, ties alphabetical."""
        records = (
            make_occurrence("Corvus corax", scientific_name="Corvus corax Linnaeus, 1758"),
            make_occurrence("Corvus corax", scientific_name="Corvus corax tibetanus"),
            make_occurrence("Corvus corax", scientific_name="Corvus corax tibetanus"),
            make_occurrence("Passer domesticus", scientific_name="Passer domesticus B"),
            make_occurrence("Passer domesticus", scientific_name="Passer domesticus A"),
        )
        names = {s.species: s.scientific_name for s in summarize_species(records)}
        assert names["Corvus corax"] == "Corvus corax tibetanus"
        assert names["Passer domesticus"] == "Passer domesticus A"

    def test_records_without_species_skipped(self) -> None:
        records = (make_occurrence(None), make_occurrence("Corvus corax"))
        assert [s.species for s in summarize_species(records)] == ["Corvus corax"]

    def test_empty(self) -> None:
        assert summarize_species(()) == ()
