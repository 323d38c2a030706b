"""
Tests for the build flow module.
"""

from __future__ import annotations

import csv
import json
from typing import TYPE_CHECKING

from conservation_priority.flows import build
from conservation_priority.pipeline import run_pipeline
from conservation_priority.schemas import OCCURRENCE_COLUMNS
from conservation_priority.store import DataStore

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def write_envelope(base_dir: Path, path: str, data: object, source: str = "test") -> None:
    """Write test data in the metadata envelope format."""
    full = base_dir / path
    full.parent.mkdir(parents=True, exist_ok=True)
    envelope = {
        "meta": {"source": source, "fetched_at": "2026-02-04T12:00:00+00:00"},
        "data": data,
    }
    full.write_text(json.dumps(envelope))


def read_csv(path: Path) -> list[dict[str, str]]:
    with path.open(newline="") as f:
        return list(csv.DictReader(f))


GBIF_ROWS = [
    {
        "species": "Corvus corax",
        "scientificName": "Corvus corax",
        "decimalLatitude": 35.5,
        "decimalLongitude": 74.5,
        "eventDate": "2019-05-14",
        "occurrenceID": "g1",
    },
    {
        "species": "Aquila chrysaetos",
        "scientificName": "Aquila chrysaetos",
        "decimalLatitude": 36.0,
        "decimalLongitude": 74.0,
        "eventDate": "2021-06-01",
        "occurrenceID": "g2",
    },
]

INAT_ROWS = [
    {
        "scientific_name": "Corvus corax",
        "latitude": "35.5",
        "longitude": "74.5",
        "observed_on": "2019-05-14",
        "id": 1,
    },
    {
        "scientific_name": "Pica pica",
        "latitude": "35.2",
        "longitude": "75.1",
        "observed_on": "2022-01-09",
        "id": 2,
    },
]


def use_store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> DataStore:
    ds = DataStore(tmp_path)
    monkeypatch.setattr(build, "store", ds)
    monkeypatch.setattr(build, "REPORT_PATH", ds.outputs / "report.html")
    return ds


class TestLoadTasks:
    """Test loading raw provider rows from the store."""

    def test_load_gbif_exists(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        use_store(tmp_path, monkeypatch)
        write_envelope(tmp_path, "raw/gbif.json", GBIF_ROWS, source="api.gbif.org")
        assert build.load_gbif() == GBIF_ROWS

    def test_load_gbif_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        use_store(tmp_path, monkeypatch)
        assert build.load_gbif() is None

    def test_load_inaturalist_exists(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        use_store(tmp_path, monkeypatch)
        write_envelope(tmp_path, "raw/inaturalist.json", INAT_ROWS)
        assert build.load_inaturalist() == INAT_ROWS


class TestWriteTables:
    """Test writing every output table."""

    def test_all_tables_written(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        use_store(tmp_path, monkeypatch)
        paths = build.write_tables(run_pipeline(GBIF_ROWS, INAT_ROWS))

        names = sorted(p.relative_to(tmp_path).as_posix() for p in paths)
        assert names == [
            "outputs/critical_areas.csv",
            "outputs/grid_priority.csv",
            "outputs/high_priority_areas.csv",
            "outputs/high_priority_species.csv",
            "outputs/rare_species.csv",
            "outputs/species_priority.csv",
            "outputs/top_species.csv",
            "outputs/yearly_summary.csv",
            "processed/cleaning_summary.csv",
            "processed/occurrences.csv",
            "processed/species_list.csv",
        ]
        for path in paths:
            assert path.with_suffix(".csv.meta.json").exists()

    def test_occurrence_table(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        use_store(tmp_path, monkeypatch)
        build.write_tables(run_pipeline(GBIF_ROWS, INAT_ROWS))

        rows = read_csv(tmp_path / "processed" / "occurrences.csv")
        assert list(rows[0]) == OCCURRENCE_COLUMNS
        assert [r["record_id"] for r in rows] == ["g1", "g2", "2"]
        assert rows[0]["data_source"] == "GBIF"
        assert rows[0]["season"] == "Spring"
        assert rows[0]["coordinate_uncertainty_m"] == ""

    def test_species_priority_table(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        use_store(tmp_path, monkeypatch)
        build.write_tables(run_pipeline(GBIF_ROWS, INAT_ROWS))

        rows = read_csv(tmp_path / "outputs" / "species_priority.csv")
        assert {r["species"] for r in rows} == {"Corvus corax", "Aquila chrysaetos", "Pica pica"}
        assert all(r["priority_level"].endswith("Priority") for r in rows)

    def test_species_lists(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Top and rare species tables are written from the species summary."""
        use_store(tmp_path, monkeypatch)
        build.write_tables(run_pipeline(GBIF_ROWS, INAT_ROWS))

        top = read_csv(tmp_path / "outputs" / "top_species.csv")
        rare = read_csv(tmp_path / "outputs" / "rare_species.csv")
        expected = ["Aquila chrysaetos", "Corvus corax", "Pica pica"]
        assert [r["species"] for r in top] == expected
        assert [r["species"] for r in rare] == expected
        assert all(r["total_records"] == "1" for r in rare)

    def test_critical_areas_subset_of_grid(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        use_store(tmp_path, monkeypatch)
        build.write_tables(run_pipeline(GBIF_ROWS, INAT_ROWS))

        grid = read_csv(tmp_path / "outputs" / "grid_priority.csv")
        critical = read_csv(tmp_path / "outputs" / "critical_areas.csv")
        assert all(r["area_priority_level"] == "Critical Priority" for r in critical)
        assert len(critical) == sum(r["area_priority_level"] == "Critical Priority" for r in grid)


class TestBuildAllFlow:
    """Test the main build flow."""

    def test_build_all_no_data(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nothing fetched yet: error result, nothing written."""
        use_store(tmp_path, monkeypatch)
        result = build.build_all()
        assert result == {"error": "no data"}
        assert not (tmp_path / "outputs").exists()

    def test_build_all_gbif_only(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        use_store(tmp_path, monkeypatch)
        write_envelope(tmp_path, "raw/gbif.json", GBIF_ROWS)

        result = build.build_all()

        assert result["occurrences"] == 2
        assert result["species"] == 2

    def test_build_all_with_all_data(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        use_store(tmp_path, monkeypatch)
        write_envelope(tmp_path, "raw/gbif.json", GBIF_ROWS)
        write_envelope(tmp_path, "raw/inaturalist.json", INAT_ROWS)

        result = build.build_all()

        assert result["occurrences"] == 3
        assert result["species"] == 3
        assert result["grid_cells"] == 3
        assert len(result["tables"]) == 8
        report = tmp_path / "outputs" / "report.html"
        assert result["report"] == str(report)
        assert "Conservation priorities" in report.read_text()



class TestPrintCleaningReport:
    """Test the stage-by-stage console report."""

    def test_running_counts(self, capsys: pytest.CaptureFixture[str]) -> None:
        build.print_cleaning_report(run_pipeline(GBIF_ROWS, INAT_ROWS))

        out = capsys.readouterr().out
        assert "Combined records: 4" in out
        assert "after bounding_box filter: 4" in out
        assert "Duplicates removed: 1" in out
        assert "Species names: 3 -> 3" in out
        assert "Rare species identified: 3" in out
