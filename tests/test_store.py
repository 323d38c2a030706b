"""Tests for the DataStore module."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

from conservation_priority.schemas import DataSource, Occurrence, PriorityLevel
from conservation_priority.store import DataStore, table_rows


@dataclass(frozen=True)
class Row:
    name: str
    level: PriorityLevel
    year: int | None


class TestDataStoreInit:
    """Test DataStore initialization."""

    def test_creates_tier_paths(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.base == tmp_path
        assert store.raw == tmp_path / "raw"
        assert store.processed == tmp_path / "processed"
        assert store.outputs == tmp_path / "outputs"


class TestDataStoreWrite:
    """Test writing data with metadata envelopes."""

    def test_write_creates_file(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        path = store.write(Path("raw/gbif.json"), [{"species": "Corvus corax"}], source="test")
        assert path.exists()

    def test_write_envelope_format(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        valid = datetime(2026, 3, 1, tzinfo=UTC)
        store.write(Path("raw/gbif.json"), [{"id": 1}], source="api.gbif.org", valid_until=valid)

        data = json.loads((tmp_path / "raw" / "gbif.json").read_text())
        assert data["meta"]["source"] == "api.gbif.org"
        assert "fetched_at" in data["meta"]
        assert data["meta"]["valid_until"] == valid.isoformat()
        assert data["data"] == [{"id": 1}]

    def test_write_extra_params(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(
            Path("raw/test.json"),
            [],
            source="test",
            bounding_box={"lat_min": 34.0, "lat_max": 37.0},
        )
        data = json.loads((tmp_path / "raw" / "test.json").read_text())
        assert data["meta"]["bounding_box"] == {"lat_min": 34.0, "lat_max": 37.0}

    def test_write_creates_parent_dirs(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("raw/deep/nested.json"), {}, source="test")
        assert (tmp_path / "raw" / "deep" / "nested.json").exists()

    def test_write_no_valid_until(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("processed/output.json"), {}, source="test")
        data = json.loads((tmp_path / "processed" / "output.json").read_text())
        assert "valid_until" not in data["meta"]

    def test_path_escaping_base_rejected(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path / "data")
        with pytest.raises(ValueError, match="escapes"):
            store.write(Path("../outside.json"), {}, source="test")


class TestDataStoreRead:
    """Test reading data from the store."""

    def test_read_returns_data_payload(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("raw/test.json"), {"key": "value"}, source="test")
        assert store.read(Path("raw/test.json")) == {"key": "value"}

    def test_read_missing_file(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.read(Path("nonexistent.json")) is None

    def test_read_raw_returns_full_envelope(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("raw/test.json"), {"key": "value"}, source="test")
        result = store.read_raw(Path("raw/test.json"))
        assert result is not None
        assert "meta" in result
        assert result["data"] == {"key": "value"}


class TestDataStoreIsFresh:
    """Test freshness checking."""

    def test_missing_file_not_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.is_fresh(Path("nonexistent.json")) is False

    def test_expired_file_not_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        past = datetime.now(UTC) - timedelta(hours=1)
        store.write(Path("raw/test.json"), {}, source="test", valid_until=past)
        assert store.is_fresh(Path("raw/test.json")) is False

    def test_future_valid_until_is_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        future = datetime.now(UTC) + timedelta(days=7)
        store.write(Path("raw/test.json"), {}, source="test", valid_until=future)
        assert store.is_fresh(Path("raw/test.json")) is True

    def test_no_valid_until_not_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("processed/test.json"), {}, source="test")
        assert store.is_fresh(Path("processed/test.json")) is False


class TestDataStoreTables:
    """Test CSV tables with sidecar metadata."""

    def test_write_table_columns_in_order(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        rows = [{"b": 2, "a": 1, "extra": "ignored"}]
        path = store.write_table(Path("outputs/t.csv"), rows, ["a", "b"], source="test")
        assert path.read_text().splitlines() == ["a,b", "1,2"]

    def test_write_table_sidecar(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        path = store.write_table(
            Path("outputs/t.csv"), [{"a": 1}, {"a": 2}], ["a"], source="test", run="x"
        )
        meta = json.loads(path.with_suffix(".csv.meta.json").read_text())["meta"]
        assert meta["source"] == "test"
        assert meta["rows"] == 2
        assert meta["run"] == "x"
        assert "valid_until" not in meta

    def test_table_not_fresh(self, tmp_path: Path) -> None:
        """Derived tables carry no expiry."""
        store = DataStore(tmp_path)
        store.write_table(Path("outputs/t.csv"), [], ["a"], source="test")
        assert store.is_fresh(Path("outputs/t.csv")) is False

    def test_read_table(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write_table(Path("processed/t.csv"), [{"a": 1, "b": ""}], ["a", "b"], source="t")
        assert store.read_table(Path("processed/t.csv")) == [{"a": "1", "b": ""}]

    def test_read_table_missing(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.read_table(Path("processed/missing.csv")) is None


class TestTableRows:
    """Test projecting records onto table columns."""

    def test_dataclass_rows(self) -> None:
        rows = table_rows([Row("a", PriorityLevel.HIGH, None)], ["name", "level", "year"])
        assert rows == [{"name": "a", "level": "High Priority", "year": ""}]

    def test_pydantic_rows_include_computed_fields(self) -> None:
        occ = Occurrence(
            species="Corvus corax",
            latitude=35.5,
            longitude=74.5,
            date=date(2019, 7, 1),
            year=2019,
            month=7,
            record_id="1",
            data_source=DataSource.INATURALIST,
        )
        (row,) = table_rows([occ], ["species", "date", "data_source", "season", "decade"])
        assert row == {
            "species": "Corvus corax",
            "date": "2019-07-01",
            "data_source": "iNaturalist",
            "season": "Summer",
            "decade": 2010,
        }

    def test_mapping_rows(self) -> None:
        assert table_rows([{"a": 1, "b": 2}], ["b"]) == [{"b": 2}]
