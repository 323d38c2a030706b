"""
Tests for the iNaturalist observation data source.
"""

from __future__ import annotations

from unittest.mock import Mock, patch

from conservation_priority.cleaning.reconcile import INAT_COLUMNS, reconcile_inat_row
from conservation_priority.config import BoundingBox
from conservation_priority.datasources.inaturalist import client, observations

# =============================================================================
# Fixtures / Sample API Responses
# =============================================================================

SAMPLE_OBSERVATIONS: list[dict] = [
    {
        "id": 100001,
        "location": "35.92,74.31",
        "observed_on": "2023-06-15",
        "quality_grade": "research",
        "place_guess": "Gilgit, Pakistan",
        "taxon": {
            "name": "Passer domesticus",
            "preferred_common_name": "House Sparrow",
        },
        "user": {"login": "birder"},
    },
    {
        "id": 100002,
        "location": "36.31,74.65",
        "observed_on": "2023-06-16",
        "quality_grade": "research",
        "place_guess": None,
        "taxon": {"name": "Corvus corax"},
        "user": {"login": "raven_fan"},
    },
]


def mock_response(payload: dict) -> Mock:
    resp = Mock()
    resp.json.return_value = payload
    resp.raise_for_status = Mock()
    return resp


class TestFlattenObservation:
    """Tests for flattening API results into export-style rows."""

    def test_full_observation(self) -> None:
        row = observations.flatten_observation(SAMPLE_OBSERVATIONS[0])
        assert row == {
            "scientific_name": "Passer domesticus",
            "common_name": "House Sparrow",
            "latitude": "35.92",
            "longitude": "74.31",
            "observed_on": "2023-06-15",
            "quality_grade": "research",
            "place_guess": "Gilgit, Pakistan",
            "user_login": "birder",
            "id": 100001,
        }

    def test_columns_match_reconciler(self) -> None:
        row = observations.flatten_observation(SAMPLE_OBSERVATIONS[1])
        assert tuple(row) == INAT_COLUMNS

    def test_missing_common_name(self) -> None:
        row = observations.flatten_observation(SAMPLE_OBSERVATIONS[1])
        assert row["common_name"] is None

    def test_missing_location(self) -> None:
        row = observations.flatten_observation({"id": 1, "taxon": {"name": "Corvus corax"}})
        assert row["latitude"] is None
        assert row["longitude"] is None

    def test_bad_location(self) -> None:
        row = observations.flatten_observation({"id": 1, "location": "35.9"})
        assert (row["latitude"], row["longitude"]) == (None, None)

    def test_missing_taxon_and_user(self) -> None:
        row = observations.flatten_observation({"id": 1})
        assert row["scientific_name"] is None
        assert row["user_login"] is None

    def test_reconciles(self) -> None:
        """Flattened rows feed straight into the reconciler."""
        occ = reconcile_inat_row(
            observations.flatten_observation(SAMPLE_OBSERVATIONS[0]), "Gilgit-Baltistan"
        )
        assert occ.species == "Passer domesticus"
        assert (occ.latitude, occ.longitude) == (35.92, 74.31)
        assert occ.record_id == "100001"


class TestPagination:
    """Tests for id_above pagination."""

    @patch("conservation_priority.datasources.inaturalist.client._rate_limit")
    @patch("conservation_priority.datasources.inaturalist.client.session.get")
    def test_pages_until_empty(self, mock_get: Mock, _rate_limit: Mock) -> None:
        mock_get.side_effect = [
            mock_response({"results": [{"id": 1}, {"id": 2}]}),
            mock_response({"results": [{"id": 3}]}),
            mock_response({"results": []}),
        ]
        results = client.get_observations_paginated({"taxon_id": 3})

        assert [r["id"] for r in results] == [1, 2, 3]
        assert mock_get.call_count == 3
        last_params = mock_get.call_args.kwargs["params"]
        assert last_params["id_above"] == 3
        assert last_params["order_by"] == "id"
        assert last_params["order"] == "asc"
        assert last_params["per_page"] == client.MAX_PER_PAGE

    @patch("conservation_priority.datasources.inaturalist.client._rate_limit")
    @patch("conservation_priority.datasources.inaturalist.client.session.get")
    def test_max_pages(self, mock_get: Mock, _rate_limit: Mock) -> None:
        mock_get.side_effect = [
            mock_response({"results": [{"id": i}]}) for i in range(1, 10)
        ]
        results = client.get_observations_paginated({}, max_pages=2)
        assert len(results) == 2
        assert mock_get.call_count == 2

    @patch("conservation_priority.datasources.inaturalist.client.time.sleep")
    def test_rate_limit_sleeps_between_calls(self, mock_sleep: Mock) -> None:
        client._rate_limit()
        client._rate_limit()
        mock_sleep.assert_called()


class TestFetchObservations:
    """Tests for fetch_observations."""

    @patch("conservation_priority.datasources.inaturalist.client.get_observations_paginated")
    def test_params_and_flattening(self, mock_paginated: Mock) -> None:
        mock_paginated.return_value = SAMPLE_OBSERVATIONS
        rows = observations.fetch_observations(BoundingBox(), max_pages=3)

        assert [r["id"] for r in rows] == [100001, 100002]
        params = mock_paginated.call_args.args[0]
        assert params["taxon_id"] == client.AVES
        assert params["quality_grade"] == "research"
        assert (params["swlat"], params["swlng"]) == (34.0, 72.0)
        assert (params["nelat"], params["nelng"]) == (37.0, 77.5)
        assert mock_paginated.call_args.kwargs["max_pages"] == 3
