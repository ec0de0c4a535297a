"""Tests for the Ratings Service HTTP handler.

Tests prediction, comparison and refresh endpoints against an injected
handler backed by a mock repository.
"""
import pytest
from unittest.mock import MagicMock

from mindscore.shared.database import RepositoryError
from mindscore.shared.models import HistoricalObservation, RatingRow
from mindscore.services.ranking_service.config import RatingServiceConfig
from mindscore.services.ranking_service.handler import (
    app,
    RatingHandler,
    set_handler,
)


OBSERVATIONS = [
    HistoricalObservation("US", 0.2),
    HistoricalObservation("US", 0.5),
    HistoricalObservation("US", 0.99),
    HistoricalObservation("FR", 0.1),
    HistoricalObservation("FR", 0.95),
]

BEST_ANSWERS = {
    "Mental_Health_History": "Yes",
    "Coping_Struggles": "Yes",
    "Growing_Stress": "Yes",
    "Mood_Swings": "High",
    "Changes_Habits": "Yes",
    "treatment": "Yes",
    "Days_Indoors": "more than 2 months",
    "family_history": "Yes",
    "Social_Weakness": "Yes",
    "Work_Interest": "No",
    "care_options": "No",
    "Occupation": "Corporate",
}


@pytest.fixture
def client():
    """Flask test client."""
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def repository():
    repo = MagicMock()
    repo.fetch_observations.return_value = OBSERVATIONS
    repo.connection_manager.health_check.return_value = {
        "healthy": True, "status": "connected", "latency_ms": 0.4,
    }
    return repo


@pytest.fixture
def handler(repository):
    """Fresh handler with the index loaded."""
    h = RatingHandler(
        config=RatingServiceConfig(max_page_limit=50),
        repository=repository,
    )
    h.startup()
    set_handler(h)
    return h


@pytest.fixture
def cold_handler(repository):
    """Handler whose index has not been loaded."""
    h = RatingHandler(
        config=RatingServiceConfig(load_index_on_startup=False),
        repository=repository,
    )
    h.startup()
    set_handler(h)
    return h


class TestHealthEndpoints:
    """Tests for /health, /ready and /api/message."""

    def test_health_returns_200(self, client, handler):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["service"] == "ratings-service"

    def test_ready_when_index_loaded(self, client, handler):
        response = client.get("/ready")

        data = response.get_json()
        assert response.status_code == 200
        assert data["status"] == "ready"
        assert data["index"] == {"loaded": True, "observation_count": 5}
        assert data["database"]["status"] == "connected"

    def test_ready_reports_database_outage(self, client, handler, repository):
        repository.connection_manager.health_check.return_value = {
            "healthy": False, "status": "error", "error": "could not connect",
        }

        response = client.get("/ready")

        data = response.get_json()
        assert response.status_code == 200
        assert data["database"]["healthy"] is False

    def test_not_ready_before_load(self, client, cold_handler):
        response = client.get("/ready")

        data = response.get_json()
        assert response.status_code == 503
        assert data["status"] == "not_ready"
        assert data["index"]["loaded"] is False

    def test_message(self, client, handler):
        response = client.get("/api/message")

        assert response.status_code == 200
        assert "up" in response.get_json()["message"]


class TestStartup:
    """Tests for index loading at startup."""

    def test_empty_store_leaves_handler_not_ready(self, repository):
        repository.fetch_observations.return_value = []
        h = RatingHandler(repository=repository)

        h.startup()

        assert h.ranking_service.is_ready is False

    def test_unreachable_store_leaves_handler_not_ready(self, client, repository):
        repository.fetch_observations.side_effect = RepositoryError("could not connect")
        h = RatingHandler(repository=repository)

        h.startup()
        set_handler(h)

        assert h.ranking_service.is_ready is False
        assert client.get("/ready").status_code == 503

    def test_startup_skipped_when_disabled(self, cold_handler, repository):
        repository.fetch_observations.assert_not_called()
        assert cold_handler.ranking_service.is_ready is False


class TestPredictEndpoint:
    """Tests for POST /api/predict."""

    def test_predict_known_country(self, client, handler):
        response = client.post("/api/predict", json=dict(BEST_ANSWERS, Country="US"))

        assert response.status_code == 200
        assert response.get_json() == {
            "score": 0.98,
            "globalPercent": 80.0,
            "countryPercent": 66.7,
        }

    def test_predict_unknown_country(self, client, handler):
        response = client.post("/api/predict", json=dict(BEST_ANSWERS, Country="Atlantis"))

        data = response.get_json()
        assert response.status_code == 200
        assert data["countryPercent"] is None
        assert data["globalPercent"] == 80.0

    def test_predict_empty_questionnaire(self, client, handler):
        """All fields optional: defaults give 0.03, below every rating."""
        response = client.post("/api/predict", json={})

        assert response.status_code == 200
        assert response.get_json() == {
            "score": 0.03,
            "globalPercent": 0.0,
            "countryPercent": None,
        }

    def test_predict_rejects_non_object(self, client, handler):
        response = client.post("/api/predict", json=["Yes", "No"])

        assert response.status_code == 400

    def test_predict_rejects_missing_body(self, client, handler):
        response = client.post("/api/predict", data="not json", content_type="text/plain")

        assert response.status_code == 400

    def test_predict_before_index_loaded(self, client, cold_handler):
        response = client.post("/api/predict", json=BEST_ANSWERS)

        assert response.status_code == 503
        assert "not loaded" in response.get_json()["error"]

    def test_predict_internal_error(self, client, handler):
        handler.ranking_service = MagicMock()
        handler.ranking_service.rank.side_effect = RuntimeError("boom")

        response = client.post("/api/predict", json=BEST_ANSWERS)

        assert response.status_code == 500
        assert response.get_json() == {"error": "Prediction failed."}


class TestRatingsEndpoint:
    """Tests for GET /api/ratings."""

    def test_returns_page(self, client, handler, repository):
        repository.find_page.return_value = [
            RatingRow(id=7, country="US", year="2014", rating=0.42, gender="Female"),
        ]

        response = client.get("/api/ratings?limit=10&skip=5")

        assert response.status_code == 200
        assert response.get_json() == [{"country": "US", "year": "2014", "rating": 0.42}]
        repository.find_page.assert_called_once_with(limit=10, offset=5)

    def test_default_pagination(self, client, handler, repository):
        repository.find_page.return_value = []

        client.get("/api/ratings")

        repository.find_page.assert_called_once_with(limit=50, offset=0)

    def test_zero_limit_means_default(self, client, handler, repository):
        repository.find_page.return_value = []

        client.get("/api/ratings?limit=0")

        repository.find_page.assert_called_once_with(limit=50, offset=0)

    def test_limit_clamped_to_max(self, client, handler, repository):
        repository.find_page.return_value = []

        client.get("/api/ratings?limit=100000")

        repository.find_page.assert_called_once_with(limit=50, offset=0)

    @pytest.mark.parametrize("query", ["limit=ten", "skip=-1", "limit=1.5"])
    def test_invalid_params_rejected(self, client, handler, query):
        response = client.get(f"/api/ratings?{query}")

        assert response.status_code == 400

    def test_repository_failure(self, client, handler, repository):
        repository.find_page.side_effect = RepositoryError("connection lost")

        response = client.get("/api/ratings")

        assert response.status_code == 500
        assert response.get_json() == {"error": "Failed to fetch ratings."}


class TestAverageEndpoint:
    """Tests for GET /api/ratings/average."""

    def test_computes_then_serves_from_cache(self, client, handler, repository):
        repository.fetch_observations.reset_mock()
        repository.fetch_observations.return_value = [
            HistoricalObservation("US", 1),
            HistoricalObservation("US", 3),
            HistoricalObservation("US", 5),
            HistoricalObservation("FR", 2),
            HistoricalObservation("FR", 4),
        ]

        first = client.get("/api/ratings/average")
        second = client.get("/api/ratings/average")

        expected = [{"country": "US", "rating": 3.0}, {"country": "FR", "rating": 3.0}]
        assert first.get_json() == expected
        assert second.get_json() == expected
        assert repository.fetch_observations.call_count == 1

    def test_repository_failure(self, client, handler, repository):
        repository.fetch_observations.side_effect = RepositoryError("connection lost")

        response = client.get("/api/ratings/average")

        assert response.status_code == 500
        assert response.get_json() == {"error": "Failed to compute averages."}


class TestRefreshEndpoint:
    """Tests for POST /api/index/refresh."""

    def test_refresh_rebuilds_index(self, client, handler, repository):
        old_index = handler.ranking_service.index
        repository.fetch_observations.return_value = [HistoricalObservation("DE", 0.5)]

        response = client.post("/api/index/refresh")

        data = response.get_json()
        assert response.status_code == 200
        assert data["observation_count"] == 1
        assert data["country_count"] == 1
        assert handler.ranking_service.index is not old_index

    def test_refresh_clears_average_cache(self, client, handler):
        handler.average_cache.compute(OBSERVATIONS)

        client.post("/api/index/refresh")

        assert handler.average_cache.get_cached() is None

    def test_refresh_with_empty_store(self, client, handler, repository):
        old_index = handler.ranking_service.index
        repository.fetch_observations.return_value = []

        response = client.post("/api/index/refresh")

        assert response.status_code == 503
        assert handler.ranking_service.index is old_index

    def test_refresh_makes_cold_handler_ready(self, client, cold_handler):
        response = client.post("/api/index/refresh")

        assert response.status_code == 200
        assert client.get("/ready").status_code == 200
