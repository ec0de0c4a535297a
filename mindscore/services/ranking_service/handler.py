"""Ratings Service HTTP Handler - prediction and comparison API.

Serves the questionnaire predictor and the country comparison views.
The distribution index is loaded from the ratings store at startup and
on explicit refresh; request handlers only read it.

Endpoints:
- GET /health - Health check
- GET /ready - Index and database status (503 until the index is loaded)
- GET /api/message - Backend liveness message
- GET /api/ratings - Paginated historical ratings
- GET /api/ratings/average - Cached per-country mean rating
- POST /api/predict - Score a questionnaire and rank it
- POST /api/index/refresh - Rebuild the index and clear the average cache
"""
import logging
from typing import Any, Dict, List, Optional

from flask import Flask, request, jsonify

from mindscore.shared.database import RatingRepository, RepositoryError, get_connection_manager
from mindscore.shared.errors import EmptyDistributionError, IndexNotReadyError
from mindscore.shared.models import QuestionnaireRecord
from .average_cache import AverageRatingCache
from .config import RatingServiceConfig
from .distribution_index import DistributionIndex
from .ranking import RankingService

logger = logging.getLogger(__name__)

app = Flask(__name__)


class RatingHandler:
    """Handler for ratings, averages and prediction endpoints."""

    def __init__(
        self,
        config: Optional[RatingServiceConfig] = None,
        repository: Optional[RatingRepository] = None,
        ranking_service: Optional[RankingService] = None,
        average_cache: Optional[AverageRatingCache] = None,
    ):
        """Initialize handler with dependencies.

        Args:
            config: Service configuration
            repository: Ratings repository (injected for testing)
            ranking_service: Ranking service (injected for testing)
            average_cache: Average cache (injected for testing)
        """
        self.config = config or RatingServiceConfig()
        self.repository = repository or RatingRepository(get_connection_manager())
        self.ranking_service = ranking_service or RankingService()
        self.average_cache = average_cache or AverageRatingCache()

        logger.info(
            "RATING_HANDLER_INITIALIZED",
            extra={
                "default_page_limit": self.config.default_page_limit,
                "max_page_limit": self.config.max_page_limit,
            }
        )

    def startup(self) -> None:
        """Load the distribution index if configured to.

        An empty or unreachable ratings store leaves the handler not ready
        rather than failing requests or serving degenerate percentiles.
        """
        if not self.config.load_index_on_startup:
            return
        try:
            self.refresh_index()
        except (EmptyDistributionError, RepositoryError) as e:
            logger.critical(
                "RATING_INDEX_UNAVAILABLE",
                extra={"error": str(e), "action": "import ratings and refresh"}
            )

    def readiness(self) -> Dict[str, Any]:
        """Index and database status for the readiness probe.

        Only the index gates readiness; predictions are served from memory
        and keep working while the store is down.
        """
        index = self.ranking_service.index
        ready = self.ranking_service.is_ready
        return {
            "status": "ready" if ready else "not_ready",
            "service": "ratings-service",
            "index": {
                "loaded": ready,
                "observation_count": index.size if index is not None else 0,
            },
            "database": self.repository.connection_manager.health_check(),
        }

    def refresh_index(self) -> DistributionIndex:
        """Rebuild the index from the store and clear the average cache.

        Raises:
            EmptyDistributionError: If the store has no valid ratings
        """
        observations = self.repository.fetch_observations()
        index = self.ranking_service.load(observations)
        self.average_cache.clear()
        return index

    def predict(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Score and rank a JSON questionnaire.

        Raises:
            IndexNotReadyError: If the index has not been loaded
        """
        record = QuestionnaireRecord.from_dict(payload)
        return self.ranking_service.rank(record).to_payload()

    def get_ratings_page(self, limit: int, skip: int) -> List[Dict[str, Any]]:
        """Get a page of historical ratings.

        Args:
            limit: Requested page size (clamped to max_page_limit)
            skip: Rows to skip

        Returns:
            List of ``{"country", "year", "rating"}``
        """
        limit = min(limit, self.config.max_page_limit)
        rows = self.repository.find_page(limit=limit, offset=skip)
        return [
            {"country": row.country, "year": row.year, "rating": row.rating}
            for row in rows
        ]

    def get_average_ratings(self) -> List[Dict[str, Any]]:
        """Per-country averages, computing and caching them on first use."""
        payload = self.average_cache.as_payload()
        if payload is not None:
            return payload

        self.average_cache.compute(self.repository.fetch_observations())
        return self.average_cache.as_payload()


# Global handler instance
_handler: Optional[RatingHandler] = None


def get_handler() -> RatingHandler:
    """Get or create the global handler instance."""
    global _handler
    if _handler is None:
        _handler = RatingHandler(config=RatingServiceConfig.from_env())
        _handler.startup()
    return _handler


def set_handler(handler: RatingHandler) -> None:
    """Set the global handler (for testing)."""
    global _handler
    _handler = handler


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    value = int(raw)
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return value or default


# Flask routes
@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({"status": "healthy", "service": "ratings-service"})


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check endpoint."""
    report = get_handler().readiness()
    if report["status"] != "ready":
        return jsonify(report), 503
    return jsonify(report)


@app.route("/api/message", methods=["GET"])
def message():
    """Backend liveness message for the front end."""
    return jsonify({"message": "Backend with PostgreSQL is up!"})


@app.route("/api/ratings", methods=["GET"])
def ratings():
    """Get paginated historical ratings.

    Query params:
        limit: Optional - Page size (default 1000; 0 means the default)
        skip: Optional - Rows to skip (default 0)
    """
    handler = get_handler()
    try:
        limit = _int_arg("limit", handler.config.default_page_limit)
        skip = _int_arg("skip", 0)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        return jsonify(handler.get_ratings_page(limit, skip))
    except Exception as e:
        logger.error("RATINGS_FETCH_ERROR", extra={"error": str(e)})
        return jsonify({"error": "Failed to fetch ratings."}), 500


@app.route("/api/ratings/average", methods=["GET"])
def average_ratings():
    """Get per-country mean rating, served from cache after first use."""
    try:
        return jsonify(get_handler().get_average_ratings())
    except Exception as e:
        logger.error("AVERAGE_RATINGS_ERROR", extra={"error": str(e)})
        return jsonify({"error": "Failed to compute averages."}), 500


@app.route("/api/predict", methods=["POST"])
def predict():
    """Score a questionnaire and rank it.

    Body:
        Questionnaire answers keyed by survey field name, plus Country

    Response:
        {"score": 0.62, "globalPercent": 71.4, "countryPercent": 68.0}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    try:
        return jsonify(get_handler().predict(data))
    except IndexNotReadyError:
        logger.warning("PREDICTION_INDEX_NOT_READY")
        return jsonify({"error": "Rating index is not loaded."}), 503
    except Exception as e:
        logger.error("PREDICTION_ERROR", extra={"error": str(e)})
        return jsonify({"error": "Prediction failed."}), 500


@app.route("/api/index/refresh", methods=["POST"])
def refresh_index():
    """Rebuild the distribution index from the ratings store."""
    try:
        index = get_handler().refresh_index()
    except EmptyDistributionError as e:
        logger.error("INDEX_REFRESH_EMPTY", extra={"error": str(e)})
        return jsonify({"error": "No ratings available to build the index."}), 503
    except Exception as e:
        logger.error("INDEX_REFRESH_ERROR", extra={"error": str(e)})
        return jsonify({"error": "Failed to refresh index."}), 500

    return jsonify({
        "status": "refreshed",
        "observation_count": index.size,
        "country_count": len(index.country_scores),
        "skipped_count": index.skipped_count,
    })


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    handler = get_handler()
    app.run(host="0.0.0.0", port=handler.config.port)
