"""Ranking Service: population percentile ranking of questionnaire ratings.

This service provides:
- An immutable distribution index of historical ratings, global and per country
- Ranking of a submitted questionnaire against the current index snapshot
- A memoized per-country average rating for comparison views
- The ratings HTTP API (Flask)

Endpoints:
- GET /health - Health check
- GET /ready - Readiness check
- GET /api/message - Backend liveness message
- GET /api/ratings - Paginated historical ratings
- GET /api/ratings/average - Per-country mean rating
- POST /api/predict - Score and rank a questionnaire
- POST /api/index/refresh - Rebuild the distribution index
"""

from .distribution_index import DistributionIndex, PercentileResult, percentile_below
from .ranking import RankingService, RankResult
from .average_cache import AverageRatingCache
from .config import RatingServiceConfig
from .handler import RatingHandler, app

__all__ = [
    "DistributionIndex",
    "PercentileResult",
    "percentile_below",
    "RankingService",
    "RankResult",
    "AverageRatingCache",
    "RatingServiceConfig",
    "RatingHandler",
    "app",
]
