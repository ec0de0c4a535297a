"""Per-country mean rating cache.

Computed on demand and then served from memory. Nothing here refreshes
or expires the cache; the surrounding service decides when to clear it.
"""
import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from mindscore.shared.models import ObservationLike, coerce_observation
from mindscore.shared.utils import round_half_even

logger = logging.getLogger(__name__)

AVERAGE_DIGITS = 2


class AverageRatingCache:
    """Memoized mapping of country to mean rating.

    Means are rounded to two places with ties going to the even digit.
    """

    def __init__(self):
        self._averages: Optional[Mapping[str, float]] = None

    def compute(self, observations: Iterable[ObservationLike]) -> Mapping[str, float]:
        """Group observations by country, average, and cache the result.

        Malformed observations are skipped.

        Args:
            observations: Full historical observation set

        Returns:
            Read-only mapping of country to rounded mean rating
        """
        groups: Dict[str, List[float]] = defaultdict(list)
        skipped = 0
        for raw in observations:
            observation = coerce_observation(raw)
            if observation is None:
                skipped += 1
                continue
            groups[observation.country].append(observation.score)

        averages = MappingProxyType({
            country: round_half_even(sum(scores) / len(scores), AVERAGE_DIGITS)
            for country, scores in groups.items()
        })
        self._averages = averages

        logger.info(
            "AVERAGE_CACHE_COMPUTED",
            extra={"country_count": len(averages), "skipped_count": skipped}
        )
        return averages

    def get_cached(self) -> Optional[Mapping[str, float]]:
        """Cached averages, or None if compute() has not run yet."""
        return self._averages

    def clear(self) -> None:
        self._averages = None
        logger.info("AVERAGE_CACHE_CLEARED")

    def as_payload(self) -> Optional[List[Dict[str, Any]]]:
        """Cached averages as ``[{"country", "rating"}]``, or None."""
        averages = self._averages
        if averages is None:
            return None
        return [
            {"country": country, "rating": rating}
            for country, rating in averages.items()
        ]
