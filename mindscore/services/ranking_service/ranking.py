"""Ranking service: score a questionnaire and place it in the population.

RankingService owns the current DistributionIndex snapshot. Loading a
new snapshot builds it completely and then swaps the reference in one
assignment; a rank() call that already picked up the previous snapshot
finishes against it.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from mindscore.shared.errors import IndexNotReadyError
from mindscore.shared.models import ObservationLike, QuestionnaireRecord
from mindscore.shared.utils import round_half_up, round_optional
from mindscore.services.scoring_service import QuestionnaireScorer
from .distribution_index import DistributionIndex

logger = logging.getLogger(__name__)

SCORE_DIGITS = 2
PERCENTILE_DIGITS = 1


@dataclass(frozen=True)
class RankResult:
    """Presentation-rounded ranking of one questionnaire.

    Attributes:
        score: Rating, 2 decimal places
        global_percentile: Percent of all respondents below, 1 decimal place
        country_percentile: Percent of the country's respondents below,
            1 decimal place; None if the country has no observations
    """
    score: float
    global_percentile: float
    country_percentile: Optional[float]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "globalPercent": self.global_percentile,
            "countryPercent": self.country_percentile,
        }


class RankingService:
    """Answers "what score, and where does it rank" for a questionnaire."""

    def __init__(
        self,
        scorer: Optional[QuestionnaireScorer] = None,
        index: Optional[DistributionIndex] = None,
    ):
        """Initialize ranking service.

        Args:
            scorer: Questionnaire scorer (injected for testing)
            index: Initial distribution snapshot, if already built
        """
        self.scorer = scorer or QuestionnaireScorer()
        self._index = index

    @property
    def index(self) -> Optional[DistributionIndex]:
        """Current snapshot, or None before the first load."""
        return self._index

    @property
    def is_ready(self) -> bool:
        return self._index is not None

    def load(self, observations: Iterable[ObservationLike]) -> DistributionIndex:
        """Build a new snapshot and swap it in.

        The previous snapshot stays in place if the build fails.

        Args:
            observations: Full historical observation set

        Returns:
            The newly active DistributionIndex

        Raises:
            EmptyDistributionError: If no valid observation was supplied
        """
        index = DistributionIndex.build(observations)
        previous = self._index
        self._index = index

        logger.info(
            "RANKING_INDEX_SWAPPED",
            extra={
                "observation_count": index.size,
                "country_count": len(index.country_scores),
                "previous_observation_count": previous.size if previous else 0,
            }
        )
        return index

    def rank(
        self,
        record: QuestionnaireRecord,
        index: Optional[DistributionIndex] = None,
    ) -> RankResult:
        """Score a record and rank it globally and within its country.

        Args:
            record: Questionnaire answers; ``country`` selects the partition
            index: Snapshot to rank against (defaults to the current one)

        Returns:
            RankResult rounded for presentation

        Raises:
            IndexNotReadyError: If no snapshot is available
        """
        snapshot = index if index is not None else self._index
        if snapshot is None:
            raise IndexNotReadyError("Distribution index has not been loaded")

        start_time = time.perf_counter()
        score = self.scorer.score(record)
        percentiles = snapshot.percentile_of(score, record.country)

        result = RankResult(
            score=round_half_up(score, SCORE_DIGITS),
            global_percentile=round_half_up(percentiles.global_percentile, PERCENTILE_DIGITS),
            country_percentile=round_optional(percentiles.country_percentile, PERCENTILE_DIGITS),
        )

        logger.info(
            "PREDICTION_COMPLETED",
            extra={
                "score": result.score,
                "global_percentile": result.global_percentile,
                "country_percentile": result.country_percentile,
                "country_known": percentiles.country_percentile is not None,
                "latency_ms": (time.perf_counter() - start_time) * 1000,
            }
        )
        return result
