"""Distribution index: immutable snapshot of historical ratings.

Holds every historical rating globally and partitioned by country, each
reference sequence sorted once at build time. A percentile is the share
of the reference population strictly below the queried score; ties do
not count.
"""
import logging
import time
from bisect import bisect_left
from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from mindscore.shared.errors import EmptyDistributionError
from mindscore.shared.models import ObservationLike, coerce_observation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PercentileResult:
    """Unrounded percentile of a score against the index."""
    global_percentile: float
    country_percentile: Optional[float]


def percentile_below(sorted_scores: Sequence[float], value: float) -> float:
    """Percentage of ``sorted_scores`` strictly less than ``value``.

    Args:
        sorted_scores: Non-empty reference scores in ascending order
        value: Score to rank

    Returns:
        Percentile in [0, 100]
    """
    return 100.0 * bisect_left(sorted_scores, value) / len(sorted_scores)


@dataclass(frozen=True)
class DistributionIndex:
    """Sorted global and per-country rating sequences.

    Build with DistributionIndex.build(); instances are never mutated.

    Attributes:
        global_scores: All valid ratings, ascending
        country_scores: Country name -> that country's ratings, ascending
        skipped_count: Observations discarded as malformed during build
    """
    global_scores: Tuple[float, ...]
    country_scores: Mapping[str, Tuple[float, ...]]
    skipped_count: int = 0

    @classmethod
    def build(cls, observations: Iterable[ObservationLike]) -> "DistributionIndex":
        """Build an index from the full historical set.

        Malformed observations (non-numeric rating, missing country) are
        dropped and counted.

        Args:
            observations: Historical observations or store-shaped mappings

        Returns:
            DistributionIndex snapshot

        Raises:
            EmptyDistributionError: If no valid observation remains
        """
        start_time = time.perf_counter()
        global_scores: List[float] = []
        by_country: Dict[str, List[float]] = defaultdict(list)
        skipped = 0

        for raw in observations:
            observation = coerce_observation(raw)
            if observation is None:
                skipped += 1
                continue
            global_scores.append(observation.score)
            by_country[observation.country].append(observation.score)

        if not global_scores:
            logger.error(
                "DISTRIBUTION_INDEX_EMPTY",
                extra={"skipped_count": skipped}
            )
            raise EmptyDistributionError(
                f"No valid observations to build an index ({skipped} skipped)"
            )

        index = cls(
            global_scores=tuple(sorted(global_scores)),
            country_scores=MappingProxyType({
                country: tuple(sorted(scores))
                for country, scores in by_country.items()
            }),
            skipped_count=skipped,
        )

        logger.info(
            "DISTRIBUTION_INDEX_BUILT",
            extra={
                "observation_count": len(index.global_scores),
                "country_count": len(index.country_scores),
                "skipped_count": skipped,
                "latency_ms": (time.perf_counter() - start_time) * 1000,
            }
        )
        return index

    @property
    def size(self) -> int:
        return len(self.global_scores)

    def percentile_of(self, score: float, country: Optional[str] = None) -> PercentileResult:
        """Rank a score globally and, if known, within a country.

        Args:
            score: Score to rank
            country: Partition key; None skips the country lookup

        Returns:
            PercentileResult; country_percentile is None when the
            country has no observations
        """
        country_percentile = None
        if country is not None:
            scores = self.country_scores.get(country)
            if scores:
                country_percentile = percentile_below(scores, score)

        return PercentileResult(
            global_percentile=percentile_below(self.global_scores, score),
            country_percentile=country_percentile,
        )
