"""Tests for the distribution index."""
import math
import random
from decimal import Decimal

import pytest

from mindscore.shared.errors import EmptyDistributionError
from mindscore.shared.models import HistoricalObservation, RatingRow
from mindscore.services.ranking_service.distribution_index import (
    DistributionIndex,
    percentile_below,
)


@pytest.fixture
def observations():
    return [
        HistoricalObservation("US", 1),
        HistoricalObservation("US", 3),
        HistoricalObservation("US", 5),
        HistoricalObservation("FR", 2),
        HistoricalObservation("FR", 4),
    ]


@pytest.fixture
def index(observations):
    return DistributionIndex.build(observations)


def linear_percentile(scores, value):
    return 100.0 * sum(1 for x in scores if value > x) / len(scores)


class TestBuild:
    """Tests for DistributionIndex.build."""

    def test_partitions_by_country(self, index):
        assert index.global_scores == (1, 2, 3, 4, 5)
        assert index.country_scores["US"] == (1, 3, 5)
        assert index.country_scores["FR"] == (2, 4)
        assert index.size == 5

    def test_country_scores_are_subset_of_global(self, index):
        total = sum(len(scores) for scores in index.country_scores.values())
        assert total == index.size

    def test_accepts_store_shaped_mappings(self):
        index = DistributionIndex.build([
            {"Country": "US", "Rating": 0.4},
            {"country": "FR", "score": 0.6},
            RatingRow(country="DE", year="2014", rating=0.5),
        ])
        assert index.global_scores == (0.4, 0.5, 0.6)
        assert set(index.country_scores) == {"US", "FR", "DE"}

    def test_malformed_observations_dropped(self):
        index = DistributionIndex.build([
            {"Country": "US", "Rating": 0.4},
            {"Country": "US", "Rating": "0.9"},
            {"Country": "US", "Rating": None},
            {"Country": "US", "Rating": float("nan")},
            {"Country": "US", "Rating": float("inf")},
            {"Country": "US", "Rating": True},
            {"Country": "", "Rating": 0.3},
            {"Rating": 0.3},
            "not an observation",
        ])
        assert index.global_scores == (0.4,)
        assert index.skipped_count == 8

    def test_decimal_ratings_accepted(self):
        index = DistributionIndex.build([{"Country": "US", "Rating": Decimal("0.25")}])
        assert index.global_scores == (0.25,)

    def test_empty_source_raises(self):
        with pytest.raises(EmptyDistributionError):
            DistributionIndex.build([])

    def test_all_malformed_raises(self):
        with pytest.raises(EmptyDistributionError, match="2 skipped"):
            DistributionIndex.build([{"Country": "US"}, {"Rating": 1.0}])

    def test_consumes_iterator_once(self, observations):
        index = DistributionIndex.build(iter(observations))
        assert index.size == 5

    def test_country_mapping_is_read_only(self, index):
        with pytest.raises(TypeError):
            index.country_scores["DE"] = (1.0,)


class TestPercentileOf:
    """Tests for percentile lookup."""

    def test_reference_scenario(self, index):
        """Score 3 beats {1} in US and {1, 2} globally."""
        result = index.percentile_of(3, "US")
        assert result.country_percentile == pytest.approx(100 / 3)
        assert result.global_percentile == pytest.approx(40.0)

    def test_ties_do_not_count(self):
        index = DistributionIndex.build([HistoricalObservation("US", 0.5)] * 4)
        assert index.percentile_of(0.5, "US").global_percentile == 0.0

    def test_above_all_is_100(self, index):
        result = index.percentile_of(5.01, "FR")
        assert result.global_percentile == 100.0
        assert result.country_percentile == 100.0

    def test_below_all_is_zero(self, index):
        result = index.percentile_of(0.5, "US")
        assert result.global_percentile == 0.0
        assert result.country_percentile == 0.0

    def test_unknown_country_is_none(self, index):
        result = index.percentile_of(3, "DE")
        assert result.country_percentile is None
        assert not math.isnan(result.global_percentile)

    def test_no_country_is_none(self, index):
        assert index.percentile_of(3).country_percentile is None

    def test_monotonic(self, index):
        scores = [0, 1, 1.5, 2, 3, 3, 4.5, 5, 6]
        percentiles = [index.percentile_of(s).global_percentile for s in scores]
        assert percentiles == sorted(percentiles)

    def test_matches_linear_scan(self):
        rng = random.Random(7)
        raw = [round(rng.random(), 2) for _ in range(500)]
        index = DistributionIndex.build(
            HistoricalObservation("US" if i % 2 else "FR", s) for i, s in enumerate(raw)
        )
        us_scores = [s for i, s in enumerate(raw) if i % 2]
        for value in (0.0, 0.13, 0.5, 0.5000001, 0.99, 1.0):
            result = index.percentile_of(value, "US")
            assert result.global_percentile == pytest.approx(linear_percentile(raw, value))
            assert result.country_percentile == pytest.approx(linear_percentile(us_scores, value))

    def test_rebuild_is_deterministic(self, observations):
        first = DistributionIndex.build(observations)
        second = DistributionIndex.build(list(reversed(observations)))
        for value in (0, 2.5, 3, 4, 10):
            assert first.percentile_of(value, "US") == second.percentile_of(value, "US")


class TestPercentileBelow:
    """Tests for the strict-below percentile helper."""

    def test_counts_strictly_smaller(self):
        assert percentile_below((1, 2, 2, 3), 2) == 25.0
        assert percentile_below((1, 2, 2, 3), 2.0001) == 75.0
