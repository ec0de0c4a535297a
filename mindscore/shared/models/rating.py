"""Historical rating domain models.

HistoricalObservation is the unit the distribution index and the
average cache are built from. RatingRow is the persisted form of one
survey respondent.
"""
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class HistoricalObservation:
    """One past respondent's country and rating."""
    country: str
    score: float

    def __post_init__(self):
        if not isinstance(self.country, str) or not self.country:
            raise ValueError(f"Country must be a non-empty string, got {self.country!r}")
        if not is_well_formed_score(self.score):
            raise ValueError(f"Score must be a finite number, got {self.score!r}")


@dataclass(frozen=True)
class RatingRow:
    """A persisted survey respondent from the ratings table."""
    country: str
    year: str
    rating: float
    id: Optional[int] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    occupation: Optional[str] = None
    family_history: Optional[str] = None

    def to_observation(self) -> HistoricalObservation:
        return HistoricalObservation(country=self.country, score=float(self.rating))


def is_well_formed_score(value: Any) -> bool:
    """True for finite int/float/Decimal values; bools are rejected."""
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float, Decimal)):
        return False
    return math.isfinite(value)


ObservationLike = Union[HistoricalObservation, RatingRow, Mapping[str, Any]]


def coerce_observation(raw: ObservationLike) -> Optional[HistoricalObservation]:
    """Normalize a raw observation, returning None when it is malformed.

    Accepts a HistoricalObservation, a RatingRow, or a mapping keyed
    either ``Country``/``Rating`` (store shape) or ``country``/``score``.

    Args:
        raw: Observation in any supported shape

    Returns:
        HistoricalObservation, or None if the score is not a finite
        number or the country is missing
    """
    if isinstance(raw, HistoricalObservation):
        return raw
    if isinstance(raw, RatingRow):
        country, score = raw.country, raw.rating
    elif isinstance(raw, Mapping):
        country = raw.get("Country", raw.get("country"))
        score = raw.get("Rating", raw.get("score"))
    else:
        return None

    if not is_well_formed_score(score):
        return None
    try:
        return HistoricalObservation(country=country, score=float(score))
    except ValueError:
        return None
