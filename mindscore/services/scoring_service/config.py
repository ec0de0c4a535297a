"""Scoring weights and answer value tables.

The weights and the per-answer values below define the rating. Changing
any of them shifts every respondent's score and therefore every
reported percentile.
"""
import math
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Mapping

from mindscore.shared.models import (
    DaysIndoors,
    MoodLevel,
    Occupation,
    YesMaybeNo,
    YesNo,
)


@dataclass(frozen=True)
class ScoringWeights:
    """Per-question weights. Must be non-negative and sum to 1.0."""
    mental_health_history: float = 0.10
    coping_struggles: float = 0.10
    growing_stress: float = 0.10
    mood_swings: float = 0.10
    changes_habits: float = 0.10
    treatment: float = 0.10
    days_indoors: float = 0.08
    family_history: float = 0.07
    social_weakness: float = 0.08
    work_interest: float = 0.05
    care_options: float = 0.02
    occupation: float = 0.10

    def __post_init__(self):
        if any(getattr(self, f.name) < 0 for f in fields(self)):
            raise ValueError("Scoring weights must be non-negative")
        if not math.isclose(self.total(), 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0, got {self.total()}")

    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))


YES_MAYBE_NO_VALUES: Mapping[YesMaybeNo, float] = MappingProxyType({
    YesMaybeNo.YES: 1.0,
    YesMaybeNo.MAYBE: 0.5,
    YesMaybeNo.NO: 0.0,
    YesMaybeNo.UNKNOWN: 0.0,
})

COPING_VALUES: Mapping[YesNo, float] = MappingProxyType({
    YesNo.YES: 1.0,
    YesNo.NO: 0.0,
    YesNo.UNKNOWN: 0.0,
})

MOOD_VALUES: Mapping[MoodLevel, float] = MappingProxyType({
    MoodLevel.HIGH: 1.0,
    MoodLevel.MEDIUM: 0.5,
    MoodLevel.LOW: 0.0,
    MoodLevel.UNKNOWN: 0.0,
})

DAYS_INDOORS_VALUES: Mapping[DaysIndoors, float] = MappingProxyType({
    DaysIndoors.GOES_OUT_EVERY_DAY: 0.0,
    DaysIndoors.DAYS_1_14: 0.25,
    DaysIndoors.DAYS_15_30: 0.5,
    DaysIndoors.DAYS_31_60: 0.75,
    DaysIndoors.MORE_THAN_2_MONTHS: 1.0,
    DaysIndoors.UNKNOWN: 0.0,
})

# Losing interest in work is the risk signal, so "No" scores highest
WORK_INTEREST_VALUES: Mapping[YesMaybeNo, float] = MappingProxyType({
    YesMaybeNo.NO: 1.0,
    YesMaybeNo.MAYBE: 0.5,
    YesMaybeNo.YES: 0.0,
    YesMaybeNo.UNKNOWN: 0.0,
})

# Scored as 1 - value: awareness of care options lowers the rating
CARE_OPTIONS_VALUES: Mapping[YesMaybeNo, float] = MappingProxyType({
    YesMaybeNo.YES: 1.0,
    YesMaybeNo.MAYBE: 0.5,
    YesMaybeNo.NO: 0.0,
    YesMaybeNo.UNKNOWN: 0.0,
})

OCCUPATION_DEFAULT: float = 0.10

OCCUPATION_VALUES: Mapping[Occupation, float] = MappingProxyType({
    Occupation.BUSINESS: 0.65,
    Occupation.CORPORATE: 0.8,
    Occupation.STUDENT: 0.2,
    Occupation.OTHERS: 0.5,
    Occupation.UNKNOWN: OCCUPATION_DEFAULT,
})
