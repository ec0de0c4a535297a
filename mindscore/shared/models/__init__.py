"""Shared domain models for MindScore services."""
from .questionnaire import (
    Answer,
    YesMaybeNo,
    YesNo,
    MoodLevel,
    DaysIndoors,
    Occupation,
    QuestionnaireRecord,
    QUESTION_KEYS,
    COUNTRY_KEY,
)
from .rating import (
    HistoricalObservation,
    ObservationLike,
    RatingRow,
    coerce_observation,
    is_well_formed_score,
)

__all__ = [
    "Answer",
    "YesMaybeNo",
    "YesNo",
    "MoodLevel",
    "DaysIndoors",
    "Occupation",
    "QuestionnaireRecord",
    "QUESTION_KEYS",
    "COUNTRY_KEY",
    "HistoricalObservation",
    "ObservationLike",
    "RatingRow",
    "coerce_observation",
    "is_well_formed_score",
]
