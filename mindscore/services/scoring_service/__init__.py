"""Scoring Service: questionnaire rating.

Turns one respondent's categorical answers into a rating in [0, 1]
using a fixed weighted sum. Pure computation; no I/O.
"""

from .config import ScoringWeights, OCCUPATION_DEFAULT
from .scorer import (
    QuestionnaireScorer,
    QuestionRule,
    QUESTION_RULES,
    calculate_rating,
)

__all__ = [
    "ScoringWeights",
    "OCCUPATION_DEFAULT",
    "QuestionnaireScorer",
    "QuestionRule",
    "QUESTION_RULES",
    "calculate_rating",
]
