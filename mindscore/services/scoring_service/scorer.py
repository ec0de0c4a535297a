"""Questionnaire scorer.

Maps a QuestionnaireRecord to a rating in [0, 1] as a weighted sum of
per-question values. Scoring is total: every answer, including missing
and unrecognized ones, parses to a member of its answer enumeration and
every member has a value.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from mindscore.shared.models import (
    Answer,
    DaysIndoors,
    MoodLevel,
    Occupation,
    QuestionnaireRecord,
    YesMaybeNo,
    YesNo,
)
from .config import (
    CARE_OPTIONS_VALUES,
    COPING_VALUES,
    DAYS_INDOORS_VALUES,
    MOOD_VALUES,
    OCCUPATION_VALUES,
    WORK_INTEREST_VALUES,
    YES_MAYBE_NO_VALUES,
    ScoringWeights,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionRule:
    """How one question's answer becomes a value in [0, 1].

    Attributes:
        attr: QuestionnaireRecord attribute holding the raw answer
        answer_type: Answer enumeration the raw answer parses into
        values: Value for every member of answer_type
        complement: Score ``1 - value`` instead of ``value``
    """
    attr: str
    answer_type: Type[Answer]
    values: Mapping[Answer, float]
    complement: bool = False

    def parse(self, record: QuestionnaireRecord) -> Answer:
        return self.answer_type.parse(getattr(record, self.attr))

    def value(self, record: QuestionnaireRecord) -> float:
        raw = self.values[self.parse(record)]
        return 1.0 - raw if self.complement else raw


# Order matters: contributions are summed in this order
QUESTION_RULES: Tuple[QuestionRule, ...] = (
    QuestionRule("mental_health_history", YesMaybeNo, YES_MAYBE_NO_VALUES),
    QuestionRule("coping_struggles", YesNo, COPING_VALUES),
    QuestionRule("growing_stress", YesMaybeNo, YES_MAYBE_NO_VALUES),
    QuestionRule("mood_swings", MoodLevel, MOOD_VALUES),
    QuestionRule("changes_habits", YesMaybeNo, YES_MAYBE_NO_VALUES),
    QuestionRule("treatment", YesMaybeNo, YES_MAYBE_NO_VALUES),
    QuestionRule("days_indoors", DaysIndoors, DAYS_INDOORS_VALUES),
    QuestionRule("family_history", YesMaybeNo, YES_MAYBE_NO_VALUES),
    QuestionRule("social_weakness", YesMaybeNo, YES_MAYBE_NO_VALUES),
    QuestionRule("work_interest", YesMaybeNo, WORK_INTEREST_VALUES),
    QuestionRule("care_options", YesMaybeNo, CARE_OPTIONS_VALUES, complement=True),
    QuestionRule("occupation", Occupation, OCCUPATION_VALUES),
)


class QuestionnaireScorer:
    """Weighted-sum scorer for the mental-health questionnaire."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        """Initialize scorer.

        Args:
            weights: Per-question weights (defaults to the published table)
        """
        self.weights = weights or ScoringWeights()

        logger.info(
            "QUESTIONNAIRE_SCORER_INITIALIZED",
            extra={"question_count": len(QUESTION_RULES)}
        )

    def contributions(self, record: QuestionnaireRecord) -> Dict[str, float]:
        """Weighted contribution of each question, in scoring order.

        Args:
            record: Questionnaire answers

        Returns:
            Mapping of record attribute name to ``value * weight``
        """
        return {
            rule.attr: rule.value(record) * getattr(self.weights, rule.attr)
            for rule in QUESTION_RULES
        }

    def score(self, record: QuestionnaireRecord) -> float:
        """Compute the rating for a questionnaire record.

        Args:
            record: Questionnaire answers

        Returns:
            Rating in [0, 1]
        """
        total = 0.0
        for contribution in self.contributions(record).values():
            total += contribution
        return total


_default_scorer: Optional[QuestionnaireScorer] = None


def calculate_rating(answers: Mapping[str, Any]) -> float:
    """Convenience function to score a JSON-shaped answer mapping.

    Args:
        answers: Mapping keyed by the survey's field names

    Returns:
        Rating in [0, 1]
    """
    global _default_scorer
    if _default_scorer is None:
        _default_scorer = QuestionnaireScorer()
    return _default_scorer.score(QuestionnaireRecord.from_dict(answers))
