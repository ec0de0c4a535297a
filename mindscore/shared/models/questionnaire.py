"""Questionnaire domain models.

Each categorical question parses into a closed enumeration. Every
enumeration carries an UNKNOWN arm so that absent, misspelled or
non-string answers resolve to a defined member instead of a lookup miss.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class Answer(Enum):
    """Base for questionnaire answer enumerations.

    Subclasses must define an ``UNKNOWN = None`` member; any value that
    does not match a declared option resolves to it.
    """

    @classmethod
    def _missing_(cls, value: Any) -> "Answer":
        return cls.UNKNOWN

    @classmethod
    def parse(cls, value: Optional[str]) -> "Answer":
        """Parse a raw answer, falling back to UNKNOWN."""
        if not isinstance(value, str):
            return cls.UNKNOWN
        return cls(value)


class YesMaybeNo(Answer):
    YES = "Yes"
    MAYBE = "Maybe"
    NO = "No"
    UNKNOWN = None


class YesNo(Answer):
    YES = "Yes"
    NO = "No"
    UNKNOWN = None


class MoodLevel(Answer):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = None


class DaysIndoors(Answer):
    """Ordinal bucket of days spent indoors."""
    GOES_OUT_EVERY_DAY = "Goes out every day"
    DAYS_1_14 = "1-14 days"
    DAYS_15_30 = "15-30 days"
    DAYS_31_60 = "31-60 days"
    MORE_THAN_2_MONTHS = "more than 2 months"
    UNKNOWN = None


class Occupation(Answer):
    BUSINESS = "Business"
    CORPORATE = "Corporate"
    STUDENT = "Student"
    OTHERS = "Others"
    UNKNOWN = None


# Wire name -> attribute name, in scoring order
QUESTION_KEYS: Dict[str, str] = {
    "Mental_Health_History": "mental_health_history",
    "Coping_Struggles": "coping_struggles",
    "Growing_Stress": "growing_stress",
    "Mood_Swings": "mood_swings",
    "Changes_Habits": "changes_habits",
    "treatment": "treatment",
    "Days_Indoors": "days_indoors",
    "family_history": "family_history",
    "Social_Weakness": "social_weakness",
    "Work_Interest": "work_interest",
    "care_options": "care_options",
    "Occupation": "occupation",
}

COUNTRY_KEY = "Country"


def _as_answer(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class QuestionnaireRecord:
    """One respondent's categorical answers to the survey.

    All answers are optional; scoring applies the per-field default when
    an answer is missing. ``country`` is used only for ranking.
    """
    mental_health_history: Optional[str] = None
    coping_struggles: Optional[str] = None
    growing_stress: Optional[str] = None
    mood_swings: Optional[str] = None
    changes_habits: Optional[str] = None
    treatment: Optional[str] = None
    days_indoors: Optional[str] = None
    family_history: Optional[str] = None
    social_weakness: Optional[str] = None
    work_interest: Optional[str] = None
    care_options: Optional[str] = None
    occupation: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuestionnaireRecord":
        """Build a record from a JSON-shaped mapping.

        Unknown keys are ignored. Non-string values are treated as absent.

        Args:
            payload: Mapping keyed by the survey's field names

        Returns:
            QuestionnaireRecord
        """
        values = {
            attr: _as_answer(payload.get(key))
            for key, attr in QUESTION_KEYS.items()
        }
        country = _as_answer(payload.get(COUNTRY_KEY))
        values["country"] = country if country else None
        return cls(**values)
