"""
Enumerations shared by models, schemas and services.

Values are stored as plain strings in the database.
"""

from enum import Enum


class SessionStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"
    ESSAY = "ESSAY"


class SelectionStrategy(str, Enum):
    RANDOM = "RANDOM"
    BY_LEVEL = "BY_LEVEL"


class ProficiencyLevel(str, Enum):
    """Competency levels, declared lowest first."""

    BASIC = "BASIC"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    MASTERY = "MASTERY"


LEVEL_ORDER = (
    ProficiencyLevel.BASIC,
    ProficiencyLevel.INTERMEDIATE,
    ProficiencyLevel.ADVANCED,
    ProficiencyLevel.MASTERY,
)
