"""
Settings resolution for assessment sessions.

Resolution order:
    1. the assessment named by id, if it exists and is active
    2. the most recently updated active assessment for the competency
    3. the most recently updated active global (apply_to_all) assessment
    4. configured defaults
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

from assessment_engine.core.config import settings as app_settings
from assessment_engine.models.enums import LEVEL_ORDER, SelectionStrategy

logger = logging.getLogger(__name__)

# BY_LEVEL draws this many questions from every level
QUESTIONS_PER_LEVEL = 2


@dataclass(frozen=True)
class EffectiveSettings:
    assessment_id: Optional[UUID]
    num_questions: int
    time_limit_minutes: int
    selection_strategy: str
    allow_multiple_attempts: bool
    max_attempts: int
    show_timer: bool = True
    force_time_limit: bool = False
    show_dashboard: bool = True
    show_correct_answers: bool = True
    show_incorrect_answers: bool = True

    @property
    def required_questions(self) -> int:
        """How many questions a session under these settings must receive."""
        if self.selection_strategy == SelectionStrategy.BY_LEVEL.value:
            return QUESTIONS_PER_LEVEL * len(LEVEL_ORDER)
        return self.num_questions

    def display_flags(self) -> Dict[str, Any]:
        return {
            "show_timer": self.show_timer,
            "force_time_limit": self.force_time_limit,
            "show_dashboard": self.show_dashboard,
            "show_correct_answers": self.show_correct_answers,
            "show_incorrect_answers": self.show_incorrect_answers,
            "allow_multiple_attempts": self.allow_multiple_attempts,
            "max_attempts": self.max_attempts,
        }


def default_settings() -> EffectiveSettings:
    return EffectiveSettings(
        assessment_id=None,
        num_questions=app_settings.DEFAULT_NUM_QUESTIONS,
        time_limit_minutes=app_settings.DEFAULT_TIME_LIMIT_MINUTES,
        selection_strategy=SelectionStrategy.RANDOM.value,
        allow_multiple_attempts=app_settings.DEFAULT_ALLOW_MULTIPLE_ATTEMPTS,
        max_attempts=app_settings.DEFAULT_MAX_ATTEMPTS,
    )


def settings_from_assessment(assessment) -> EffectiveSettings:
    """Build effective settings from an assessment row, filling gaps with defaults."""
    if assessment is None:
        return default_settings()

    strategy = assessment.selection_strategy or SelectionStrategy.RANDOM.value
    if strategy not in (SelectionStrategy.RANDOM.value, SelectionStrategy.BY_LEVEL.value):
        logger.warning("Assessment %s has unknown selection strategy %r; using RANDOM", assessment.id, strategy)
        strategy = SelectionStrategy.RANDOM.value

    allow_multiple = assessment.allow_multiple_attempts
    if allow_multiple is None:
        allow_multiple = app_settings.DEFAULT_ALLOW_MULTIPLE_ATTEMPTS

    return EffectiveSettings(
        assessment_id=assessment.id,
        num_questions=assessment.num_questions or app_settings.DEFAULT_NUM_QUESTIONS,
        time_limit_minutes=assessment.time_limit_minutes or app_settings.DEFAULT_TIME_LIMIT_MINUTES,
        selection_strategy=strategy,
        allow_multiple_attempts=bool(allow_multiple),
        max_attempts=assessment.max_attempts or app_settings.DEFAULT_MAX_ATTEMPTS,
        show_timer=_flag(assessment.show_timer, True),
        force_time_limit=_flag(assessment.force_time_limit, False),
        show_dashboard=_flag(assessment.show_dashboard, True),
        show_correct_answers=_flag(assessment.show_correct_answers, True),
        show_incorrect_answers=_flag(assessment.show_incorrect_answers, True),
    )


def _flag(value: Optional[bool], default: bool) -> bool:
    return default if value is None else bool(value)


class SettingsResolver:
    def __init__(self, assessments):
        self.assessments = assessments

    async def resolve(self, competency_id: UUID, assessment_id: Optional[UUID] = None) -> EffectiveSettings:
        assessment = None
        if assessment_id is not None:
            assessment = await self.assessments.get_active_by_id(assessment_id)
            if assessment is None:
                logger.info("Assessment %s not found or inactive; falling back", assessment_id)
        if assessment is None:
            assessment = await self.assessments.get_latest_active_for_competency(competency_id)
        if assessment is None:
            assessment = await self.assessments.get_latest_active_global()
        return settings_from_assessment(assessment)
