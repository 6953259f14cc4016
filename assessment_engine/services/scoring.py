"""
Scoring Engine.

Evaluates submitted answers against the authoritative answer keys from the
question bank, accumulates score/percentage, derives the system level and
closes the session.

Level banding (policy constant, must not change):
    >= 80  MASTERY
    >= 60  ADVANCED
    >= 40  INTERMEDIATE
    else   BASIC

SHORT_ANSWER and ESSAY answers are recorded as not correct and earn no
points; they are left for manual review and still count toward
totalQuestions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from assessment_engine.errors import AttemptLimitReached, SessionNotFound, SessionNotInProgress, ValidationError
from assessment_engine.models.enums import ProficiencyLevel, QuestionType, SessionStatus
from assessment_engine.utils.time import utc_now

logger = logging.getLogger(__name__)

LEVEL_THRESHOLDS = (
    (80, ProficiencyLevel.MASTERY),
    (60, ProficiencyLevel.ADVANCED),
    (40, ProficiencyLevel.INTERMEDIATE),
)


@dataclass(frozen=True)
class AnswerKey:
    """Authoritative scoring data for one question."""

    question_id: UUID
    question_type: str
    points: int
    correct_option_id: Optional[UUID] = None
    correct_option_text: Optional[str] = None


@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: UUID
    selected_option_id: Optional[UUID] = None
    answer_text: Optional[str] = None


@dataclass(frozen=True)
class EvaluatedAnswer:
    question_id: UUID
    selected_option_id: Optional[UUID]
    answer_text: Optional[str]
    is_correct: bool
    points_earned: int


@dataclass
class ScoreSummary:
    total_score: int
    correct_answers: int
    total_questions: int
    percentage_score: int
    system_level: ProficiencyLevel
    evaluated: List[EvaluatedAnswer] = field(default_factory=list)


@dataclass(frozen=True)
class SubmissionResult:
    session_id: UUID
    total_score: int
    percentage_score: int
    correct_answers: int
    total_questions: int
    competency_level: ProficiencyLevel
    completed_at: datetime


def percentage(correct_answers: int, total_questions: int) -> int:
    """100 * correct / total, rounded half up to an integer."""
    if total_questions <= 0:
        raise ValueError("total_questions must be positive")
    return (200 * correct_answers + total_questions) // (2 * total_questions)


def level_for_percentage(percentage_score: int) -> ProficiencyLevel:
    for threshold, level in LEVEL_THRESHOLDS:
        if percentage_score >= threshold:
            return level
    return ProficiencyLevel.BASIC


def evaluate_answer(answer: SubmittedAnswer, key: AnswerKey) -> EvaluatedAnswer:
    """Grade one answer; only the stored key decides correctness."""
    is_correct = False
    if key.question_type == QuestionType.MULTIPLE_CHOICE.value:
        is_correct = (
            answer.selected_option_id is not None
            and key.correct_option_id is not None
            and answer.selected_option_id == key.correct_option_id
        )
    elif key.question_type == QuestionType.TRUE_FALSE.value:
        is_correct = answer.answer_text is not None and answer.answer_text == key.correct_option_text

    return EvaluatedAnswer(
        question_id=answer.question_id,
        selected_option_id=answer.selected_option_id,
        answer_text=answer.answer_text,
        is_correct=is_correct,
        points_earned=key.points if is_correct else 0,
    )


def score_answers(answers: Sequence[SubmittedAnswer], keys: Dict[UUID, AnswerKey]) -> ScoreSummary:
    """
    Score a submission.

    totalQuestions is the number of answers submitted, not the number the
    session was assigned. Answers whose question has no key are not recorded
    but still count toward the total.
    """
    total_questions = len(answers)
    if total_questions == 0:
        raise ValidationError("answers must contain at least one answer", {"field": "answers"})

    evaluated: List[EvaluatedAnswer] = []
    total_score = 0
    correct_answers = 0
    for answer in answers:
        key = keys.get(answer.question_id)
        if key is None:
            continue
        result = evaluate_answer(answer, key)
        if result.is_correct:
            total_score += result.points_earned
            correct_answers += 1
        evaluated.append(result)

    percentage_score = percentage(correct_answers, total_questions)
    return ScoreSummary(
        total_score=total_score,
        correct_answers=correct_answers,
        total_questions=total_questions,
        percentage_score=percentage_score,
        system_level=level_for_percentage(percentage_score),
        evaluated=evaluated,
    )


def _reject_duplicates(answers: Iterable[SubmittedAnswer]) -> None:
    seen = set()
    duplicates = []
    for answer in answers:
        if answer.question_id in seen:
            duplicates.append(str(answer.question_id))
        seen.add(answer.question_id)
    if duplicates:
        raise ValidationError(
            "Each question may be answered only once per session",
            {"field": "answers", "duplicate_question_ids": sorted(set(duplicates))},
        )


class ScoringEngine:
    """Submit flow: validate, grade, persist responses, close the session."""

    def __init__(self, sessions, question_bank, ledger):
        self.sessions = sessions
        self.question_bank = question_bank
        self.ledger = ledger

    async def submit(self, session_id: UUID, answers: Sequence[SubmittedAnswer]) -> SubmissionResult:
        if session_id is None:
            raise ValidationError("session_id is required", {"field": "session_id"})
        if not answers:
            raise ValidationError("answers must contain at least one answer", {"field": "answers"})
        _reject_duplicates(answers)

        # Row lock serializes concurrent submits of the same session
        session = await self.sessions.get_for_update(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        if session.status != SessionStatus.IN_PROGRESS.value:
            raise SessionNotInProgress(session_id, session.status)

        # Completing is what consumes an attempt, so the limit is enforced here
        await self.sessions.acquire_attempt_lock(session.user_id, session.competency_id)
        effective = await self.ledger.settings_resolver.resolve(session.competency_id, session.assessment_id)
        attempts = await self.ledger.attempts_info(session.user_id, session.competency_id, effective)
        if attempts.exhausted:
            logger.warning(
                "Submit rejected, attempt limit reached: session=%s user=%s used=%s allowed=%s",
                session.id,
                session.user_id,
                attempts.attempts_used,
                attempts.attempts_allowed,
            )
            raise AttemptLimitReached(attempts.attempts_allowed, attempts.attempts_used)

        keys = await self.question_bank.get_answer_keys([a.question_id for a in answers])
        summary = score_answers(answers, keys)

        completed_at = utc_now()
        await self.sessions.add_responses(session.id, summary.evaluated)
        await self.sessions.complete(session, summary, completed_at)

        logger.info(
            "Session %s completed: %s/%s correct, %s%%, level %s",
            session.id,
            summary.correct_answers,
            summary.total_questions,
            summary.percentage_score,
            summary.system_level.value,
        )
        return SubmissionResult(
            session_id=session.id,
            total_score=summary.total_score,
            percentage_score=summary.percentage_score,
            correct_answers=summary.correct_answers,
            total_questions=summary.total_questions,
            competency_level=summary.system_level,
            completed_at=completed_at,
        )
