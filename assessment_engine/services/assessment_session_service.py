"""
Assessment session business logic.

Session lifecycle: none -> IN_PROGRESS -> COMPLETED (terminal).

``start`` resolves settings, serializes on the (user, competency) attempt
lock, re-checks the attempt ledger, selects questions and opens the session.
``submit`` hands off to the scoring engine, which re-checks the ledger under
the same lock before completing. Level writes go through level
reconciliation. The remaining methods are read models for collaborators
(history, latest results, session detail).

The service never commits; routers own the unit of work.
"""

import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from assessment_engine.core.config import settings as app_settings
from assessment_engine.errors import (
    AttemptLimitReached,
    InsufficientQuestions,
    ResultNotFound,
    SessionNotFound,
    ValidationError,
)
from assessment_engine.repositories.assessment_repository import AssessmentRepository
from assessment_engine.repositories.assessment_session_repository import AssessmentSessionRepository
from assessment_engine.repositories.competency_repository import CompetencyRepository
from assessment_engine.repositories.question_bank_repository import QuestionBankRepository
from assessment_engine.schemas.user_assessment import (
    AttemptsInfoRead,
    CompetencyAvailabilityRead,
    DisplaySettingsRead,
    LatestResultRead,
    LevelUpdateRead,
    ResponseDetailRead,
    SessionDetailRead,
    SessionOptionRead,
    SessionQuestionRead,
    SessionStartResponse,
    SessionSummaryRead,
    SettingsSummaryRead,
    SubmissionResultRead,
)
from assessment_engine.services.attempt_ledger import AttemptLedger
from assessment_engine.services.level_reconciliation import (
    LevelReconciliation,
    effective_level,
    has_gap,
    normalize_level,
)
from assessment_engine.services.question_selector import QuestionSelector, shuffle_options
from assessment_engine.services.scoring import ScoringEngine, SubmittedAnswer
from assessment_engine.services.settings_resolver import SettingsResolver
from assessment_engine.utils.time import duration_seconds, utc_now

logger = logging.getLogger(__name__)


def _require_user_id(user_id: Optional[str]) -> str:
    value = (user_id or "").strip()
    if not value:
        raise ValidationError("user_id is required", {"field": "user_id"})
    return value


def _require(value, field: str):
    if value is None:
        raise ValidationError(f"{field} is required", {"field": field})
    return value


def _ensure_enough_questions(found: int, required: int, competency_id: UUID, strategy: str) -> None:
    if found < required:
        logger.warning(
            "Insufficient questions: competency=%s strategy=%s found=%s required=%s",
            competency_id,
            strategy,
            found,
            required,
        )
        raise InsufficientQuestions(found, required, competency_id, strategy)


class AssessmentSessionService:
    """Service for assessment session business logic."""

    def __init__(
        self,
        db: Optional[AsyncSession] = None,
        *,
        sessions=None,
        question_bank=None,
        assessments=None,
        competencies=None,
        rng: Optional[random.Random] = None,
    ):
        self.sessions = sessions if sessions is not None else AssessmentSessionRepository(db)
        self.question_bank = question_bank if question_bank is not None else QuestionBankRepository(db)
        self.assessments = assessments if assessments is not None else AssessmentRepository(db)
        self.competencies = competencies if competencies is not None else CompetencyRepository(db)
        self.rng = rng or random.Random()

        self.settings_resolver = SettingsResolver(self.assessments)
        self.ledger = AttemptLedger(self.sessions, self.settings_resolver)
        self.selector = QuestionSelector(self.question_bank, self.rng)
        self.scoring = ScoringEngine(self.sessions, self.question_bank, self.ledger)
        self.levels = LevelReconciliation(self.sessions)

    # ------------------------------------------------------------------
    # Settings and attempts
    # ------------------------------------------------------------------

    async def attempts_info(self, user_id: str, competency_id: UUID) -> AttemptsInfoRead:
        user_id = _require_user_id(user_id)
        info = await self.ledger.attempts_info(user_id, _require(competency_id, "competency_id"))
        return AttemptsInfoRead.model_validate(info)

    async def settings_summary(self, competency_id: UUID, user_id: Optional[str] = None) -> SettingsSummaryRead:
        effective = await self.settings_resolver.resolve(_require(competency_id, "competency_id"))
        summary = SettingsSummaryRead(
            competency_id=competency_id,
            assessment_id=effective.assessment_id,
            num_questions=effective.num_questions,
            time_limit_minutes=effective.time_limit_minutes,
            selection_strategy=effective.selection_strategy,
            allow_multiple_attempts=effective.allow_multiple_attempts,
            max_attempts=effective.max_attempts,
        )
        if user_id:
            info = await self.ledger.attempts_info(user_id.strip(), competency_id, effective)
            summary.attempts_used = info.attempts_used
            summary.attempts_left = info.attempts_left
        return summary

    async def list_assessable_competencies(self) -> List[CompetencyAvailabilityRead]:
        """Competencies with active questions and a resolvable assessment."""
        available = []
        for competency, question_count in await self.competencies.list_with_active_question_counts():
            effective = await self.settings_resolver.resolve(competency.id)
            if effective.assessment_id is None:
                continue
            available.append(
                CompetencyAvailabilityRead(
                    id=competency.id,
                    name=competency.name,
                    description=competency.description,
                    question_count=question_count,
                    num_questions=effective.num_questions,
                    time_limit_minutes=effective.time_limit_minutes,
                )
            )
        return available

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def start(
        self,
        user_id: str,
        competency_id: UUID,
        assessment_id: Optional[UUID] = None,
    ) -> SessionStartResponse:
        user_id = _require_user_id(user_id)
        _require(competency_id, "competency_id")

        effective = await self.settings_resolver.resolve(competency_id, assessment_id)

        await self.sessions.acquire_attempt_lock(user_id, competency_id)
        attempts = await self.ledger.attempts_info(user_id, competency_id, effective)
        if attempts.exhausted:
            logger.warning(
                "Attempt limit reached: user=%s competency=%s used=%s allowed=%s",
                user_id,
                competency_id,
                attempts.attempts_used,
                attempts.attempts_allowed,
            )
            raise AttemptLimitReached(attempts.attempts_allowed, attempts.attempts_used)

        exclude_ids = await self.sessions.recent_question_ids(
            user_id, competency_id, app_settings.RECENT_QUESTION_WINDOW
        )
        required = effective.required_questions
        question_ids = await self.selector.select(
            competency_id, required, effective.selection_strategy, exclude_ids
        )
        _ensure_enough_questions(len(question_ids), required, competency_id, effective.selection_strategy)

        questions = await self._build_session_questions(question_ids)
        # A question deleted after selection drops out of the build
        _ensure_enough_questions(len(questions), required, competency_id, effective.selection_strategy)

        session = await self.sessions.create(
            user_id,
            competency_id,
            utc_now(),
            assessment_id=effective.assessment_id,
        )
        names = await self.competencies.get_names([competency_id])

        logger.info(
            "Session %s started: user=%s competency=%s strategy=%s questions=%s",
            session.id,
            user_id,
            competency_id,
            effective.selection_strategy,
            len(questions),
        )
        return SessionStartResponse(
            session_id=session.id,
            competency_id=competency_id,
            competency_name=names.get(competency_id),
            started_at=session.started_at,
            time_limit_minutes=effective.time_limit_minutes,
            selection_strategy=effective.selection_strategy,
            questions=questions,
            settings=DisplaySettingsRead(**effective.display_flags()),
        )

    async def _build_session_questions(self, question_ids: Sequence[UUID]) -> List[SessionQuestionRead]:
        loaded = await self.question_bank.get_questions(question_ids)
        questions = []
        for question_id in question_ids:
            entry = loaded.get(question_id)
            if entry is None:
                continue
            question, level = entry
            options = shuffle_options(question.options, self.rng)
            questions.append(
                SessionQuestionRead(
                    id=question.id,
                    text=question.text,
                    type=question.type,
                    points=question.points,
                    explanation=question.explanation,
                    competency_level=level,
                    options=[
                        SessionOptionRead(id=option.id, text=option.text, order_index=index)
                        for index, option in enumerate(options, start=1)
                    ],
                )
            )
        return questions

    async def submit(self, session_id: UUID, answers: Sequence[SubmittedAnswer]) -> SubmissionResultRead:
        result = await self.scoring.submit(session_id, answers)
        return SubmissionResultRead.model_validate(result)

    async def confirm_user_level(self, session_id: UUID, level) -> LevelUpdateRead:
        snapshot = await self.levels.confirm_user_level(_require(session_id, "session_id"), level)
        return LevelUpdateRead.model_validate(snapshot)

    async def set_manager_level(self, session_id: UUID, level) -> LevelUpdateRead:
        snapshot = await self.levels.set_manager_level(_require(session_id, "session_id"), level)
        return LevelUpdateRead.model_validate(snapshot)

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    async def latest_result(
        self,
        user_id: str,
        competency_id: UUID,
        required_level: Optional[str] = None,
    ) -> LatestResultRead:
        user_id = _require_user_id(user_id)
        required = normalize_level(required_level, "required_level") if required_level else None

        session = await self.sessions.latest_completed(user_id, competency_id)
        if session is None:
            raise ResultNotFound(user_id, competency_id)

        names = await self.competencies.get_names([competency_id])
        details, revealed = await self._response_details(session)
        result = LatestResultRead(
            **self._summary_fields(session, names),
            correct_answers_revealed=revealed,
            details=details,
            required_level=required,
        )
        if required is not None:
            result.has_gap = has_gap(result.effective_level, required)
        return result

    async def get_session_detail(self, session_id: UUID) -> SessionDetailRead:
        session = await self.sessions.get_by_id(_require(session_id, "session_id"))
        if session is None:
            raise SessionNotFound(session_id)

        names = await self.competencies.get_names([session.competency_id])
        details, revealed = await self._response_details(session)
        return SessionDetailRead(
            **self._summary_fields(session, names),
            correct_answers_revealed=revealed,
            details=details,
        )

    async def history(self, user_id: str) -> List[SessionSummaryRead]:
        user_id = _require_user_id(user_id)
        sessions = await self.sessions.list_for_user(user_id)
        names = await self.competencies.get_names([s.competency_id for s in sessions])
        return [SessionSummaryRead(**self._summary_fields(s, names)) for s in sessions]

    async def latest_by_user(self, user_id: str) -> List[SessionSummaryRead]:
        """Latest completed session per competency, ordered by competency name."""
        user_id = _require_user_id(user_id)
        sessions = await self.sessions.latest_completed_per_competency(user_id)
        names = await self.competencies.get_names([s.competency_id for s in sessions])
        sessions = sorted(sessions, key=lambda s: (names.get(s.competency_id) or "", str(s.competency_id)))
        return [SessionSummaryRead(**self._summary_fields(s, names)) for s in sessions]

    @staticmethod
    def _summary_fields(session, names: Dict[UUID, str]) -> dict:
        return {
            "session_id": session.id,
            "user_id": session.user_id,
            "competency_id": session.competency_id,
            "competency_name": names.get(session.competency_id),
            "status": session.status,
            "score": session.score,
            "percentage_score": session.percentage_score,
            "correct_answers": session.correct_answers,
            "total_questions": session.total_questions,
            "started_at": session.started_at,
            "completed_at": session.completed_at,
            "duration_seconds": duration_seconds(session.started_at, session.completed_at),
            "system_level": session.system_level,
            "user_confirmed_level": session.user_confirmed_level,
            "manager_selected_level": session.manager_selected_level,
            "effective_level": effective_level(
                session.manager_selected_level,
                session.user_confirmed_level,
                session.system_level,
            ),
        }

    async def _response_details(self, session) -> Tuple[List[ResponseDetailRead], bool]:
        """Response breakdown; correct answers only when the session's settings reveal them."""
        effective = await self.settings_resolver.resolve(session.competency_id, session.assessment_id)
        reveal = effective.show_correct_answers

        responses = await self.sessions.list_responses(session.id)
        questions = await self.question_bank.get_questions([r.question_id for r in responses])

        details = []
        for response in responses:
            question, _level = questions.get(response.question_id, (None, None))
            options = question.options if question is not None else []
            selected = next((o for o in options if o.id == response.selected_option_id), None)
            correct = next((o for o in options if o.is_correct), None)
            details.append(
                ResponseDetailRead(
                    question_id=response.question_id,
                    question_text=question.text if question is not None else None,
                    question_type=question.type if question is not None else None,
                    points=question.points if question is not None else None,
                    selected_option_id=response.selected_option_id,
                    selected_option_text=selected.text if selected is not None else None,
                    answer_text=response.answer_text,
                    is_correct=response.is_correct,
                    points_earned=response.points_earned,
                    correct_option_id=correct.id if reveal and correct is not None else None,
                    correct_option_text=correct.text if reveal and correct is not None else None,
                )
            )
        return details, reveal
