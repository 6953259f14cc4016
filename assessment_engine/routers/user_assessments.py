"""
User assessment router - API endpoints for assessment sessions.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_engine.core.dependencies import get_assessment_service
from assessment_engine.core.permissions import Roles, require_roles
from assessment_engine.db.session import get_db
from assessment_engine.schemas.user_assessment import (
    AttemptsInfoRead,
    CompetencyAvailabilityRead,
    ConfirmLevelRequest,
    LatestResultRead,
    LevelUpdateRead,
    ManagerLevelRequest,
    SessionDetailRead,
    SessionStartRequest,
    SessionStartResponse,
    SessionSubmitRequest,
    SessionSummaryRead,
    SettingsSummaryRead,
    SubmissionResultRead,
)
from assessment_engine.services.assessment_session_service import AssessmentSessionService
from assessment_engine.services.scoring import SubmittedAnswer

router = APIRouter(prefix="/user-assessments", tags=["user-assessments"])


@router.get("/attempts/{user_id}/{competency_id}", response_model=AttemptsInfoRead)
async def get_attempts(
    user_id: str,
    competency_id: UUID,
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Attempts used, allowed and left for a user on a competency."""
    return await service.attempts_info(user_id, competency_id)


@router.get("/settings/{competency_id}", response_model=SettingsSummaryRead)
async def get_settings(
    competency_id: UUID,
    user_id: Optional[str] = Query(None, max_length=100),
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Effective assessment settings, plus attempt counts when user_id is given."""
    return await service.settings_summary(competency_id, user_id)


@router.get("/competencies", response_model=List[CompetencyAvailabilityRead])
async def list_competencies(
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Competencies that can currently be assessed."""
    return await service.list_assessable_competencies()


@router.post("/start", response_model=SessionStartResponse)
async def start_session(
    data: SessionStartRequest,
    db: AsyncSession = Depends(get_db),
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """
    Start a new assessment session.

    Returns the session id, the selected questions with shuffled options and
    the effective display settings.
    """
    session = await service.start(data.user_id, data.competency_id, data.assessment_id)
    await db.commit()
    return session


@router.post("/submit", response_model=SubmissionResultRead)
async def submit_session(
    data: SessionSubmitRequest,
    db: AsyncSession = Depends(get_db),
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Score submitted answers and complete the session."""
    answers = [
        SubmittedAnswer(
            question_id=answer.question_id,
            selected_option_id=answer.selected_option_id,
            answer_text=answer.answer_text,
        )
        for answer in data.answers
    ]
    result = await service.submit(data.session_id, answers)
    await db.commit()
    return result


@router.post("/confirm-level", response_model=LevelUpdateRead)
async def confirm_level(
    data: ConfirmLevelRequest,
    db: AsyncSession = Depends(get_db),
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Record the level the employee confirms for a session."""
    result = await service.confirm_user_level(data.session_id, data.user_confirmed_level)
    await db.commit()
    return result


@router.post("/manager-level", response_model=LevelUpdateRead)
async def manager_level(
    data: ManagerLevelRequest,
    _: str = Depends(require_roles(Roles.LEVEL_REVIEWERS, "set a manager level")),
    db: AsyncSession = Depends(get_db),
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Record the level a manager selects for a session."""
    result = await service.set_manager_level(data.session_id, data.manager_selected_level)
    await db.commit()
    return result


@router.get("/latest-result/{user_id}/{competency_id}", response_model=LatestResultRead)
async def latest_result(
    user_id: str,
    competency_id: UUID,
    required_level: Optional[str] = Query(None),
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """
    Latest completed session for a user and competency.

    With required_level, also reports whether the effective level falls short.
    """
    return await service.latest_result(user_id, competency_id, required_level)


@router.get("/session/{session_id}", response_model=SessionDetailRead)
async def get_session(
    session_id: UUID,
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Session with its response breakdown."""
    return await service.get_session_detail(session_id)


@router.get("/history/{user_id}", response_model=List[SessionSummaryRead])
async def get_history(
    user_id: str,
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """All sessions of a user, newest first."""
    return await service.history(user_id)


@router.get("/latest-by-user/{user_id}", response_model=List[SessionSummaryRead])
async def latest_by_user(
    user_id: str,
    service: AssessmentSessionService = Depends(get_assessment_service),
):
    """Latest completed session for each competency the user has taken."""
    return await service.latest_by_user(user_id)
