"""
AssessmentSession repository - database operations for sessions and responses.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from assessment_engine.models.assessment_session import AssessmentSession, AssessmentResponse
from assessment_engine.models.enums import SessionStatus


class AssessmentSessionRepository:
    """Repository for AssessmentSession database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def acquire_attempt_lock(self, user_id: str, competency_id: UUID) -> None:
        """
        Take a transaction-scoped advisory lock for (user, competency).

        Starts and submits for the same pair queue here until the holder
        commits, so the completed-attempt count they read is current.
        """
        key = f"assessment-attempt:{user_id}:{competency_id}"
        await self.db.execute(select(func.pg_advisory_xact_lock(func.hashtextextended(key, 0))))

    async def count_completed(self, user_id: str, competency_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(AssessmentSession.id)).where(
                AssessmentSession.user_id == user_id,
                AssessmentSession.competency_id == competency_id,
                AssessmentSession.status == SessionStatus.COMPLETED.value,
            )
        )
        return int(result.scalar_one())

    async def recent_question_ids(self, user_id: str, competency_id: UUID, limit: int) -> List[UUID]:
        """Question ids from the user's last ``limit`` responses in completed sessions, newest first."""
        result = await self.db.execute(
            select(AssessmentResponse.question_id)
            .join(AssessmentSession, AssessmentSession.id == AssessmentResponse.session_id)
            .where(
                AssessmentSession.user_id == user_id,
                AssessmentSession.competency_id == competency_id,
                AssessmentSession.status == SessionStatus.COMPLETED.value,
            )
            .order_by(AssessmentSession.completed_at.desc())
            .limit(limit)
        )
        seen: Dict[UUID, None] = {}
        for question_id in result.scalars().all():
            seen.setdefault(question_id, None)
        return list(seen)

    async def create(
        self,
        user_id: str,
        competency_id: UUID,
        started_at: datetime,
        assessment_id: Optional[UUID] = None,
    ) -> AssessmentSession:
        session = AssessmentSession(
            id=uuid.uuid4(),
            user_id=user_id,
            competency_id=competency_id,
            assessment_id=assessment_id,
            status=SessionStatus.IN_PROGRESS.value,
            started_at=started_at,
        )
        self.db.add(session)
        await self.db.flush()
        await self.db.refresh(session)
        return session

    async def get_by_id(self, session_id: UUID) -> Optional[AssessmentSession]:
        result = await self.db.execute(
            select(AssessmentSession).where(AssessmentSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, session_id: UUID) -> Optional[AssessmentSession]:
        """Load a session with a row lock held until the transaction ends."""
        result = await self.db.execute(
            select(AssessmentSession)
            .where(AssessmentSession.id == session_id)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def add_responses(self, session_id: UUID, evaluated: Sequence) -> None:
        for answer in evaluated:
            self.db.add(
                AssessmentResponse(
                    id=uuid.uuid4(),
                    session_id=session_id,
                    question_id=answer.question_id,
                    selected_option_id=answer.selected_option_id,
                    answer_text=answer.answer_text,
                    is_correct=answer.is_correct,
                    points_earned=answer.points_earned,
                )
            )
        await self.db.flush()

    async def complete(self, session: AssessmentSession, summary, completed_at: datetime) -> AssessmentSession:
        session.status = SessionStatus.COMPLETED.value
        session.completed_at = completed_at
        session.score = summary.total_score
        session.percentage_score = summary.percentage_score
        session.correct_answers = summary.correct_answers
        session.total_questions = summary.total_questions
        session.system_level = summary.system_level.value
        await self.db.flush()
        return session

    async def set_user_confirmed_level(self, session: AssessmentSession, level: str) -> AssessmentSession:
        session.user_confirmed_level = level
        await self.db.flush()
        return session

    async def set_manager_selected_level(self, session: AssessmentSession, level: str) -> AssessmentSession:
        session.manager_selected_level = level
        await self.db.flush()
        return session

    async def latest_completed(self, user_id: str, competency_id: UUID) -> Optional[AssessmentSession]:
        result = await self.db.execute(
            select(AssessmentSession)
            .where(
                AssessmentSession.user_id == user_id,
                AssessmentSession.competency_id == competency_id,
                AssessmentSession.status == SessionStatus.COMPLETED.value,
            )
            .order_by(AssessmentSession.completed_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str) -> List[AssessmentSession]:
        """All sessions of a user, most recent completion first, open sessions last."""
        result = await self.db.execute(
            select(AssessmentSession)
            .where(AssessmentSession.user_id == user_id)
            .order_by(
                AssessmentSession.completed_at.desc().nulls_last(),
                AssessmentSession.started_at.desc(),
            )
        )
        return list(result.scalars().all())

    async def latest_completed_per_competency(self, user_id: str) -> List[AssessmentSession]:
        result = await self.db.execute(
            select(AssessmentSession)
            .where(
                AssessmentSession.user_id == user_id,
                AssessmentSession.status == SessionStatus.COMPLETED.value,
            )
            .distinct(AssessmentSession.competency_id)
            .order_by(AssessmentSession.competency_id, AssessmentSession.completed_at.desc())
        )
        return list(result.scalars().all())

    async def list_responses(self, session_id: UUID) -> List[AssessmentResponse]:
        result = await self.db.execute(
            select(AssessmentResponse)
            .where(AssessmentResponse.session_id == session_id)
            .order_by(AssessmentResponse.created_at, AssessmentResponse.question_id)
        )
        return list(result.scalars().all())
