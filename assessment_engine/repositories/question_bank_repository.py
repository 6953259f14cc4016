"""
Question bank repository - read-only access to questions and options.
"""

from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_engine.models.competency import CompetencyLevel
from assessment_engine.models.question import Question
from assessment_engine.services.scoring import AnswerKey


class QuestionBankRepository:
    """Repository for Question / QuestionOption reads."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active_question_ids(self, competency_id: UUID, level: Optional[str] = None) -> List[UUID]:
        """Active question ids for a competency, optionally restricted to one level."""
        query = select(Question.id).where(
            Question.competency_id == competency_id,
            Question.is_active.is_(True),
        )
        if level is not None:
            query = query.join(CompetencyLevel, CompetencyLevel.id == Question.competency_level_id).where(
                CompetencyLevel.level == level
            )
        query = query.order_by(Question.id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_questions(self, question_ids: Sequence[UUID]) -> Dict[UUID, Tuple[Question, Optional[str]]]:
        """Questions (options loaded) keyed by id, each paired with its level name."""
        if not question_ids:
            return {}
        result = await self.db.execute(
            select(Question, CompetencyLevel.level)
            .outerjoin(CompetencyLevel, CompetencyLevel.id == Question.competency_level_id)
            .where(Question.id.in_(list(question_ids)))
        )
        return {question.id: (question, level) for question, level in result.all()}

    async def get_answer_keys(self, question_ids: Sequence[UUID]) -> Dict[UUID, AnswerKey]:
        """Authoritative scoring data for the given questions."""
        if not question_ids:
            return {}
        result = await self.db.execute(
            select(Question).where(Question.id.in_(list(set(question_ids))))
        )
        keys: Dict[UUID, AnswerKey] = {}
        for question in result.scalars().all():
            correct = next((option for option in question.options if option.is_correct), None)
            keys[question.id] = AnswerKey(
                question_id=question.id,
                question_type=question.type,
                points=question.points or 0,
                correct_option_id=correct.id if correct else None,
                correct_option_text=correct.text if correct else None,
            )
        return keys
