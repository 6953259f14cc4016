"""
Competency repository - catalog reads.
"""

from typing import Dict, List, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from assessment_engine.models.competency import Competency
from assessment_engine.models.question import Question


class CompetencyRepository:
    """Repository for Competency reads."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_names(self, competency_ids: Sequence[UUID]) -> Dict[UUID, str]:
        if not competency_ids:
            return {}
        result = await self.db.execute(
            select(Competency.id, Competency.name).where(Competency.id.in_(list(set(competency_ids))))
        )
        return {competency_id: name for competency_id, name in result.all()}

    async def list_with_active_question_counts(self) -> List[Tuple[Competency, int]]:
        """Competencies that have at least one active question, by name."""
        question_count = func.count(Question.id)
        result = await self.db.execute(
            select(Competency, question_count)
            .join(Question, Question.competency_id == Competency.id)
            .where(Question.is_active.is_(True))
            .group_by(Competency.id)
            .having(question_count > 0)
            .order_by(Competency.name)
        )
        return [(competency, int(count)) for competency, count in result.all()]
