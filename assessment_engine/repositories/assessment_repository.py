"""
Assessment repository - lookups used by settings resolution.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_engine.models.assessment import Assessment


class AssessmentRepository:
    """Repository for Assessment (settings) reads."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_by_id(self, assessment_id: UUID) -> Optional[Assessment]:
        result = await self.db.execute(
            select(Assessment).where(
                Assessment.id == assessment_id,
                Assessment.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def get_latest_active_for_competency(self, competency_id: UUID) -> Optional[Assessment]:
        result = await self.db.execute(
            select(Assessment)
            .where(
                Assessment.competency_id == competency_id,
                Assessment.is_active.is_(True),
            )
            .order_by(Assessment.updated_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest_active_global(self) -> Optional[Assessment]:
        result = await self.db.execute(
            select(Assessment)
            .where(
                Assessment.apply_to_all.is_(True),
                Assessment.is_active.is_(True),
            )
            .order_by(Assessment.updated_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
