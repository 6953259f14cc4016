"""
Health check router.

Reports whether every table the assessment flow reads or writes answers a
query, and how many active questions the bank can draw from.
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_engine.db.session import get_db
from assessment_engine.models import (
    Assessment,
    AssessmentResponse,
    AssessmentSession,
    Competency,
    Question,
    QuestionOption,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ENGINE_TABLES = (Competency, Question, QuestionOption, Assessment, AssessmentSession, AssessmentResponse)


async def _table_reachable(db: AsyncSession, model) -> bool:
    try:
        await db.execute(select(model.id).limit(1))
    except SQLAlchemyError as exc:
        logger.warning("Health check: table %s unreachable: %s", model.__tablename__, exc)
        # A failed statement aborts the transaction for the remaining checks
        await db.rollback()
        return False
    return True


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Table reachability for the assessment flow plus the active question count."""
    tables: Dict[str, bool] = {}
    for model in ENGINE_TABLES:
        tables[model.__tablename__] = await _table_reachable(db, model)

    active_questions: Optional[int] = None
    if tables[Question.__tablename__]:
        result = await db.execute(select(func.count(Question.id)).where(Question.is_active.is_(True)))
        active_questions = result.scalar_one()

    ok = all(tables.values())
    return {
        "status": "ok" if ok else "degraded",
        "tables": tables,
        "active_questions": active_questions,
    }
