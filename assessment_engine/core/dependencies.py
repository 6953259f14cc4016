"""
FastAPI dependencies for the application.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_engine.db.session import get_db
from assessment_engine.services.assessment_session_service import AssessmentSessionService


async def get_caller_role(x_user_role: Optional[str] = Header(None)) -> Optional[str]:
    """Caller role forwarded by the upstream gateway, if any."""
    return x_user_role


async def get_assessment_service(db: AsyncSession = Depends(get_db)) -> AssessmentSessionService:
    return AssessmentSessionService(db)
