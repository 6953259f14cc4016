"""
/health tests against a stubbed database session.
"""

from types import SimpleNamespace

import httpx
import pytest
from sqlalchemy.exc import SQLAlchemyError

from assessment_engine.db.session import get_db
from assessment_engine.main import app

pytestmark = pytest.mark.unit


class TableStubDb:
    """Answers every query except those touching ``failing`` tables."""

    def __init__(self, failing=(), active_questions=12):
        self.failing = set(failing)
        self.active_questions = active_questions
        self.rollbacks = 0

    async def execute(self, statement):
        tables = {table.name for table in statement.get_final_froms()}
        if tables & self.failing:
            raise SQLAlchemyError(f"relation {sorted(tables)[0]} does not exist")
        return SimpleNamespace(scalar_one=lambda: self.active_questions)

    async def rollback(self):
        self.rollbacks += 1


async def _get_health(db):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            return await client.get("/health")
    finally:
        app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health_reports_engine_tables_and_question_count():
    response = await _get_health(TableStubDb())

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["active_questions"] == 12
    assert body["tables"] == {
        "competency": True,
        "question": True,
        "question_option": True,
        "assessment": True,
        "assessment_session": True,
        "assessment_response": True,
    }


@pytest.mark.asyncio
async def test_health_is_degraded_when_session_table_is_missing():
    db = TableStubDb(failing={"assessment_session"})

    response = await _get_health(db)

    body = response.json()
    assert body["status"] == "degraded"
    assert body["tables"]["assessment_session"] is False
    assert body["tables"]["assessment_response"] is True
    assert body["active_questions"] == 12
    assert db.rollbacks == 1


@pytest.mark.asyncio
async def test_health_skips_question_count_when_question_table_is_missing():
    response = await _get_health(TableStubDb(failing={"question"}))

    body = response.json()
    assert body["status"] == "degraded"
    assert body["active_questions"] is None
