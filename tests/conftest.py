"""
Pytest configuration and shared fixtures.

Unit tests run the engine against in-memory repositories that mirror the
SQLAlchemy repositories' method contracts. Database tests use the real
repositories and are skipped unless RUN_DB_TESTS=1.
"""

import os
import random
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from assessment_engine.models.enums import SessionStatus
from assessment_engine.services.assessment_session_service import AssessmentSessionService
from assessment_engine.services.scoring import AnswerKey


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


# ---------------------------------------------------------------------------
# In-memory repositories
# ---------------------------------------------------------------------------

class FakeQuestionBank:
    def __init__(self):
        self.questions = []

    def add_question(
        self,
        competency_id,
        level="BASIC",
        type="MULTIPLE_CHOICE",
        points=1,
        is_active=True,
        option_count=4,
    ):
        """Add a question; for choice questions the first option is the correct one."""
        question_id = uuid.uuid4()
        options = []
        if type == "TRUE_FALSE":
            options = [
                SimpleNamespace(id=uuid.uuid4(), text="True", is_correct=True, order=0),
                SimpleNamespace(id=uuid.uuid4(), text="False", is_correct=False, order=1),
            ]
        elif type == "MULTIPLE_CHOICE":
            options = [
                SimpleNamespace(id=uuid.uuid4(), text=f"Option {n}", is_correct=(n == 0), order=n)
                for n in range(option_count)
            ]
        question = SimpleNamespace(
            id=question_id,
            competency_id=competency_id,
            level=level,
            text=f"{level} question {len(self.questions) + 1}",
            type=type,
            points=points,
            explanation=None,
            is_active=is_active,
            options=options,
        )
        self.questions.append(question)
        return question

    def add_questions(self, competency_id, count, level="BASIC", **kwargs):
        return [self.add_question(competency_id, level=level, **kwargs) for _ in range(count)]

    def get(self, question_id):
        return next(q for q in self.questions if q.id == question_id)

    async def list_active_question_ids(self, competency_id, level=None):
        return [
            q.id
            for q in self.questions
            if q.competency_id == competency_id and q.is_active and (level is None or q.level == level)
        ]

    async def get_questions(self, question_ids):
        wanted = set(question_ids)
        return {q.id: (q, q.level) for q in self.questions if q.id in wanted}

    async def get_answer_keys(self, question_ids):
        wanted = set(question_ids)
        keys = {}
        for q in self.questions:
            if q.id not in wanted:
                continue
            correct = next((o for o in q.options if o.is_correct), None)
            keys[q.id] = AnswerKey(
                question_id=q.id,
                question_type=q.type,
                points=q.points,
                correct_option_id=correct.id if correct else None,
                correct_option_text=correct.text if correct else None,
            )
        return keys


class FakeSessionRepository:
    def __init__(self):
        self.sessions = {}
        self.responses = []
        self.lock_calls = []
        self.events = []
        self.seq = 0

    async def acquire_attempt_lock(self, user_id, competency_id):
        self.lock_calls.append((user_id, competency_id))
        self.events.append("lock")

    async def count_completed(self, user_id, competency_id):
        self.events.append("count")
        return sum(
            1
            for s in self.sessions.values()
            if s.user_id == user_id
            and s.competency_id == competency_id
            and s.status == SessionStatus.COMPLETED.value
        )

    async def recent_question_ids(self, user_id, competency_id, limit):
        completed = sorted(
            (
                s
                for s in self.sessions.values()
                if s.user_id == user_id
                and s.competency_id == competency_id
                and s.status == SessionStatus.COMPLETED.value
            ),
            key=lambda s: (s.completed_at, s.seq),
            reverse=True,
        )
        rows = []
        for session in completed:
            rows.extend(r.question_id for r in self.responses if r.session_id == session.id)
        seen = {}
        for question_id in rows[:limit]:
            seen.setdefault(question_id, None)
        return list(seen)

    async def create(self, user_id, competency_id, started_at, assessment_id=None):
        self.seq += 1
        session = SimpleNamespace(
            id=uuid.uuid4(),
            seq=self.seq,
            user_id=user_id,
            competency_id=competency_id,
            assessment_id=assessment_id,
            status=SessionStatus.IN_PROGRESS.value,
            started_at=started_at,
            completed_at=None,
            score=None,
            percentage_score=None,
            correct_answers=None,
            total_questions=None,
            system_level=None,
            user_confirmed_level=None,
            manager_selected_level=None,
        )
        self.sessions[session.id] = session
        return session

    async def get_by_id(self, session_id):
        return self.sessions.get(session_id)

    async def get_for_update(self, session_id):
        return self.sessions.get(session_id)

    async def add_responses(self, session_id, evaluated):
        for answer in evaluated:
            self.responses.append(
                SimpleNamespace(
                    id=uuid.uuid4(),
                    session_id=session_id,
                    question_id=answer.question_id,
                    selected_option_id=answer.selected_option_id,
                    answer_text=answer.answer_text,
                    is_correct=answer.is_correct,
                    points_earned=answer.points_earned,
                )
            )

    async def complete(self, session, summary, completed_at):
        session.status = SessionStatus.COMPLETED.value
        session.completed_at = completed_at
        session.score = summary.total_score
        session.percentage_score = summary.percentage_score
        session.correct_answers = summary.correct_answers
        session.total_questions = summary.total_questions
        session.system_level = summary.system_level.value
        return session

    async def set_user_confirmed_level(self, session, level):
        session.user_confirmed_level = level
        return session

    async def set_manager_selected_level(self, session, level):
        session.manager_selected_level = level
        return session

    def _completed(self, user_id):
        return [
            s
            for s in self.sessions.values()
            if s.user_id == user_id and s.status == SessionStatus.COMPLETED.value
        ]

    async def latest_completed(self, user_id, competency_id):
        candidates = [s for s in self._completed(user_id) if s.competency_id == competency_id]
        return max(candidates, key=lambda s: (s.completed_at, s.seq), default=None)

    async def list_for_user(self, user_id):
        sessions = [s for s in self.sessions.values() if s.user_id == user_id]
        open_sessions = sorted(
            (s for s in sessions if s.completed_at is None), key=lambda s: s.seq, reverse=True
        )
        closed = sorted(
            (s for s in sessions if s.completed_at is not None),
            key=lambda s: (s.completed_at, s.seq),
            reverse=True,
        )
        return closed + open_sessions

    async def latest_completed_per_competency(self, user_id):
        latest = {}
        for session in self._completed(user_id):
            current = latest.get(session.competency_id)
            if current is None or (session.completed_at, session.seq) > (current.completed_at, current.seq):
                latest[session.competency_id] = session
        return list(latest.values())

    async def list_responses(self, session_id):
        return [r for r in self.responses if r.session_id == session_id]


class FakeAssessmentRepository:
    def __init__(self):
        self.assessments = []

    def add(self, competency_id=None, **overrides):
        values = dict(
            id=uuid.uuid4(),
            name="Assessment",
            competency_id=competency_id,
            is_active=True,
            apply_to_all=False,
            num_questions=10,
            time_limit_minutes=30,
            selection_strategy="RANDOM",
            allow_multiple_attempts=True,
            max_attempts=3,
            show_timer=True,
            force_time_limit=False,
            show_dashboard=True,
            show_correct_answers=True,
            show_incorrect_answers=True,
            updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=len(self.assessments)),
        )
        values.update(overrides)
        assessment = SimpleNamespace(**values)
        self.assessments.append(assessment)
        return assessment

    def _latest(self, rows):
        return max(rows, key=lambda a: a.updated_at, default=None)

    async def get_active_by_id(self, assessment_id):
        return next((a for a in self.assessments if a.id == assessment_id and a.is_active), None)

    async def get_latest_active_for_competency(self, competency_id):
        return self._latest([a for a in self.assessments if a.competency_id == competency_id and a.is_active])

    async def get_latest_active_global(self):
        return self._latest([a for a in self.assessments if a.apply_to_all and a.is_active])


class FakeCompetencyRepository:
    def __init__(self, question_bank):
        self.question_bank = question_bank
        self.competencies = {}

    def add(self, name, description=None):
        competency = SimpleNamespace(id=uuid.uuid4(), name=name, description=description)
        self.competencies[competency.id] = competency
        return competency

    async def get_names(self, competency_ids):
        return {cid: self.competencies[cid].name for cid in set(competency_ids) if cid in self.competencies}

    async def list_with_active_question_counts(self):
        rows = []
        for competency in sorted(self.competencies.values(), key=lambda c: c.name):
            count = len(await self.question_bank.list_active_question_ids(competency.id))
            if count > 0:
                rows.append((competency, count))
        return rows


class EngineEnv:
    """Bundle of in-memory repositories plus a service factory."""

    def __init__(self):
        self.bank = FakeQuestionBank()
        self.sessions = FakeSessionRepository()
        self.assessments = FakeAssessmentRepository()
        self.competencies = FakeCompetencyRepository(self.bank)

    def service(self, seed=1234):
        return AssessmentSessionService(
            sessions=self.sessions,
            question_bank=self.bank,
            assessments=self.assessments,
            competencies=self.competencies,
            rng=random.Random(seed),
        )


class FakeDb:
    """Stands in for AsyncSession where routers only commit."""

    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


@pytest.fixture
def env():
    return EngineEnv()


@pytest.fixture
def fake_db():
    return FakeDb()
