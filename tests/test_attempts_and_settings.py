import uuid
from datetime import datetime, timezone

import pytest

from assessment_engine.core.config import settings
from assessment_engine.services.attempt_ledger import compute_attempts
from assessment_engine.services.settings_resolver import SettingsResolver, settings_from_assessment

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "used,allow_multiple,max_attempts,expected",
    [
        (0, True, 3, (0, 3, 3)),
        (2, True, 3, (2, 3, 1)),
        (3, True, 3, (3, 3, 0)),
        (5, True, 3, (5, 3, 0)),
        (0, False, 3, (0, 1, 1)),
        (1, False, 3, (1, 1, 0)),
    ],
)
def test_compute_attempts(used, allow_multiple, max_attempts, expected):
    info = compute_attempts(used, allow_multiple, max_attempts)
    assert (info.attempts_used, info.attempts_allowed, info.attempts_left) == expected
    assert info.exhausted is (expected[2] == 0)


def test_defaults_when_nothing_resolves():
    effective = settings_from_assessment(None)

    assert effective.assessment_id is None
    assert effective.num_questions == settings.DEFAULT_NUM_QUESTIONS
    assert effective.time_limit_minutes == settings.DEFAULT_TIME_LIMIT_MINUTES
    assert effective.selection_strategy == "RANDOM"
    assert effective.allow_multiple_attempts is settings.DEFAULT_ALLOW_MULTIPLE_ATTEMPTS
    assert effective.max_attempts == settings.DEFAULT_MAX_ATTEMPTS
    assert effective.display_flags() == {
        "show_timer": True,
        "force_time_limit": False,
        "show_dashboard": True,
        "show_correct_answers": True,
        "show_incorrect_answers": True,
        "allow_multiple_attempts": settings.DEFAULT_ALLOW_MULTIPLE_ATTEMPTS,
        "max_attempts": settings.DEFAULT_MAX_ATTEMPTS,
    }


def test_missing_fields_fall_back_to_defaults(env):
    assessment = env.assessments.add(
        uuid.uuid4(),
        num_questions=None,
        time_limit_minutes=0,
        max_attempts=None,
        selection_strategy="WEIGHTED",
        show_timer=None,
    )

    effective = settings_from_assessment(assessment)

    assert effective.assessment_id == assessment.id
    assert effective.num_questions == settings.DEFAULT_NUM_QUESTIONS
    assert effective.time_limit_minutes == settings.DEFAULT_TIME_LIMIT_MINUTES
    assert effective.max_attempts == settings.DEFAULT_MAX_ATTEMPTS
    assert effective.selection_strategy == "RANDOM"
    assert effective.show_timer is True


def test_by_level_always_requires_eight(env):
    effective = settings_from_assessment(env.assessments.add(uuid.uuid4(), selection_strategy="BY_LEVEL", num_questions=20))
    assert effective.required_questions == 8

    effective = settings_from_assessment(env.assessments.add(uuid.uuid4(), num_questions=12))
    assert effective.required_questions == 12


@pytest.mark.asyncio
async def test_explicit_active_assessment_wins(env):
    competency_id = uuid.uuid4()
    env.assessments.add(competency_id, num_questions=5)
    explicit = env.assessments.add(None, num_questions=15)

    effective = await SettingsResolver(env.assessments).resolve(competency_id, explicit.id)

    assert effective.assessment_id == explicit.id
    assert effective.num_questions == 15


@pytest.mark.asyncio
async def test_inactive_explicit_assessment_falls_back_to_competency(env):
    competency_id = uuid.uuid4()
    scoped = env.assessments.add(competency_id, num_questions=5)
    inactive = env.assessments.add(competency_id, num_questions=15, is_active=False)

    effective = await SettingsResolver(env.assessments).resolve(competency_id, inactive.id)

    assert effective.assessment_id == scoped.id


@pytest.mark.asyncio
async def test_most_recently_updated_competency_assessment_wins(env):
    competency_id = uuid.uuid4()
    env.assessments.add(competency_id, updated_at=datetime(2026, 3, 1, tzinfo=timezone.utc))
    newest = env.assessments.add(competency_id, updated_at=datetime(2026, 5, 1, tzinfo=timezone.utc))
    env.assessments.add(competency_id, updated_at=datetime(2026, 4, 1, tzinfo=timezone.utc))

    effective = await SettingsResolver(env.assessments).resolve(competency_id)

    assert effective.assessment_id == newest.id


@pytest.mark.asyncio
async def test_global_assessment_applies_when_competency_has_none(env):
    env.assessments.add(uuid.uuid4(), num_questions=5)
    global_assessment = env.assessments.add(None, apply_to_all=True, num_questions=12)

    effective = await SettingsResolver(env.assessments).resolve(uuid.uuid4())

    assert effective.assessment_id == global_assessment.id
    assert effective.num_questions == 12
