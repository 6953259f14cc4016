import pytest

from assessment_engine.errors import ValidationError
from assessment_engine.models.enums import ProficiencyLevel
from assessment_engine.services.level_reconciliation import (
    effective_level,
    has_gap,
    level_rank,
    normalize_level,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "manager,user,system,expected",
    [
        ("BASIC", "MASTERY", "ADVANCED", "BASIC"),
        (None, "MASTERY", "ADVANCED", "MASTERY"),
        (None, None, "ADVANCED", "ADVANCED"),
        (None, None, None, None),
        ("", "INTERMEDIATE", "BASIC", "INTERMEDIATE"),
        (ProficiencyLevel.MASTERY, None, "BASIC", "MASTERY"),
    ],
)
def test_effective_level_precedence(manager, user, system, expected):
    assert effective_level(manager, user, system) == expected


def test_level_rank_orders_levels():
    assert [level_rank(l) for l in ("BASIC", "INTERMEDIATE", "ADVANCED", "MASTERY")] == [0, 1, 2, 3]
    assert level_rank(None) == -1
    assert level_rank("EXPERT") == -1


@pytest.mark.parametrize(
    "effective,required,gap",
    [
        ("BASIC", "ADVANCED", True),
        ("ADVANCED", "ADVANCED", False),
        ("MASTERY", "INTERMEDIATE", False),
        (None, "BASIC", True),
        ("BASIC", None, False),
    ],
)
def test_has_gap(effective, required, gap):
    assert has_gap(effective, required) is gap


def test_normalize_level_accepts_enum_and_string():
    assert normalize_level(ProficiencyLevel.ADVANCED) == "ADVANCED"
    assert normalize_level("MASTERY") == "MASTERY"


@pytest.mark.parametrize("value", [None, "", "advanced", "EXPERT"])
def test_normalize_level_rejects_unknown_values(value):
    with pytest.raises(ValidationError) as exc:
        normalize_level(value, "user_confirmed_level")
    assert exc.value.details["field"] == "user_confirmed_level"
