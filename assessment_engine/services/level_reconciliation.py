"""
Level reconciliation.

A completed session carries up to three level opinions: the system level
from scoring, the level the user confirms, and the level a manager selects.
The effective level is the first present of manager, user, system.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from assessment_engine.errors import SessionNotFound, ValidationError
from assessment_engine.models.enums import LEVEL_ORDER, ProficiencyLevel

logger = logging.getLogger(__name__)

LevelLike = Union[ProficiencyLevel, str, None]

_RANK = {level.value: index for index, level in enumerate(LEVEL_ORDER)}


@dataclass(frozen=True)
class LevelSnapshot:
    session_id: UUID
    system_level: Optional[str]
    user_confirmed_level: Optional[str]
    manager_selected_level: Optional[str]

    @property
    def effective_level(self) -> Optional[str]:
        return effective_level(self.manager_selected_level, self.user_confirmed_level, self.system_level)


def _value(level: LevelLike) -> Optional[str]:
    if level is None:
        return None
    if isinstance(level, ProficiencyLevel):
        return level.value
    return level or None


def normalize_level(level: LevelLike, field: str = "level") -> str:
    """Return the canonical level string or raise ValidationError."""
    value = _value(level)
    if value is None or value not in _RANK:
        raise ValidationError(
            f"{field} must be one of {', '.join(_RANK)}",
            {"field": field, "value": value},
        )
    return value


def effective_level(manager: LevelLike, user: LevelLike, system: LevelLike) -> Optional[str]:
    return _value(manager) or _value(user) or _value(system)


def level_rank(level: LevelLike) -> int:
    """0 for BASIC up to 3 for MASTERY; -1 when the level is absent or unknown."""
    value = _value(level)
    if value is None:
        return -1
    return _RANK.get(value, -1)


def has_gap(effective: LevelLike, required: LevelLike) -> bool:
    """True when the effective level ranks below the required level."""
    if _value(required) is None:
        return False
    return level_rank(effective) < level_rank(required)


def snapshot(session) -> LevelSnapshot:
    return LevelSnapshot(
        session_id=session.id,
        system_level=session.system_level,
        user_confirmed_level=session.user_confirmed_level,
        manager_selected_level=session.manager_selected_level,
    )


class LevelReconciliation:
    """Writes the user and manager level opinions onto existing sessions."""

    def __init__(self, sessions):
        self.sessions = sessions

    async def confirm_user_level(self, session_id: UUID, level: LevelLike) -> LevelSnapshot:
        value = normalize_level(level, "user_confirmed_level")
        session = await self.sessions.get_by_id(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        await self.sessions.set_user_confirmed_level(session, value)
        logger.info("Session %s: user confirmed level %s", session_id, value)
        return snapshot(session)

    async def set_manager_level(self, session_id: UUID, level: LevelLike) -> LevelSnapshot:
        value = normalize_level(level, "manager_selected_level")
        session = await self.sessions.get_by_id(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        await self.sessions.set_manager_selected_level(session, value)
        logger.info("Session %s: manager selected level %s", session_id, value)
        return snapshot(session)
