"""
Attempt ledger: how many attempts a user has used and has left.

Only COMPLETED sessions count. IN_PROGRESS sessions never consume an
attempt, so abandoned sessions do not lock anyone out.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from assessment_engine.services.settings_resolver import EffectiveSettings

# Attempts allowed when multiple attempts are disabled
SINGLE_ATTEMPT = 1


@dataclass(frozen=True)
class AttemptsInfo:
    attempts_used: int
    attempts_allowed: int
    attempts_left: int

    @property
    def exhausted(self) -> bool:
        return self.attempts_left <= 0


def compute_attempts(attempts_used: int, allow_multiple_attempts: bool, max_attempts: int) -> AttemptsInfo:
    allowed = max_attempts if allow_multiple_attempts else SINGLE_ATTEMPT
    return AttemptsInfo(
        attempts_used=attempts_used,
        attempts_allowed=allowed,
        attempts_left=max(0, allowed - attempts_used),
    )


class AttemptLedger:
    def __init__(self, sessions, settings_resolver):
        self.sessions = sessions
        self.settings_resolver = settings_resolver

    async def attempts_info(
        self,
        user_id: str,
        competency_id: UUID,
        effective: Optional[EffectiveSettings] = None,
    ) -> AttemptsInfo:
        if effective is None:
            effective = await self.settings_resolver.resolve(competency_id)
        used = await self.sessions.count_completed(user_id, competency_id)
        return compute_attempts(used, effective.allow_multiple_attempts, effective.max_attempts)
