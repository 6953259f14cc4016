"""
Schemas package.

Import all schemas here for easy access.
"""

from assessment_engine.schemas.user_assessment import (
    SessionStartRequest,
    AnswerSubmit,
    SessionSubmitRequest,
    ConfirmLevelRequest,
    ManagerLevelRequest,
    AttemptsInfoRead,
    DisplaySettingsRead,
    SettingsSummaryRead,
    CompetencyAvailabilityRead,
    SessionOptionRead,
    SessionQuestionRead,
    SessionStartResponse,
    SubmissionResultRead,
    LevelUpdateRead,
    ResponseDetailRead,
    SessionSummaryRead,
    SessionDetailRead,
    LatestResultRead,
)

__all__ = [
    "SessionStartRequest",
    "AnswerSubmit",
    "SessionSubmitRequest",
    "ConfirmLevelRequest",
    "ManagerLevelRequest",
    "AttemptsInfoRead",
    "DisplaySettingsRead",
    "SettingsSummaryRead",
    "CompetencyAvailabilityRead",
    "SessionOptionRead",
    "SessionQuestionRead",
    "SessionStartResponse",
    "SubmissionResultRead",
    "LevelUpdateRead",
    "ResponseDetailRead",
    "SessionSummaryRead",
    "SessionDetailRead",
    "LatestResultRead",
]
