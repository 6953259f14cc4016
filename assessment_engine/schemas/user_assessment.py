"""
Schemas for user assessment sessions: start, submit, level writes and results.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from assessment_engine.models.enums import ProficiencyLevel


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SessionStartRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=100)
    competency_id: UUID
    assessment_id: Optional[UUID] = None

    @field_validator("user_id")
    @classmethod
    def strip_user_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("user_id must not be blank")
        return value


class AnswerSubmit(BaseModel):
    question_id: UUID
    selected_option_id: Optional[UUID] = None
    answer_text: Optional[str] = None


class SessionSubmitRequest(BaseModel):
    session_id: UUID
    answers: List[AnswerSubmit] = Field(..., min_length=1)


class ConfirmLevelRequest(BaseModel):
    session_id: UUID
    user_confirmed_level: ProficiencyLevel


class ManagerLevelRequest(BaseModel):
    session_id: UUID
    manager_selected_level: ProficiencyLevel


# ---------------------------------------------------------------------------
# Settings / attempts
# ---------------------------------------------------------------------------

class AttemptsInfoRead(BaseModel):
    attempts_used: int
    attempts_allowed: int
    attempts_left: int

    model_config = ConfigDict(from_attributes=True)


class DisplaySettingsRead(BaseModel):
    show_timer: bool
    force_time_limit: bool
    show_dashboard: bool
    show_correct_answers: bool
    show_incorrect_answers: bool
    allow_multiple_attempts: bool
    max_attempts: int


class SettingsSummaryRead(BaseModel):
    competency_id: UUID
    assessment_id: Optional[UUID] = None
    num_questions: int
    time_limit_minutes: int
    selection_strategy: str
    allow_multiple_attempts: bool
    max_attempts: int
    attempts_used: Optional[int] = None
    attempts_left: Optional[int] = None


class CompetencyAvailabilityRead(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    question_count: int
    num_questions: int
    time_limit_minutes: int


# ---------------------------------------------------------------------------
# Session start
# ---------------------------------------------------------------------------

class SessionOptionRead(BaseModel):
    """Option as presented to the user. Correctness is never included."""

    id: UUID
    text: str
    order_index: int


class SessionQuestionRead(BaseModel):
    id: UUID
    text: str
    type: str
    points: int
    explanation: Optional[str] = None
    competency_level: Optional[str] = None
    options: List[SessionOptionRead] = Field(default_factory=list)


class SessionStartResponse(BaseModel):
    session_id: UUID
    competency_id: UUID
    competency_name: Optional[str] = None
    started_at: datetime
    time_limit_minutes: int
    selection_strategy: str
    questions: List[SessionQuestionRead]
    settings: DisplaySettingsRead


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class SubmissionResultRead(BaseModel):
    session_id: UUID
    total_score: int
    percentage_score: int
    correct_answers: int
    total_questions: int
    competency_level: ProficiencyLevel
    completed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LevelUpdateRead(BaseModel):
    session_id: UUID
    system_level: Optional[str] = None
    user_confirmed_level: Optional[str] = None
    manager_selected_level: Optional[str] = None
    effective_level: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ResponseDetailRead(BaseModel):
    question_id: UUID
    question_text: Optional[str] = None
    question_type: Optional[str] = None
    points: Optional[int] = None
    selected_option_id: Optional[UUID] = None
    selected_option_text: Optional[str] = None
    answer_text: Optional[str] = None
    is_correct: bool
    points_earned: int
    correct_option_id: Optional[UUID] = None
    correct_option_text: Optional[str] = None


class SessionSummaryRead(BaseModel):
    session_id: UUID
    user_id: str
    competency_id: UUID
    competency_name: Optional[str] = None
    status: str
    score: Optional[int] = None
    percentage_score: Optional[int] = None
    correct_answers: Optional[int] = None
    total_questions: Optional[int] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    system_level: Optional[str] = None
    user_confirmed_level: Optional[str] = None
    manager_selected_level: Optional[str] = None
    effective_level: Optional[str] = None


class SessionDetailRead(SessionSummaryRead):
    correct_answers_revealed: bool = False
    details: List[ResponseDetailRead] = Field(default_factory=list)


class LatestResultRead(SessionDetailRead):
    required_level: Optional[str] = None
    has_gap: Optional[bool] = None
