"""
AssessmentSession and AssessmentResponse models.

A session is one attempt by a user at a competency's assessment. It is
created IN_PROGRESS by ``start`` and moved to COMPLETED by ``submit``;
sessions are never deleted by the engine.
"""

import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assessment_engine.models.base_model import TimestampedModel


class AssessmentSession(TimestampedModel):
    """
    AssessmentSession table - one attempt.

    score, percentage_score and system_level are written once, on the
    transition to COMPLETED. user_confirmed_level and
    manager_selected_level are written independently afterwards.
    """

    __tablename__ = "assessment_session"
    __table_args__ = (
        Index("ix_assessment_session_user_competency_status", "user_id", "competency_id", "status"),
    )

    # Employee identifier from the user directory
    user_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    competency_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("competency.id"),
        nullable=False,
    )

    # Settings row that governed this attempt, when one resolved
    assessment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessment.id"),
        nullable=True,
    )

    # IN_PROGRESS / COMPLETED
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="IN_PROGRESS",
    )

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    percentage_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    correct_answers: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_questions: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Three independent level opinions
    system_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    user_confirmed_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    manager_selected_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    responses: Mapped[List["AssessmentResponse"]] = relationship(
        "AssessmentResponse",
        back_populates="session",
        lazy="noload",
    )


class AssessmentResponse(TimestampedModel):
    """One answered question within a session. Created once, never updated."""

    __tablename__ = "assessment_response"
    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uq_assessment_response_session_question"),
    )

    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assessment_session.id"),
        nullable=False,
        index=True,
    )

    question_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("question.id"),
        nullable=False,
    )

    selected_option_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("question_option.id"),
        nullable=True,
    )

    answer_text: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    is_correct: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    points_earned: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    session: Mapped["AssessmentSession"] = relationship(
        "AssessmentSession",
        back_populates="responses",
    )
