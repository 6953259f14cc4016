"""
Question bank models.

Questions and their options are authored elsewhere; the engine reads them
to build sessions and to score answers.
"""

import uuid
from typing import Optional, List

from sqlalchemy import String, Text, Integer, Boolean, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assessment_engine.models.base_model import TimestampedModel


class Question(TimestampedModel):
    """Question table - one item of the question bank."""

    __tablename__ = "question"
    __table_args__ = (
        Index("ix_question_competency_active", "competency_id", "is_active"),
    )

    competency_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("competency.id"),
        nullable=False,
    )

    competency_level_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("competency_level.id"),
        nullable=True,
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # MULTIPLE_CHOICE / TRUE_FALSE / SHORT_ANSWER / ESSAY
    type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
    )

    points: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    explanation: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    options: Mapped[List["QuestionOption"]] = relationship(
        "QuestionOption",
        back_populates="question",
        order_by="QuestionOption.order",
        lazy="selectin",
    )


class QuestionOption(TimestampedModel):
    """Answer option for MULTIPLE_CHOICE / TRUE_FALSE questions."""

    __tablename__ = "question_option"

    question_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("question.id"),
        nullable=False,
        index=True,
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    is_correct: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Authoring order; sessions present options in a shuffled order instead
    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    question: Mapped["Question"] = relationship(
        "Question",
        back_populates="options",
    )
