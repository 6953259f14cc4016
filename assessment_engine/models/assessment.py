"""
Assessment model.

Per-competency (or global "apply to all") configuration for sessions:
question count, time limit, selection strategy, attempt policy and
display flags.
"""

import uuid
from typing import Optional

from sqlalchemy import String, Text, Integer, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from assessment_engine.models.base_model import TimestampedModel


class Assessment(TimestampedModel):
    """Assessment settings table."""

    __tablename__ = "assessment"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Null for global assessments
    competency_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("competency.id"),
        nullable=True,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    apply_to_all: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    num_questions: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    time_limit_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # RANDOM / BY_LEVEL
    selection_strategy: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="RANDOM",
    )

    allow_multiple_attempts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_attempts: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Display flags passed through to the client
    show_timer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    force_time_limit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_dashboard: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_correct_answers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_incorrect_answers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
