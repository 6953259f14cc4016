"""
Competency catalog models.

Owned by the catalog administration workflows; the engine only reads them.
"""

import uuid
from typing import Optional, List

from sqlalchemy import String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assessment_engine.models.base_model import TimestampedModel


class Competency(TimestampedModel):
    """Competency table - a named skill/knowledge area."""

    __tablename__ = "competency"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    levels: Mapped[List["CompetencyLevel"]] = relationship(
        "CompetencyLevel",
        back_populates="competency",
        lazy="selectin",
    )


class CompetencyLevel(TimestampedModel):
    """One of the four ordered levels defined for a competency."""

    __tablename__ = "competency_level"
    __table_args__ = (
        UniqueConstraint("competency_id", "level", name="uq_competency_level"),
    )

    competency_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("competency.id"),
        nullable=False,
        index=True,
    )

    # BASIC / INTERMEDIATE / ADVANCED / MASTERY
    level: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    competency: Mapped["Competency"] = relationship(
        "Competency",
        back_populates="levels",
    )
