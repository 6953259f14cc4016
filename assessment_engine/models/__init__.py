"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from assessment_engine.models.competency import Competency, CompetencyLevel
from assessment_engine.models.question import Question, QuestionOption
from assessment_engine.models.assessment import Assessment
from assessment_engine.models.assessment_session import AssessmentSession, AssessmentResponse

# Export all models
__all__ = [
    "Competency",
    "CompetencyLevel",
    "Question",
    "QuestionOption",
    "Assessment",
    "AssessmentSession",
    "AssessmentResponse",
]
