"""
Seed script to create a demo competency with a question bank and assessment.

Creates one competency with all four levels, three multiple-choice and one
true/false question per level, and an active RANDOM assessment for it.

Usage:
    python scripts/seed_test_data.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path so we can import assessment_engine modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from assessment_engine.db.session import AsyncSessionLocal
from assessment_engine.models import Assessment, Competency, CompetencyLevel, Question, QuestionOption
from assessment_engine.models.enums import LEVEL_ORDER, QuestionType, SelectionStrategy

COMPETENCY_NAME = "Python Programming"
QUESTIONS_PER_LEVEL = 3


async def seed_test_data():
    """Create the demo competency, questions and assessment if missing."""

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Competency).where(Competency.name == COMPETENCY_NAME))
        competency = result.scalar_one_or_none()

        if competency:
            print(f"[OK] Found existing competency: {competency.name} (ID: {competency.id})")
            return

        competency = Competency(name=COMPETENCY_NAME, description="Writing and reviewing Python code")
        db.add(competency)
        await db.flush()
        print(f"[OK] Created competency: {competency.name} (ID: {competency.id})")

        question_count = 0
        for level in LEVEL_ORDER:
            level_row = CompetencyLevel(
                competency_id=competency.id,
                level=level.value,
                description=f"{level.value.title()} Python proficiency",
            )
            db.add(level_row)
            await db.flush()

            for n in range(1, QUESTIONS_PER_LEVEL + 1):
                question = Question(
                    competency_id=competency.id,
                    competency_level_id=level_row.id,
                    text=f"[{level.value}] Multiple choice question {n}",
                    type=QuestionType.MULTIPLE_CHOICE.value,
                    points=1,
                    explanation="Option A is the correct answer.",
                )
                db.add(question)
                await db.flush()
                for order, label in enumerate("ABCD"):
                    db.add(
                        QuestionOption(
                            question_id=question.id,
                            text=f"Option {label}",
                            is_correct=(label == "A"),
                            order=order,
                        )
                    )
                question_count += 1

            true_false = Question(
                competency_id=competency.id,
                competency_level_id=level_row.id,
                text=f"[{level.value}] Python lists are mutable.",
                type=QuestionType.TRUE_FALSE.value,
                points=1,
            )
            db.add(true_false)
            await db.flush()
            db.add(QuestionOption(question_id=true_false.id, text="True", is_correct=True, order=0))
            db.add(QuestionOption(question_id=true_false.id, text="False", is_correct=False, order=1))
            question_count += 1

        print(f"[OK] Created {question_count} questions across {len(LEVEL_ORDER)} levels")

        assessment = Assessment(
            name=f"{COMPETENCY_NAME} assessment",
            competency_id=competency.id,
            is_active=True,
            num_questions=10,
            time_limit_minutes=30,
            selection_strategy=SelectionStrategy.RANDOM.value,
            allow_multiple_attempts=True,
            max_attempts=3,
        )
        db.add(assessment)
        await db.commit()
        print(f"[OK] Created assessment: {assessment.name} (ID: {assessment.id})")

    print("\n[OK] Seed data created successfully!")


if __name__ == "__main__":
    asyncio.run(seed_test_data())
