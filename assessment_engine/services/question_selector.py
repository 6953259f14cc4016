"""
Question Selector.

RANDOM:
    draw ``quantity`` active questions for the competency, avoiding the
    user's recently answered questions. When the exclusion leaves too few,
    redraw from the full pool so the user is never blocked.

BY_LEVEL:
    draw 2 questions from each level (BASIC, INTERMEDIATE, ADVANCED,
    MASTERY) with the same exclusion-then-fallback rule, concatenated in
    level order. A short level is not padded from another level; the caller
    sees fewer than 8 questions and decides what to do.

The random source is injectable so tests can seed it.
"""

import logging
import random
from typing import Collection, List, Optional, Sequence, TypeVar
from uuid import UUID

from assessment_engine.models.enums import LEVEL_ORDER, SelectionStrategy
from assessment_engine.services.settings_resolver import QUESTIONS_PER_LEVEL

logger = logging.getLogger(__name__)

T = TypeVar("T")


def shuffle_options(options: Sequence[T], rng: random.Random) -> List[T]:
    """Fisher-Yates shuffle into a new list; the input is left untouched."""
    shuffled = list(options)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class QuestionSelector:
    def __init__(self, question_bank, rng: Optional[random.Random] = None):
        self.question_bank = question_bank
        self.rng = rng or random.Random()

    async def select(
        self,
        competency_id: UUID,
        quantity: int,
        strategy: str,
        exclude_ids: Collection[UUID] = (),
    ) -> List[UUID]:
        exclude = set(exclude_ids)
        if strategy == SelectionStrategy.BY_LEVEL.value:
            return await self._select_by_level(competency_id, exclude)
        pool = await self.question_bank.list_active_question_ids(competency_id)
        return self._draw(pool, quantity, exclude, label="all levels")

    async def _select_by_level(self, competency_id: UUID, exclude: set) -> List[UUID]:
        picked: List[UUID] = []
        for level in LEVEL_ORDER:
            pool = await self.question_bank.list_active_question_ids(competency_id, level=level.value)
            drawn = self._draw(pool, QUESTIONS_PER_LEVEL, exclude, label=level.value)
            if len(drawn) < QUESTIONS_PER_LEVEL:
                logger.warning(
                    "Competency %s has %s eligible %s questions, wanted %s",
                    competency_id,
                    len(drawn),
                    level.value,
                    QUESTIONS_PER_LEVEL,
                )
            picked.extend(drawn)
        return picked

    def _draw(self, pool: Sequence[UUID], quantity: int, exclude: set, label: str) -> List[UUID]:
        if quantity <= 0:
            return []
        eligible = [qid for qid in pool if qid not in exclude]
        first = self.rng.sample(eligible, min(quantity, len(eligible)))
        if len(first) >= quantity:
            return first

        # Unseen questions ran out; retry against the whole pool
        fallback = self.rng.sample(list(pool), min(quantity, len(pool)))
        if len(fallback) >= len(first):
            logger.warning(
                "Exclusion left %s of %s needed (%s); drew %s ignoring recent history",
                len(first),
                quantity,
                label,
                len(fallback),
            )
            return fallback
        return first
