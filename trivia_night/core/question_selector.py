"""Random question selection that avoids repeats within a group."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
import random

from trivia_night.core.models import Group, Question

_default_rng = random.Random()


def select_question(
    pool: Sequence[Question],
    exclude_ids: Collection[str | int],
    rng: random.Random | None = None,
) -> Question | None:
    """Pick one question uniformly from ``pool`` whose id is not excluded.

    Returns ``None`` when every question is excluded, which callers surface
    as "no more questions in this category".
    """
    eligible = [question for question in pool if question.id not in exclude_ids]
    if not eligible:
        return None
    return (rng or _default_rng).choice(eligible)


def exclusions_for(group: Group, current_question: Question | None = None) -> set[str | int]:
    """Ids a group must not be asked: its answered questions plus the one on screen."""
    excluded: set[str | int] = set(group.answered_question_ids)
    if current_question is not None:
        excluded.add(current_question.id)
    return excluded


def count_remaining(pool: Iterable[Question], exclude_ids: Collection[str | int]) -> int:
    return sum(1 for question in pool if question.id not in exclude_ids)
