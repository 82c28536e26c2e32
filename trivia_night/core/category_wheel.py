"""Category wheel: a fair draw over the categories plus a cosmetic spin path.

The landing index is drawn once, before the highlight sequence is built, and
the sequence is only ever derived from it. Renderers can animate the path in
any way they like without affecting which category wins.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import random

from trivia_night.core.models import ALL_CATEGORIES, Category

_MIN_LAPS = 2
_MAX_LAPS = 4


@dataclass(frozen=True, slots=True)
class WheelSpin:
    """Outcome of one spin."""

    category: Category
    index: int
    highlight_sequence: tuple[Category, ...]


class CategoryWheel:
    """Spins over an ordered set of categories."""

    def __init__(
        self,
        categories: Sequence[Category] = ALL_CATEGORIES,
        rng: random.Random | None = None,
    ) -> None:
        if not categories:
            raise ValueError("The wheel needs at least one category.")
        self._categories = tuple(categories)
        self._rng = rng or random.Random()

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._categories

    def spin(self, start_index: int = 0) -> WheelSpin:
        """Resolve the winning category, then build the highlight path towards it."""
        index = self._rng.randrange(len(self._categories))
        laps = self._rng.randint(_MIN_LAPS, _MAX_LAPS)
        return WheelSpin(
            category=self._categories[index],
            index=index,
            highlight_sequence=self._highlight_path(start_index, index, laps),
        )

    def _highlight_path(self, start_index: int, final_index: int, laps: int) -> tuple[Category, ...]:
        size = len(self._categories)
        start = start_index % size
        steps = laps * size + (final_index - start) % size
        return tuple(self._categories[(start + step) % size] for step in range(1, steps + 1))


def spin_categories(
    categories: Sequence[Category] = ALL_CATEGORIES,
    rng: random.Random | None = None,
) -> Category:
    """Return one category drawn uniformly from ``categories``."""
    return CategoryWheel(categories, rng).spin().category
