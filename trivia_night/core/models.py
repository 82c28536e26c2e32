"""Domain models for the trivia game."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    """Question taxonomy; each value is also a badge a group can collect."""

    HISTORY = "history"
    GEOGRAPHY = "geography"
    SCIENCE = "science"
    SPORTS = "sports"
    ART = "art"
    ENTERTAINMENT = "entertainment"


class Language(str, Enum):
    """Language of the question pool being played."""

    TR = "tr"
    EN = "en"


class GamePhase(str, Enum):
    """Coarse progression state derived from the game state fields."""

    NOT_STARTED = "not_started"
    AWAITING_CATEGORY = "awaiting_category"
    AWAITING_ANSWER = "awaiting_answer"
    WON = "won"


# Wheel order, also the order badges are listed in.
ALL_CATEGORIES: tuple[Category, ...] = tuple(Category)


@dataclass(frozen=True, slots=True)
class Question:
    """A trivia question as loaded from the pool.

    Classic questions carry no options; their ``correct_answer_key`` is the
    answer text itself.
    """

    id: str | int
    text: str
    category: Category
    language: Language
    correct_answer_key: str
    options: dict[str, str] | None = field(default=None, hash=False)

    @property
    def has_options(self) -> bool:
        return bool(self.options)

    def is_correct_option(self, option_key: str) -> bool:
        return option_key.strip().lower() == self.correct_answer_key.strip().lower()

    def correct_answer_text(self) -> str:
        if self.options:
            return self.options.get(self.correct_answer_key, self.correct_answer_key)
        return self.correct_answer_key


@dataclass(frozen=True, slots=True)
class Player:
    """A member of a group; display only."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Group:
    """A team and its running score."""

    id: str
    name: str
    players: tuple[Player, ...]
    jokers: int = 0
    badges: frozenset[Category] = frozenset()
    correct_answers: int = 0
    wrong_answers: int = 0
    answered_question_ids: frozenset[str | int] = frozenset()

    @property
    def is_winning(self) -> bool:
        return len(self.badges) == len(ALL_CATEGORIES)

    def missing_badges(self) -> list[Category]:
        return [category for category in ALL_CATEGORIES if category not in self.badges]


@dataclass(frozen=True, slots=True)
class GameState:
    """Root aggregate owned by the state machine."""

    groups: tuple[Group, ...] = ()
    current_group_index: int = 0
    current_question: Question | None = None
    selected_category: Category | None = None
    time_remaining: int = 30
    is_game_started: bool = False
    winner: Group | None = None
    language: Language = Language.TR

    @property
    def phase(self) -> GamePhase:
        if self.winner is not None:
            return GamePhase.WON
        if not self.is_game_started:
            return GamePhase.NOT_STARTED
        if self.current_question is None:
            return GamePhase.AWAITING_CATEGORY
        return GamePhase.AWAITING_ANSWER

    @property
    def current_group(self) -> Group | None:
        if 0 <= self.current_group_index < len(self.groups):
            return self.groups[self.current_group_index]
        return None

    def find_group(self, group_id: str) -> Group | None:
        return next((group for group in self.groups if group.id == group_id), None)
