"""Actions accepted by the game state machine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from trivia_night.core.models import Category, Group, Language, Question


@dataclass(frozen=True, slots=True)
class StartGame:
    groups: tuple[Group, ...]


@dataclass(frozen=True, slots=True)
class SetSelectedCategory:
    category: Category | None


@dataclass(frozen=True, slots=True)
class SetQuestion:
    """Attach a question and restart the answer clock at ``answer_time_seconds``."""

    question: Question
    answer_time_seconds: int


@dataclass(frozen=True, slots=True)
class AnswerQuestion:
    correct: bool
    category: Category


@dataclass(frozen=True, slots=True)
class UseJoker:
    group_id: str


@dataclass(frozen=True, slots=True)
class SetTimeRemaining:
    seconds: int


@dataclass(frozen=True, slots=True)
class ResetQuestion:
    pass


@dataclass(frozen=True, slots=True)
class PassTurn:
    """Hand the turn to the next group without scoring."""


@dataclass(frozen=True, slots=True)
class EndGame:
    pass


@dataclass(frozen=True, slots=True)
class SetLanguage:
    language: Language


GameAction = Union[
    StartGame,
    SetSelectedCategory,
    SetQuestion,
    AnswerQuestion,
    UseJoker,
    SetTimeRemaining,
    ResetQuestion,
    PassTurn,
    EndGame,
    SetLanguage,
]
