"""Exceptions raised by the trivia core services."""

from __future__ import annotations


class TriviaError(Exception):
    """Base class for recoverable trivia game errors."""


class QuestionsExhausted(TriviaError):
    """No eligible question remains for the category and group."""

    def __init__(self, category: str, group_name: str | None = None) -> None:
        self.category = category
        self.group_name = group_name
        target = f" for {group_name}" if group_name else ""
        super().__init__(f"No more questions in category '{category}'{target}.")


class PoolUnavailable(TriviaError):
    """Question data for a language and category could not be loaded."""


class PersistenceError(TriviaError):
    """A game state store failed to load, save or clear."""


class InvalidAction(TriviaError):
    """The requested action does not apply to the current game state."""


class GameNotStarted(InvalidAction):
    def __init__(self) -> None:
        super().__init__("No game is in progress.")


class GameAlreadyWon(InvalidAction):
    def __init__(self, winner_name: str) -> None:
        super().__init__(f"The game is over, {winner_name} already won.")


class NoActiveQuestion(InvalidAction):
    def __init__(self) -> None:
        super().__init__("There is no question to answer.")


class NoJokersLeft(InvalidAction):
    def __init__(self, group_name: str) -> None:
        self.group_name = group_name
        super().__init__(f"{group_name} has no jokers left.")


class SetupError(ValueError):
    """Setup-screen input cannot start a game."""
