"""Game state storage.

Separates persistence from the state machine so transitions stay pure and
testable without touching disk. Snapshots are pydantic records written as
JSON and tagged with a schema version; payloads from older layouts are
migrated on load.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, ValidationError

from trivia_night.core.errors import PersistenceError
from trivia_night.core.models import (
    ALL_CATEGORIES,
    Category,
    GameState,
    Group,
    Language,
    Player,
    Question,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2


class QuestionRecord(BaseModel):
    id: str | int
    text: str
    category: Category
    language: Language
    correct_answer_key: str
    options: dict[str, str] | None = None

    @classmethod
    def from_question(cls, question: Question) -> "QuestionRecord":
        return cls(
            id=question.id,
            text=question.text,
            category=question.category,
            language=question.language,
            correct_answer_key=question.correct_answer_key,
            options=dict(question.options) if question.options else None,
        )

    def to_question(self) -> Question:
        return Question(
            id=self.id,
            text=self.text,
            category=self.category,
            language=self.language,
            correct_answer_key=self.correct_answer_key,
            options=dict(self.options) if self.options else None,
        )


class PlayerRecord(BaseModel):
    id: str
    name: str


class GroupRecord(BaseModel):
    id: str
    name: str
    players: list[PlayerRecord] = Field(min_length=1)
    jokers: int = Field(default=0, ge=0)
    badges: list[Category] = Field(default_factory=list)
    correct_answers: int = Field(default=0, ge=0)
    wrong_answers: int = Field(default=0, ge=0)
    answered_question_ids: list[str | int] = Field(default_factory=list)

    @classmethod
    def from_group(cls, group: Group) -> "GroupRecord":
        return cls(
            id=group.id,
            name=group.name,
            players=[PlayerRecord(id=player.id, name=player.name) for player in group.players],
            jokers=group.jokers,
            badges=[category for category in ALL_CATEGORIES if category in group.badges],
            correct_answers=group.correct_answers,
            wrong_answers=group.wrong_answers,
            answered_question_ids=sorted(
                group.answered_question_ids, key=lambda value: (type(value).__name__, str(value))
            ),
        )

    def to_group(self) -> Group:
        return Group(
            id=self.id,
            name=self.name,
            players=tuple(Player(id=player.id, name=player.name) for player in self.players),
            jokers=self.jokers,
            badges=frozenset(self.badges),
            correct_answers=self.correct_answers,
            wrong_answers=self.wrong_answers,
            answered_question_ids=frozenset(self.answered_question_ids),
        )


class GameStateRecord(BaseModel):
    groups: list[GroupRecord] = Field(default_factory=list, max_length=3)
    current_group_index: int = 0
    current_question: QuestionRecord | None = None
    selected_category: Category | None = None
    time_remaining: int = Field(default=30, ge=0)
    is_game_started: bool = False
    winner: GroupRecord | None = None
    language: Language = Language.TR

    @classmethod
    def from_state(cls, state: GameState) -> "GameStateRecord":
        return cls(
            groups=[GroupRecord.from_group(group) for group in state.groups],
            current_group_index=state.current_group_index,
            current_question=(
                QuestionRecord.from_question(state.current_question)
                if state.current_question is not None
                else None
            ),
            selected_category=state.selected_category,
            time_remaining=state.time_remaining,
            is_game_started=state.is_game_started,
            winner=GroupRecord.from_group(state.winner) if state.winner is not None else None,
            language=state.language,
        )

    def to_state(self) -> GameState:
        groups = tuple(record.to_group() for record in self.groups)
        index = self.current_group_index if 0 <= self.current_group_index < len(groups) else 0
        return GameState(
            groups=groups,
            current_group_index=index,
            current_question=self.current_question.to_question() if self.current_question else None,
            selected_category=self.selected_category,
            time_remaining=self.time_remaining,
            is_game_started=self.is_game_started,
            winner=self.winner.to_group() if self.winner else None,
            language=self.language,
        )


class SavedGame(BaseModel):
    """Versioned envelope written to storage."""

    schema_version: int = SCHEMA_VERSION
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    state: GameStateRecord


def dump_state(state: GameState) -> dict[str, Any]:
    """JSON-compatible dict of ``state``."""
    return GameStateRecord.from_state(state).model_dump(mode="json")


def migrate_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Bring a stored payload up to the current schema version."""
    version = payload.get("schema_version")
    if version is None:
        payload = _migrate_legacy(payload)
        version = SCHEMA_VERSION
    if version != SCHEMA_VERSION:
        raise PersistenceError(f"Unsupported game state schema version: {version}")
    return payload


def _migrate_legacy(payload: dict[str, Any]) -> dict[str, Any]:
    """Convert the unversioned camelCase layout written by earlier releases."""
    logger.info("Migrating unversioned game state to schema version %s", SCHEMA_VERSION)
    winner = payload.get("winner")
    question = payload.get("currentQuestion")
    return {
        "schema_version": SCHEMA_VERSION,
        "state": {
            "groups": [_migrate_legacy_group(group) for group in payload.get("groups") or []],
            "current_group_index": payload.get("currentGroupIndex", 0),
            "current_question": _migrate_legacy_question(question) if question else None,
            "selected_category": payload.get("selectedCategory"),
            "time_remaining": max(0, payload.get("timeRemaining", 30)),
            "is_game_started": payload.get("isGameStarted", False),
            "winner": _migrate_legacy_group(winner) if winner else None,
            "language": payload.get("language", Language.TR.value),
        },
    }


def _migrate_legacy_group(group: dict[str, Any]) -> dict[str, Any]:
    # Older releases appended a badge on every correct answer, duplicates included.
    badges = list(dict.fromkeys(group.get("badges") or []))
    answered = group.get("answeredQuestions") or []
    return {
        "id": str(group["id"]) if "id" in group else group.get("name", ""),
        "name": group.get("name", ""),
        "players": [
            {"id": str(player.get("id", "")), "name": player.get("name", "")}
            for player in group.get("players") or []
        ],
        "jokers": max(0, group.get("jokers", 0)),
        "badges": badges,
        "correct_answers": group.get("correctAnswers", 0),
        "wrong_answers": group.get("wrongAnswers", 0),
        "answered_question_ids": list(dict.fromkeys(item["id"] for item in answered if "id" in item)),
    }


def _migrate_legacy_question(question: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": question["id"],
        "text": question.get("question", question.get("text", "")),
        "category": question["category"],
        "language": question["language"],
        "correct_answer_key": question.get("correctAnswerKey") or question.get("answer", ""),
        "options": question.get("options") or None,
    }


@runtime_checkable
class GameStateStore(Protocol):
    """
    Storage interface for the single saved game.

    Implementations:
    - JsonGameStateStore: file-based persistence (production)
    - MemoryGameStateStore: in-memory storage (testing)
    """

    def load(self) -> GameState | None:
        """Load the saved game. Returns None if nothing is saved."""
        ...

    def save(self, state: GameState) -> None:
        """Persist ``state``, replacing any previous save."""
        ...

    def clear(self) -> None:
        """Remove the saved game."""
        ...


class JsonGameStateStore:
    """File-based game state storage; keeps the previous save as ``.bak``.

    Saves go to a temporary file that replaces the live one, and a live file
    that cannot be read falls back to the backup.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".bak")

    def load(self) -> GameState | None:
        if not self.path.exists():
            return None
        try:
            return self._read(self.path)
        except PersistenceError as exc:
            if not self.backup_path.exists():
                raise
            logger.warning("Loading backup game state, %s", exc)
            try:
                return self._read(self.backup_path)
            except PersistenceError:
                raise exc from None

    def save(self, state: GameState) -> None:
        partial = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            document = SavedGame(state=GameStateRecord.from_state(state)).model_dump_json(indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            partial.write_text(document, encoding="utf-8")
            if self.path.exists():
                self.backup_path.write_bytes(self.path.read_bytes())
            partial.replace(self.path)
        except (OSError, ValidationError) as exc:
            raise PersistenceError(f"Could not save game state to {self.path}: {exc}") from exc

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Could not clear game state at {self.path}: {exc}") from exc

    @staticmethod
    def _read(path: Path) -> GameState:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise PersistenceError(f"{path} does not contain a saved game.")
            saved = SavedGame.model_validate(migrate_payload(payload))
        except (OSError, json.JSONDecodeError, ValidationError, KeyError, TypeError) as exc:
            raise PersistenceError(f"Could not load game state from {path}: {exc}") from exc
        return saved.state.to_state()
