"""User-adjustable game settings and their JSON file store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from trivia_night.constants.game_constants import ANSWER_TIME_CHOICES, DEFAULT_ANSWER_TIME_SECONDS
from trivia_night.core.errors import PersistenceError
from trivia_night.core.models import Language

logger = logging.getLogger(__name__)


class GameSettings(BaseModel):
    """Read-only inputs for the controller; the state machine never sees them."""

    answer_time_seconds: int = DEFAULT_ANSWER_TIME_SECONDS
    show_options: bool = False
    sound_enabled: bool = True
    language: Language = Language.TR

    @field_validator("answer_time_seconds")
    @classmethod
    def supported_answer_time(cls, value: int) -> int:
        if value not in ANSWER_TIME_CHOICES:
            choices = ", ".join(str(choice) for choice in ANSWER_TIME_CHOICES)
            raise ValueError(f"Answer time must be one of {choices} seconds.")
        return value


class SettingsStore:
    """Loads and saves :class:`GameSettings` as a small JSON document."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> GameSettings:
        """Return saved settings, or defaults if the file is missing or unreadable."""
        if not self.path.exists():
            return GameSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return GameSettings.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return GameSettings()

    def save(self, settings: GameSettings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not save settings to {self.path}: {exc}") from exc
