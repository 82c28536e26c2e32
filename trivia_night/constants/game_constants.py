"""Game rules and defaults shared across core and server layers."""

from pathlib import Path

MAX_GROUPS: int = 3
STARTING_JOKERS: int = 2
ANSWER_TIME_CHOICES: tuple[int, ...] = (30, 45, 60)
DEFAULT_ANSWER_TIME_SECONDS: int = 30
COUNTDOWN_TICK_SECONDS: float = 1.0

QUESTIONS_DIR: Path = Path(__file__).resolve().parent.parent / "data" / "questions"
USER_DATA_DIR: Path = Path.home() / ".trivia_night"
GAME_STATE_FILE: Path = USER_DATA_DIR / "game_state.json"
SETTINGS_FILE: Path = USER_DATA_DIR / "settings.json"
REPORTS_FILE: Path = USER_DATA_DIR / "question_reports.jsonl"
