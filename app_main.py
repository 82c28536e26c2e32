"""Application entry point for the Trivia Night host server."""

from __future__ import annotations

from trivia_night.constants.game_constants import (
    COUNTDOWN_TICK_SECONDS,
    GAME_STATE_FILE,
    QUESTIONS_DIR,
    REPORTS_FILE,
    SETTINGS_FILE,
)
from trivia_night.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from trivia_night.core.countdown import AnswerCountdown
from trivia_night.core.game_controller import GameController
from trivia_night.core.persistence import JsonGameStateStore
from trivia_night.core.services.game_session import GameSession
from trivia_night.core.services.question_pool import QuestionPool
from trivia_night.core.services.question_reports import QuestionReportLog
from trivia_night.core.settings import SettingsStore
from trivia_night.server.api_server import run_api_server
from trivia_night.utils.logging_config import configure_logging


def build_controller() -> GameController:
    """Wire the controller to the default data and save locations."""
    return GameController(
        session=GameSession(JsonGameStateStore(GAME_STATE_FILE)),
        question_pool=QuestionPool(QUESTIONS_DIR),
        settings_store=SettingsStore(SETTINGS_FILE),
        report_log=QuestionReportLog(REPORTS_FILE),
        countdown=AnswerCountdown(interval=COUNTDOWN_TICK_SECONDS),
    )


def main() -> None:
    """Initialize logging, restore the saved game, and serve the host API."""
    logger = configure_logging()
    logger.info("Starting Trivia Night…")

    controller = build_controller()
    state = controller.restore()
    logger.info("Game phase after restore: %s", state.phase.value)
    try:
        run_api_server(controller, host=DEFAULT_HOST, port=DEFAULT_PORT)
    finally:
        controller.close()


if __name__ == "__main__":
    main()
