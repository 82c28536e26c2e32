"""FastAPI server that exposes the game to the host screen."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict
from typing import Iterator

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field
import uvicorn

from trivia_night.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from trivia_night.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from trivia_night.core.errors import (
    InvalidAction,
    PoolUnavailable,
    QuestionsExhausted,
)
from trivia_night.core.game_controller import AnswerOutcome, GameController
from trivia_night.core.markdown_renderer import renderer
from trivia_night.core.models import Category, Language, Question
from trivia_night.core.persistence import dump_state
from trivia_night.core.services.group_setup import GroupEntry
from trivia_night.core.settings import GameSettings


class GroupPayload(BaseModel):
    """One group from the setup screen."""

    name: str
    players: list[str] = Field(min_length=1)


class StartGamePayload(BaseModel):
    groups: list[GroupPayload]
    language: Language | None = None


class CategoryPayload(BaseModel):
    category: Category


class AnswerPayload(BaseModel):
    """Either the chosen option key or the host's verdict on a spoken answer."""

    option_key: str | None = None
    correct: bool | None = None


class ReportPayload(BaseModel):
    description: str | None = None


class LanguagePayload(BaseModel):
    language: Language


@contextmanager
def _game_errors() -> Iterator[None]:
    try:
        yield
    except QuestionsExhausted as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InvalidAction as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except PoolUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _question_payload(question: Question, show_options: bool) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": question.id,
        "category": question.category.value,
        "language": question.language.value,
        "has_options": question.has_options,
    }
    payload.update(renderer.render_question(question, include_options=show_options))
    return payload


def _state_payload(controller: GameController) -> dict[str, object]:
    state = controller.get_state()
    settings = controller.get_settings()
    snapshot = dump_state(state)
    # The correct answer stays server-side until it is revealed.
    snapshot.pop("current_question")
    current = state.current_group
    return {
        "phase": state.phase.value,
        "state": snapshot,
        "current_group": {"id": current.id, "name": current.name} if current else None,
        "question": (
            _question_payload(state.current_question, settings.show_options)
            if state.current_question is not None
            else None
        ),
        "standings": [asdict(row) for row in controller.get_standings()],
    }


def _outcome_payload(outcome: AnswerOutcome, controller: GameController) -> dict[str, object]:
    return {
        "correct": outcome.correct,
        "group_name": outcome.group_name,
        "category": outcome.category.value,
        "correct_answer": outcome.correct_answer,
        "badge_earned": outcome.badge_earned,
        "winner": outcome.winner.name if outcome.winner else None,
        "game": _state_payload(controller),
    }


def _get_controller_dependency(controller: GameController):
    def dependency() -> GameController:
        return controller

    return dependency


def create_api_app(controller: GameController) -> FastAPI:
    """Create a FastAPI application wired to the provided game controller."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION, description=APP_ABOUT_TEXT)
    controller_dep = _get_controller_dependency(controller)

    @app.get("/state")
    def get_state(game: GameController = Depends(controller_dep)) -> dict[str, object]:
        return _state_payload(game)

    @app.post("/game/start", status_code=201)
    def start_game(
        payload: StartGamePayload,
        game: GameController = Depends(controller_dep),
    ) -> dict[str, object]:
        entries = [GroupEntry(name=group.name, player_names=list(group.players)) for group in payload.groups]
        with _game_errors():
            game.start_game(entries, language=payload.language)
        return _state_payload(game)

    @app.post("/game/end")
    def end_game(game: GameController = Depends(controller_dep)) -> dict[str, object]:
        game.end_game()
        return _state_payload(game)

    @app.post("/wheel/spin")
    def spin_wheel(game: GameController = Depends(controller_dep)) -> dict[str, object]:
        with _game_errors():
            spin, _ = game.spin_wheel()
        return {
            "category": spin.category.value,
            "index": spin.index,
            "highlight_sequence": [category.value for category in spin.highlight_sequence],
            "game": _state_payload(game),
        }

    @app.post("/category")
    def choose_category(
        payload: CategoryPayload,
        game: GameController = Depends(controller_dep),
    ) -> dict[str, object]:
        with _game_errors():
            game.choose_category(payload.category)
        return _state_payload(game)

    @app.post("/category/resume")
    def resume_category(game: GameController = Depends(controller_dep)) -> dict[str, object]:
        """Ask again from the category picked before a restart, if one is pending."""
        with _game_errors():
            question = game.resume_pending_category()
        return {"resumed": question is not None, "game": _state_payload(game)}

    @app.post("/joker")
    def use_joker(game: GameController = Depends(controller_dep)) -> dict[str, object]:
        with _game_errors():
            game.use_joker()
        return _state_payload(game)

    @app.get("/question/answer")
    def reveal_answer(game: GameController = Depends(controller_dep)) -> dict[str, object]:
        with _game_errors():
            question = game.reveal_answer()
        return {
            "question_id": question.id,
            "correct_answer_key": question.correct_answer_key,
            "correct_answer": question.correct_answer_text(),
        }

    @app.post("/answer")
    def submit_answer(
        payload: AnswerPayload,
        game: GameController = Depends(controller_dep),
    ) -> dict[str, object]:
        if payload.option_key is None and payload.correct is None:
            raise HTTPException(status_code=422, detail="Provide option_key or correct.")
        with _game_errors():
            if payload.option_key is not None:
                outcome = game.submit_option(payload.option_key)
            else:
                outcome = game.judge_answer(payload.correct)
        return _outcome_payload(outcome, game)

    @app.post("/turn/pass")
    def pass_turn(game: GameController = Depends(controller_dep)) -> dict[str, object]:
        with _game_errors():
            game.pass_turn()
        return _state_payload(game)

    @app.post("/question/report", status_code=201)
    def report_question(
        payload: ReportPayload,
        game: GameController = Depends(controller_dep),
    ) -> dict[str, object]:
        with _game_errors():
            report = game.report_question(payload.description)
        return {
            "question_id": report.question_id,
            "reported_at": report.reported_at.isoformat(),
            "game": _state_payload(game),
        }

    @app.post("/language")
    def set_language(
        payload: LanguagePayload,
        game: GameController = Depends(controller_dep),
    ) -> dict[str, object]:
        game.set_language(payload.language)
        return _state_payload(game)

    @app.get("/settings")
    def get_settings(game: GameController = Depends(controller_dep)) -> GameSettings:
        return game.get_settings()

    @app.put("/settings")
    def update_settings(
        payload: GameSettings,
        game: GameController = Depends(controller_dep),
    ) -> GameSettings:
        return game.update_settings(payload)

    return app


def run_api_server(
    controller: GameController,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API until the process is interrupted."""
    app = create_api_app(controller)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
