"""
Pytest fixtures for Trivia Night tests.

Provides in-memory stores, a temporary question pool and a controller whose
countdown only ticks when a test tells it to.
"""

import json
import random

import pytest

from trivia_night.core.actions import StartGame
from trivia_night.core.countdown import AnswerCountdown
from trivia_night.core.game_controller import GameController
from trivia_night.core.models import (
    ALL_CATEGORIES,
    Category,
    GameState,
    Group,
    Language,
    Player,
    Question,
)
from trivia_night.core.persistence import MemoryGameStateStore
from trivia_night.core.services.game_session import GameSession
from trivia_night.core.services.question_pool import QuestionPool
from trivia_night.core.services.question_reports import QuestionReportLog
from trivia_night.core.settings import SettingsStore
from trivia_night.core.state_machine import initial_state, transition

QUESTIONS_PER_CATEGORY = 3


def make_question(question_id="q1", category=Category.HISTORY, options=True, language=Language.EN):
    """Build a question; multiple choice with answer 'b' unless options=False."""
    if options:
        return Question(
            id=question_id,
            text=f"Question {question_id}?",
            category=category,
            language=language,
            correct_answer_key="b",
            options={"a": "Wrong", "b": "Right", "c": "Wrong too", "d": "Also wrong"},
        )
    return Question(
        id=question_id,
        text=f"Question {question_id}?",
        category=category,
        language=language,
        correct_answer_key="Spoken answer",
    )


def make_group(group_id, name, jokers=1, badges=()):
    return Group(
        id=group_id,
        name=name,
        players=(Player(id=f"{group_id}-p1", name=f"{name} player"),),
        jokers=jokers,
        badges=frozenset(badges),
    )


@pytest.fixture
def alpha():
    return make_group("g1", "Alpha")


@pytest.fixture
def beta():
    return make_group("g2", "Beta")


@pytest.fixture
def started_state(alpha, beta) -> GameState:
    """Two-group game that has just started."""
    return transition(initial_state(language=Language.EN), StartGame((alpha, beta)))


@pytest.fixture
def memory_store():
    """In-memory game state store for testing."""
    return MemoryGameStateStore()


@pytest.fixture
def session(memory_store):
    session = GameSession(memory_store, state=initial_state(language=Language.EN))
    yield session
    session.close()


@pytest.fixture
def pool_dir(tmp_path):
    """Question files for every English category, ids '<category>-<n>'."""
    root = tmp_path / "questions"
    language_dir = root / "en"
    language_dir.mkdir(parents=True)
    for category in ALL_CATEGORIES:
        records = [
            {
                "id": f"{category.value}-{n}",
                "question": f"{category.value} question {n}?",
                "options": {"a": "Wrong", "b": "Right", "c": "Nope", "d": "No"},
                "answer": "b",
            }
            for n in range(1, QUESTIONS_PER_CATEGORY + 1)
        ]
        (language_dir / f"{category.value}.json").write_text(json.dumps(records), encoding="utf-8")
    return root


@pytest.fixture
def question_pool(pool_dir):
    return QuestionPool(pool_dir)


@pytest.fixture
def settings_store(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    store.save(store.load().model_copy(update={"language": Language.EN}))
    return store


@pytest.fixture
def report_log(tmp_path):
    return QuestionReportLog(tmp_path / "reports.jsonl")


@pytest.fixture
def countdown():
    """Countdown that never starts a thread; tests call handle.tick()."""
    return AnswerCountdown(autostart=False)


@pytest.fixture
def controller(session, question_pool, settings_store, report_log, countdown):
    return GameController(
        session=session,
        question_pool=question_pool,
        settings_store=settings_store,
        report_log=report_log,
        countdown=countdown,
        rng=random.Random(7),
    )
