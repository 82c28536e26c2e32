"""Tests for game state storage and settings."""

import json

import pytest
from pydantic import ValidationError

from trivia_night.constants.game_constants import ANSWER_TIME_CHOICES
from trivia_night.core.actions import AnswerQuestion, SetQuestion, SetSelectedCategory, UseJoker
from trivia_night.core.errors import PersistenceError
from trivia_night.core.models import Category, GameState, Language
from trivia_night.core.persistence import (
    SCHEMA_VERSION,
    GameStateStore,
    JsonGameStateStore,
    MemoryGameStateStore,
    dump_state,
)
from trivia_night.core.settings import GameSettings, SettingsStore
from trivia_night.core.state_machine import transition

from conftest import make_group, make_question


@pytest.fixture
def played_state(started_state) -> GameState:
    """A game with scores, a spent joker, and an integer-id question in play."""
    state = transition(started_state, SetQuestion(make_question("h-1"), 30))
    state = transition(state, AnswerQuestion(True, Category.HISTORY))
    state = transition(state, SetQuestion(make_question(17, Category.ART), 30))
    state = transition(state, AnswerQuestion(False, Category.ART))
    state = transition(state, UseJoker("g2"))
    state = transition(state, SetSelectedCategory(Category.SCIENCE))
    return transition(state, SetQuestion(make_question(42, Category.SCIENCE, options=False), 45))


class TestJsonGameStateStore:
    def test_round_trip_is_lossless(self, tmp_path, played_state):
        store = JsonGameStateStore(tmp_path / "state.json")
        store.save(played_state)

        loaded = store.load()

        assert loaded == played_state
        assert loaded.groups[0].answered_question_ids == {"h-1", 17}
        assert loaded.current_question.id == 42
        assert loaded.selected_category is Category.SCIENCE

    def test_group_order_is_preserved(self, tmp_path, played_state):
        store = JsonGameStateStore(tmp_path / "state.json")
        store.save(played_state)
        assert [group.id for group in store.load().groups] == ["g1", "g2"]

    def test_missing_file_loads_nothing(self, tmp_path):
        assert JsonGameStateStore(tmp_path / "absent.json").load() is None

    def test_save_keeps_backup(self, tmp_path, started_state, played_state):
        path = tmp_path / "state.json"
        store = JsonGameStateStore(path)
        store.save(started_state)
        store.save(played_state)

        backup = json.loads(path.with_suffix(".json.bak").read_text(encoding="utf-8"))
        assert backup["state"]["current_question"] is None

    def test_saved_document_is_versioned(self, tmp_path, started_state):
        path = tmp_path / "state.json"
        JsonGameStateStore(path).save(started_state)
        assert json.loads(path.read_text(encoding="utf-8"))["schema_version"] == SCHEMA_VERSION

    def test_clear_removes_file(self, tmp_path, started_state):
        path = tmp_path / "state.json"
        store = JsonGameStateStore(path)
        store.save(started_state)
        store.clear()
        store.clear()
        assert not path.exists()

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonGameStateStore(path).load()

    def test_future_schema_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"schema_version": 99, "state": {}}), encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonGameStateStore(path).load()

    def test_invalid_values_raise(self, tmp_path, started_state):
        path = tmp_path / "state.json"
        JsonGameStateStore(path).save(started_state)
        document = json.loads(path.read_text(encoding="utf-8"))
        document["state"]["groups"][0]["jokers"] = -1
        path.write_text(json.dumps(document), encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonGameStateStore(path).load()

    def test_state_outside_schema_raises_persistence_error(self, tmp_path):
        groups = tuple(make_group(f"g{n}", f"Group {n}") for n in range(4))
        store = JsonGameStateStore(tmp_path / "state.json")
        with pytest.raises(PersistenceError):
            store.save(GameState(groups=groups, is_game_started=True))
        assert not (tmp_path / "state.json").exists()

    def test_corrupt_file_falls_back_to_backup(self, tmp_path, started_state, played_state):
        path = tmp_path / "state.json"
        store = JsonGameStateStore(path)
        store.save(started_state)
        store.save(played_state)
        path.write_text('{"schema_version": 2, "sta', encoding="utf-8")

        assert store.load() == started_state

    def test_unreadable_backup_reports_live_file_error(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonGameStateStore(path)
        store.backup_path.write_text("also broken", encoding="utf-8")
        with pytest.raises(PersistenceError, match=r"state\.json:"):
            store.load()

    def test_save_leaves_no_partial_file(self, tmp_path, started_state):
        store = JsonGameStateStore(tmp_path / "state.json")
        store.save(started_state)
        store.save(started_state)
        assert sorted(path.name for path in tmp_path.iterdir()) == ["state.json", "state.json.bak"]

    def test_stores_satisfy_protocol(self, tmp_path):
        assert isinstance(JsonGameStateStore(tmp_path / "s.json"), GameStateStore)
        assert isinstance(MemoryGameStateStore(), GameStateStore)


class TestLegacyMigration:
    """Unversioned camelCase saves from earlier releases."""

    LEGACY = {
        "isGameStarted": True,
        "currentQuestion": {
            "id": 5,
            "question": "Capital of Turkey?",
            "category": "geography",
            "language": "en",
            "options": {"a": "Istanbul", "b": "Ankara", "c": "Izmir", "d": "Bursa"},
            "answer": "b",
        },
        "currentGroupIndex": 1,
        "winner": None,
        "language": "en",
        "timeRemaining": 12,
        "selectedCategory": "geography",
        "groups": [
            {
                "id": "1",
                "name": "Alpha",
                "score": 2,
                "jokers": 1,
                "players": [{"id": "1", "name": "Ada", "score": 0, "badges": []}],
                "badges": ["history", "history", "art"],
                "correctAnswers": 3,
                "wrongAnswers": 1,
                "position": 0,
                "answeredQuestions": [
                    {"id": 1, "question": "q", "category": "history", "language": "en", "answer": "a"},
                    {"id": 1, "question": "q", "category": "history", "language": "en", "answer": "a"},
                    {"id": "x9", "question": "q", "category": "art", "language": "en", "answer": "c"},
                ],
            },
            {
                "id": "2",
                "name": "Beta",
                "score": 0,
                "jokers": 0,
                "players": [{"id": "2", "name": "Bo"}],
                "badges": [],
                "correctAnswers": 0,
                "wrongAnswers": 2,
                "position": 1,
            },
        ],
    }

    def test_legacy_payload_is_migrated(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps(self.LEGACY), encoding="utf-8")

        state = JsonGameStateStore(path).load()

        alpha, beta = state.groups
        assert alpha.badges == {Category.HISTORY, Category.ART}
        assert alpha.answered_question_ids == {1, "x9"}
        assert alpha.correct_answers == 3
        assert beta.answered_question_ids == frozenset()
        assert state.current_group_index == 1
        assert state.current_question.text == "Capital of Turkey?"
        assert state.current_question.correct_answer_key == "b"
        assert state.time_remaining == 12
        assert state.language is Language.EN


class TestMemoryStore:
    def test_save_load_clear(self, started_state):
        store = MemoryGameStateStore()
        store.save(started_state)
        assert store.load() is started_state
        store.clear()
        assert store.load() is None


class TestDumpState:
    def test_enums_become_values(self, played_state):
        payload = dump_state(played_state)
        assert payload["groups"][0]["badges"] == ["history"]
        assert payload["selected_category"] == "science"
        assert payload["language"] == "en"


class TestSettingsStore:
    def test_defaults_when_missing(self, tmp_path):
        settings = SettingsStore(tmp_path / "settings.json").load()
        assert settings == GameSettings()
        assert settings.answer_time_seconds == 30
        assert settings.show_options is False
        assert settings.sound_enabled is True

    def test_round_trip(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        store.save(GameSettings(answer_time_seconds=60, show_options=True, sound_enabled=False))
        assert store.load().answer_time_seconds == 60
        assert store.load().show_options is True

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("][", encoding="utf-8")
        assert SettingsStore(path).load() == GameSettings()

    @pytest.mark.parametrize("seconds", ANSWER_TIME_CHOICES)
    def test_every_answer_time_choice_is_accepted(self, seconds):
        assert GameSettings(answer_time_seconds=seconds).answer_time_seconds == seconds

    def test_other_answer_times_are_rejected(self):
        with pytest.raises(ValidationError):
            GameSettings(answer_time_seconds=20)

    def test_unsupported_answer_time_falls_back(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"answer_time_seconds": 17}), encoding="utf-8")
        assert SettingsStore(path).load().answer_time_seconds == 30
