"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from trivia_night.core.actions import SetQuestion, SetSelectedCategory, StartGame
from trivia_night.core.models import Category
from trivia_night.server.api_server import create_api_app

from conftest import make_group, make_question


@pytest.fixture
def client(controller):
    return TestClient(create_api_app(controller))


@pytest.fixture
def started_client(client, session, alpha, beta):
    session.dispatch(StartGame((alpha, beta)))
    return client


class TestGameRoutes:
    def test_state_before_start(self, client):
        response = client.get("/state")
        assert response.status_code == 200
        body = response.json()
        assert body["phase"] == "not_started"
        assert body["current_group"] is None
        assert body["question"] is None

    def test_start_game(self, client):
        response = client.post(
            "/game/start",
            json={"groups": [{"name": "Owls", "players": ["Ada"]}, {"name": "Foxes", "players": ["Bo"]}]},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["phase"] == "awaiting_category"
        assert body["current_group"]["name"] == "Owls"
        assert [row["group_name"] for row in body["standings"]] == ["Owls", "Foxes"]

    def test_start_rejects_blank_names(self, client):
        response = client.post("/game/start", json={"groups": [{"name": " ", "players": ["Ada"]}]})
        assert response.status_code == 422

    def test_start_rejects_too_many_groups(self, client):
        groups = [{"name": f"G{n}", "players": ["p"]} for n in range(4)]
        assert client.post("/game/start", json={"groups": groups}).status_code == 422

    def test_spin_before_start_conflicts(self, client):
        assert client.post("/wheel/spin").status_code == 409

    def test_spin_puts_question_in_play(self, started_client):
        response = started_client.post("/wheel/spin")
        assert response.status_code == 200
        body = response.json()
        assert body["highlight_sequence"][-1] == body["category"]
        assert body["game"]["phase"] == "awaiting_answer"
        assert body["game"]["question"]["category"] == body["category"]

    def test_answer_key_is_hidden_until_revealed(self, started_client):
        body = started_client.post("/category", json={"category": "art"}).json()
        assert "current_question" not in body["state"]
        assert "correct_answer_key" not in body["question"]
        assert body["question"]["options_html"] is None

        revealed = started_client.get("/question/answer").json()
        assert revealed["correct_answer_key"] == "b"
        assert revealed["correct_answer"] == "Right"

    def test_options_shown_when_enabled(self, started_client):
        settings = started_client.get("/settings").json()
        settings["show_options"] = True
        assert started_client.put("/settings", json=settings).status_code == 200

        body = started_client.post("/category", json={"category": "art"}).json()

        assert body["question"]["options_html"]["b"] == "Right"

    def test_answer_option(self, started_client):
        started_client.post("/category", json={"category": "science"})
        response = started_client.post("/answer", json={"option_key": "b"})
        assert response.status_code == 200
        body = response.json()
        assert body["correct"] is True
        assert body["badge_earned"] is True
        assert body["game"]["standings"][0]["badges"] == ["science"]

    def test_answer_needs_a_verdict(self, started_client):
        started_client.post("/category", json={"category": "science"})
        assert started_client.post("/answer", json={}).status_code == 422

    def test_answer_without_question_conflicts(self, started_client):
        assert started_client.post("/answer", json={"correct": True}).status_code == 409

    def test_unknown_option_is_unprocessable(self, started_client):
        started_client.post("/category", json={"category": "science"})
        assert started_client.post("/answer", json={"option_key": "q"}).status_code == 422

    def test_spoken_answer_verdict(self, started_client, session):
        session.dispatch(SetQuestion(make_question("c1", Category.SPORTS, options=False), 30))
        body = started_client.post("/answer", json={"correct": False}).json()
        assert body["correct"] is False
        assert body["game"]["current_group"]["name"] == "Beta"

    def test_resume_pending_category(self, started_client, session):
        nothing = started_client.post("/category/resume").json()
        assert nothing["resumed"] is False
        assert nothing["game"]["phase"] == "awaiting_category"

        session.dispatch(SetSelectedCategory(Category.GEOGRAPHY))
        body = started_client.post("/category/resume").json()

        assert body["resumed"] is True
        assert body["game"]["question"]["category"] == "geography"

    def test_resume_before_start_is_a_no_op(self, client):
        assert client.post("/category/resume").json()["resumed"] is False

    def test_joker_twice_conflicts(self, started_client):
        started_client.post("/category", json={"category": "history"})
        assert started_client.post("/joker").status_code == 200
        assert started_client.post("/joker").status_code == 409

    def test_exhausted_category_conflicts(self, client, session, beta):
        alpha = make_group("g1", "Alpha")
        session.dispatch(StartGame((alpha, beta)))
        for _ in range(3):
            client.post("/category", json={"category": "art"})
            client.post("/answer", json={"option_key": "b"})
        response = client.post("/category", json={"category": "art"})
        assert response.status_code == 409

    def test_missing_pool_is_unavailable(self, started_client):
        started_client.post("/language", json={"language": "tr"})
        assert started_client.post("/category", json={"category": "art"}).status_code == 503

    def test_pass_turn_and_report(self, started_client):
        started_client.post("/category", json={"category": "art"})
        report = started_client.post("/question/report", json={"description": "typo"})
        assert report.status_code == 201
        assert report.json()["game"]["phase"] == "awaiting_category"

        body = started_client.post("/turn/pass").json()
        assert body["current_group"]["name"] == "Beta"

    def test_end_game(self, started_client):
        body = started_client.post("/game/end").json()
        assert body["phase"] == "not_started"


class TestSettingsRoutes:
    def test_invalid_answer_time_is_rejected(self, client):
        settings = client.get("/settings").json()
        settings["answer_time_seconds"] = 20
        assert client.put("/settings", json=settings).status_code == 422

    def test_language_change(self, client):
        body = client.post("/language", json={"language": "tr"}).json()
        assert body["state"]["language"] == "tr"
        assert client.get("/settings").json()["language"] == "tr"
