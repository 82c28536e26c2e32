"""Game flow shared between the API and any other front end.

The controller checks that a request makes sense before turning it into
state machine actions, so refusals ("no jokers left", "no more questions")
reach the player as errors while the reducer itself stays total.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import random
from threading import Lock

from trivia_night.constants.game_constants import STARTING_JOKERS
from trivia_night.core.actions import (
    AnswerQuestion,
    EndGame,
    PassTurn,
    ResetQuestion,
    SetLanguage,
    SetQuestion,
    SetSelectedCategory,
    SetTimeRemaining,
    StartGame,
    UseJoker,
)
from trivia_night.core.category_wheel import CategoryWheel, WheelSpin
from trivia_night.core.countdown import AnswerCountdown, CountdownHandle
from trivia_night.core.errors import (
    GameAlreadyWon,
    GameNotStarted,
    InvalidAction,
    NoActiveQuestion,
    NoJokersLeft,
    PersistenceError,
    QuestionsExhausted,
)
from trivia_night.core.models import Category, GamePhase, GameState, Group, Language, Question
from trivia_night.core.question_selector import exclusions_for, select_question
from trivia_night.core.services.game_session import GameSession
from trivia_night.core.services.group_setup import GroupEntry, GroupSetup
from trivia_night.core.services.question_pool import QuestionPool
from trivia_night.core.services.question_reports import QuestionReport, QuestionReportLog
from trivia_night.core.services.standings import StandingRow, rank_groups
from trivia_night.core.settings import GameSettings, SettingsStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnswerOutcome:
    """Result of resolving the question in play."""

    correct: bool
    group_name: str
    category: Category
    correct_answer: str
    badge_earned: bool
    winner: Group | None
    state: GameState


class GameController:
    """Facade over session, question pool, wheel, countdown and settings."""

    def __init__(
        self,
        session: GameSession,
        question_pool: QuestionPool,
        settings_store: SettingsStore,
        report_log: QuestionReportLog,
        wheel: CategoryWheel | None = None,
        countdown: AnswerCountdown | None = None,
        rng: random.Random | None = None,
        starting_jokers: int = STARTING_JOKERS,
    ) -> None:
        self._lock = Lock()

        # Services
        self._session = session
        self._pool = question_pool
        self._settings_store = settings_store
        self._settings = settings_store.load()
        self._reports = report_log
        # Reported questions stay out of play until the report is reviewed.
        self._reported: set[tuple[Language, str | int]] = {
            (report.language, report.question_id)
            for report in report_log.list_reports()
            if report.status == "pending"
        }
        self._rng = rng or random.Random()
        self._wheel = wheel or CategoryWheel(rng=self._rng)
        self._countdown = countdown or AnswerCountdown()
        self._starting_jokers = starting_jokers

    # --- State ---

    def get_state(self) -> GameState:
        return self._session.state

    def get_standings(self) -> list[StandingRow]:
        return rank_groups(self._session.state)

    def restore(self) -> GameState:
        """Load the saved game and resume its countdown if a question was in play."""
        with self._lock:
            state = self._session.restore(default_language=self._settings.language)
            if state.current_question is not None and state.time_remaining > 0:
                self._start_countdown(state.current_question, state.time_remaining)
            return state

    # --- Settings ---

    def get_settings(self) -> GameSettings:
        with self._lock:
            return self._settings

    def update_settings(self, settings: GameSettings) -> GameSettings:
        with self._lock:
            self._settings = settings
            self._save_settings()
            return self._settings

    def set_language(self, language: Language) -> GameState:
        with self._lock:
            self._settings = self._settings.model_copy(update={"language": language})
            self._save_settings()
            return self._session.dispatch(SetLanguage(language))

    # --- Game lifecycle ---

    def start_game(self, entries: list[GroupEntry], language: Language | None = None) -> GameState:
        groups = GroupSetup.from_entries(entries, self._starting_jokers).build_groups()
        with self._lock:
            self._countdown.cancel()
            if language is not None and language != self._session.state.language:
                self._session.dispatch(SetLanguage(language))
            state = self._session.dispatch(StartGame(groups))
            logger.info("Game started with groups: %s", ", ".join(group.name for group in groups))
            return state

    def end_game(self) -> GameState:
        with self._lock:
            self._countdown.cancel()
            return self._session.dispatch(EndGame())

    # --- Turn flow ---

    def spin_wheel(self) -> tuple[WheelSpin, Question]:
        """Spin for a category and put a question from it in play."""
        with self._lock:
            self._require_phase(GamePhase.AWAITING_CATEGORY)
            spin = self._wheel.spin()
            logger.info("Wheel landed on %s", spin.category.value)
            return spin, self._ask(spin.category)

    def choose_category(self, category: Category) -> Question:
        with self._lock:
            self._require_phase(GamePhase.AWAITING_CATEGORY)
            return self._ask(category)

    def resume_pending_category(self) -> Question | None:
        """Ask from the category picked before a restart, if any."""
        with self._lock:
            state = self._session.state
            if state.phase is not GamePhase.AWAITING_CATEGORY or state.selected_category is None:
                return None
            return self._ask(state.selected_category)

    def use_joker(self) -> Question:
        """Spend the current group's joker and swap the question.

        The joker stays spent when no replacement exists; the question on
        screen is kept and QuestionsExhausted is raised.
        """
        with self._lock:
            state = self._require_phase(GamePhase.AWAITING_ANSWER)
            group = state.current_group
            question = state.current_question
            if group.jokers <= 0:
                raise NoJokersLeft(group.name)

            state = self._session.dispatch(UseJoker(group.id))
            logger.info("%s used a joker (%d left)", group.name, state.current_group.jokers)

            pool = self._pool.load_questions(state.language, question.category)
            replacement = select_question(pool, self._exclusions(state.language, group, question), self._rng)
            if replacement is None:
                logger.info("No replacement question in %s for %s", question.category.value, group.name)
                raise QuestionsExhausted(question.category.value, group.name)
            self._put_in_play(replacement)
            return replacement

    def reveal_answer(self) -> Question:
        """Stop the clock and return the question so its answer can be shown."""
        with self._lock:
            state = self._require_phase(GamePhase.AWAITING_ANSWER)
            self._countdown.cancel()
            return state.current_question

    def submit_option(self, option_key: str) -> AnswerOutcome:
        with self._lock:
            state = self._require_phase(GamePhase.AWAITING_ANSWER)
            question = state.current_question
            if not question.has_options:
                raise InvalidAction("This question has no options; judge the spoken answer instead.")
            key = option_key.strip().lower()
            if key not in question.options:
                raise ValueError(f"Unknown option '{option_key}'.")
            return self._resolve(state, question.is_correct_option(key))

    def judge_answer(self, correct: bool) -> AnswerOutcome:
        """Record the host's verdict on a spoken answer."""
        with self._lock:
            state = self._require_phase(GamePhase.AWAITING_ANSWER)
            return self._resolve(state, correct)

    def pass_turn(self) -> GameState:
        with self._lock:
            self._require_started()
            self._countdown.cancel()
            self._session.dispatch(PassTurn())
            return self._session.dispatch(SetSelectedCategory(None))

    def report_question(self, description: str | None = None) -> QuestionReport:
        """Record a report about the question in play and return to the wheel."""
        with self._lock:
            state = self._require_phase(GamePhase.AWAITING_ANSWER)
            report = QuestionReport.for_question(state.current_question, description)
            self._reported.add((state.language, report.question_id))
            try:
                self._reports.record(report)
            except PersistenceError as exc:
                logger.error("Question report lost: %s", exc)
            self._countdown.cancel()
            self._session.dispatch(ResetQuestion())
            self._session.dispatch(SetSelectedCategory(None))
            return report

    def close(self) -> None:
        with self._lock:
            self._countdown.cancel()
        self._session.close()

    # --- Internals (caller holds the lock) ---

    def _ask(self, category: Category) -> Question:
        state = self._session.dispatch(SetSelectedCategory(category))
        group = state.current_group
        pool = self._pool.load_questions(state.language, category)
        question = select_question(pool, self._exclusions(state.language, group, state.current_question), self._rng)
        if question is None:
            raise QuestionsExhausted(category.value, group.name)
        self._put_in_play(question)
        return question

    def _exclusions(self, language: Language, group: Group, current: Question | None) -> set[str | int]:
        reported = {question_id for reported_in, question_id in self._reported if reported_in is language}
        return exclusions_for(group, current) | reported

    def _put_in_play(self, question: Question) -> None:
        seconds = self._settings.answer_time_seconds
        self._session.dispatch(SetQuestion(question, seconds))
        self._start_countdown(question, seconds)

    def _resolve(self, state: GameState, correct: bool) -> AnswerOutcome:
        question = state.current_question
        group = state.current_group
        self._countdown.cancel()
        self._session.dispatch(AnswerQuestion(correct=correct, category=question.category))
        new_state = self._session.dispatch(SetSelectedCategory(None))
        badge_earned = correct and question.category not in group.badges
        if new_state.winner is not None:
            logger.info("%s collected every badge and wins", new_state.winner.name)
        return AnswerOutcome(
            correct=correct,
            group_name=group.name,
            category=question.category,
            correct_answer=question.correct_answer_text(),
            badge_earned=badge_earned,
            winner=new_state.winner,
            state=new_state,
        )

    def _start_countdown(self, question: Question, seconds: int) -> None:
        self._countdown.start(question.id, seconds, self._on_tick)

    def _on_tick(self, handle: CountdownHandle, remaining: int) -> None:
        with self._lock:
            if not self._countdown.is_current(handle):
                return
            question = self._session.state.current_question
            if question is None or question.id != handle.question_id:
                return
            self._session.dispatch(SetTimeRemaining(remaining))
            if remaining == 0:
                logger.info("Time is up for question %s", question.id)

    def _require_started(self) -> GameState:
        state = self._session.state
        if state.winner is not None:
            raise GameAlreadyWon(state.winner.name)
        if not state.is_game_started or state.current_group is None:
            raise GameNotStarted()
        return state

    def _require_phase(self, phase: GamePhase) -> GameState:
        state = self._require_started()
        if state.phase is phase:
            return state
        if phase is GamePhase.AWAITING_ANSWER:
            raise NoActiveQuestion()
        raise InvalidAction("Answer the question in play before choosing another category.")

    def _save_settings(self) -> None:
        try:
            self._settings_store.save(self._settings)
        except PersistenceError as exc:
            logger.error("Settings kept in memory only: %s", exc)
