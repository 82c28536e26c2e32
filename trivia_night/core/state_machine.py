"""Pure reducer that turns game actions into the next game state.

``transition`` never raises. Actions that do not apply to the current state
(a joker for a group with none left, an answer after the game is over, an
action type it does not know) return the given state unchanged; callers are
expected to check and explain refusals before dispatching.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Callable

from trivia_night.core.actions import (
    AnswerQuestion,
    EndGame,
    GameAction,
    PassTurn,
    ResetQuestion,
    SetLanguage,
    SetQuestion,
    SetSelectedCategory,
    SetTimeRemaining,
    StartGame,
    UseJoker,
)
from trivia_night.core.models import GameState, Group, Language

logger = logging.getLogger(__name__)


def initial_state(language: Language = Language.TR, time_remaining: int = 30) -> GameState:
    """Return the state shown before any game has been started."""
    return GameState(language=language, time_remaining=time_remaining)


def transition(state: GameState, action: GameAction) -> GameState:
    """Apply ``action`` to ``state`` and return the resulting state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        logger.debug("Ignoring unrecognized action %r", action)
        return state
    return handler(state, action)


def _start_game(state: GameState, action: StartGame) -> GameState:
    if not action.groups:
        logger.debug("Ignoring StartGame without groups")
        return state
    return replace(
        state,
        groups=tuple(action.groups),
        current_group_index=0,
        current_question=None,
        selected_category=None,
        winner=None,
        is_game_started=True,
    )


def _set_selected_category(state: GameState, action: SetSelectedCategory) -> GameState:
    return replace(state, selected_category=action.category)


def _set_question(state: GameState, action: SetQuestion) -> GameState:
    return replace(
        state,
        current_question=action.question,
        time_remaining=action.answer_time_seconds,
    )


def _answer_question(state: GameState, action: AnswerQuestion) -> GameState:
    acting_group = state.current_group
    if not state.is_game_started or acting_group is None or state.winner is not None:
        logger.debug("Ignoring answer in phase %s", state.phase.value)
        return state

    answered_ids = acting_group.answered_question_ids
    if state.current_question is not None:
        answered_ids = answered_ids | {state.current_question.id}

    if action.correct:
        updated_group = replace(
            acting_group,
            correct_answers=acting_group.correct_answers + 1,
            badges=acting_group.badges | {action.category},
            answered_question_ids=answered_ids,
        )
        next_index = state.current_group_index
    else:
        updated_group = replace(
            acting_group,
            wrong_answers=acting_group.wrong_answers + 1,
            answered_question_ids=answered_ids,
        )
        next_index = (state.current_group_index + 1) % len(state.groups)

    groups = list(state.groups)
    groups[state.current_group_index] = updated_group

    return replace(
        state,
        groups=tuple(groups),
        current_group_index=next_index,
        current_question=None,
        winner=updated_group if updated_group.is_winning else None,
    )


def _use_joker(state: GameState, action: UseJoker) -> GameState:
    group = state.find_group(action.group_id)
    if group is None or group.jokers <= 0:
        logger.debug("Ignoring joker for group %s", action.group_id)
        return state
    return _replace_group(state, replace(group, jokers=group.jokers - 1))


def _set_time_remaining(state: GameState, action: SetTimeRemaining) -> GameState:
    return replace(state, time_remaining=action.seconds)


def _reset_question(state: GameState, action: ResetQuestion) -> GameState:
    return replace(state, current_question=None)


def _pass_turn(state: GameState, action: PassTurn) -> GameState:
    if not state.groups:
        return state
    return replace(
        state,
        current_group_index=(state.current_group_index + 1) % len(state.groups),
        current_question=None,
    )


def _end_game(state: GameState, action: EndGame) -> GameState:
    return replace(
        state,
        is_game_started=False,
        current_question=None,
        selected_category=None,
    )


def _set_language(state: GameState, action: SetLanguage) -> GameState:
    return replace(state, language=action.language)


def _replace_group(state: GameState, updated: Group) -> GameState:
    groups = tuple(updated if group.id == updated.id else group for group in state.groups)
    return replace(state, groups=groups)


_HANDLERS: dict[type, Callable[[GameState, object], GameState]] = {
    StartGame: _start_game,
    SetSelectedCategory: _set_selected_category,
    SetQuestion: _set_question,
    AnswerQuestion: _answer_question,
    UseJoker: _use_joker,
    SetTimeRemaining: _set_time_remaining,
    ResetQuestion: _reset_question,
    PassTurn: _pass_turn,
    EndGame: _end_game,
    SetLanguage: _set_language,
}
