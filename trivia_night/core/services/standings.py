"""Service for ranking groups on the scoreboard."""

from __future__ import annotations

from dataclasses import dataclass

from trivia_night.core.models import ALL_CATEGORIES, Category, GameState


@dataclass(slots=True)
class StandingRow:
    """Immutable snapshot returned to consumers."""

    rank: int
    group_id: str
    group_name: str
    badges: list[Category]
    missing_badges: list[Category]
    correct_answers: int
    wrong_answers: int
    jokers: int
    is_current_turn: bool
    is_winner: bool


def rank_groups(state: GameState) -> list[StandingRow]:
    """Order groups by badges, then correct answers, then fewest wrong answers.

    Groups that tie on all three share a rank; setup order breaks the tie in
    the listing.
    """
    current = state.current_group
    winner_id = state.winner.id if state.winner is not None else None
    ordered = sorted(
        enumerate(state.groups),
        key=lambda item: (-len(item[1].badges), -item[1].correct_answers, item[1].wrong_answers, item[0]),
    )

    rows: list[StandingRow] = []
    previous_key: tuple[int, int, int] | None = None
    for position, (_, group) in enumerate(ordered, start=1):
        key = (len(group.badges), group.correct_answers, group.wrong_answers)
        rank = rows[-1].rank if key == previous_key else position
        previous_key = key
        rows.append(
            StandingRow(
                rank=rank,
                group_id=group.id,
                group_name=group.name,
                badges=[category for category in ALL_CATEGORIES if category in group.badges],
                missing_badges=group.missing_badges(),
                correct_answers=group.correct_answers,
                wrong_answers=group.wrong_answers,
                jokers=group.jokers,
                is_current_turn=current is not None and group.id == current.id and state.is_game_started,
                is_winner=group.id == winner_id,
            )
        )
    return rows
