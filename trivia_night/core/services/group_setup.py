"""Service for collecting groups before a game starts."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

from trivia_night.constants.game_constants import MAX_GROUPS, STARTING_JOKERS
from trivia_night.core.errors import SetupError
from trivia_night.core.models import Group, Player


@dataclass(slots=True)
class GroupEntry:
    """Setup-screen draft of one group."""

    name: str = ""
    player_names: list[str] = field(default_factory=lambda: [""])


class GroupSetup:
    """Holds the group drafts and turns them into fresh groups."""

    def __init__(self, starting_jokers: int = STARTING_JOKERS) -> None:
        if starting_jokers < 0:
            raise ValueError("Starting jokers cannot be negative.")
        self._starting_jokers = starting_jokers
        self._entries: list[GroupEntry] = []

    @classmethod
    def from_entries(
        cls,
        entries: list[GroupEntry],
        starting_jokers: int = STARTING_JOKERS,
    ) -> "GroupSetup":
        setup = cls(starting_jokers=starting_jokers)
        for entry in entries:
            setup.add_group(entry.name, entry.player_names)
        return setup

    def add_group(self, name: str = "", player_names: list[str] | None = None) -> GroupEntry:
        if len(self._entries) >= MAX_GROUPS:
            raise SetupError(f"A game can have at most {MAX_GROUPS} groups.")
        entry = GroupEntry(name=name, player_names=list(player_names or [""]))
        self._entries.append(entry)
        return entry

    def add_player(self, group_index: int, name: str = "") -> None:
        self._entry_at(group_index).player_names.append(name)

    def remove_player(self, group_index: int, player_index: int) -> None:
        entry = self._entry_at(group_index)
        if len(entry.player_names) <= 1:
            raise SetupError("Each group needs at least one player.")
        if not 0 <= player_index < len(entry.player_names):
            raise IndexError(f"Player index {player_index} out of range")
        entry.player_names.pop(player_index)

    def get_entries(self) -> list[GroupEntry]:
        return list(self._entries)

    def validate(self) -> None:
        """Raise SetupError unless every group and player has a name."""
        if not self._entries:
            raise SetupError("Add at least one group to start.")
        for entry in self._entries:
            if not entry.name.strip():
                raise SetupError("Every group needs a name.")
            if not entry.player_names:
                raise SetupError(f"Group '{entry.name.strip()}' needs at least one player.")
            if any(not name.strip() for name in entry.player_names):
                raise SetupError(f"Every player in '{entry.name.strip()}' needs a name.")

    def build_groups(self) -> tuple[Group, ...]:
        self.validate()
        return tuple(
            Group(
                id=uuid4().hex,
                name=entry.name.strip(),
                players=tuple(Player(id=uuid4().hex, name=name.strip()) for name in entry.player_names),
                jokers=self._starting_jokers,
            )
            for entry in self._entries
        )

    def _entry_at(self, group_index: int) -> GroupEntry:
        if not 0 <= group_index < len(self._entries):
            raise IndexError(f"Group index {group_index} out of range")
        return self._entries[group_index]
