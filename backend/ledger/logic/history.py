"""
Append-only undo history for a session.

Each entry stores the inverse of one applied action: the deltas to subtract,
the round record to remove, and the turn state to restore. Entries are only
ever appended or popped from the tail.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from ledger.logic.enums import HistoryAction, SessionStatus
from ledger.logic.exceptions import EmptyHistoryError


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: HistoryAction = HistoryAction.APPLY_ROUND
    round_id: str
    deltas: dict[int, int]

    # turn state before the action
    prior_round_number: int
    prior_dealer_seat: int
    prior_wind_index: int
    prior_dealer_repeat: int
    prior_hand_in_wind: int


class History(BaseModel):
    """Immutable stack of history entries; push and pop return new instances."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[HistoryEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def append(self, entry: HistoryEntry) -> History:
        return History(entries=(*self.entries, entry))

    def peek(self) -> HistoryEntry | None:
        return self.entries[-1] if self.entries else None

    def pop(self, status: SessionStatus = SessionStatus.ACTIVE) -> tuple[History, HistoryEntry]:
        """Remove the most recent entry. Raises EmptyHistoryError when there is none."""
        if not self.entries:
            raise EmptyHistoryError(status)
        return History(entries=self.entries[:-1]), self.entries[-1]
