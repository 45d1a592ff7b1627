import pytest

from ledger.logic.enums import HistoryAction, SessionAction, SessionStatus
from ledger.logic.exceptions import EmptyHistoryError, IllegalStateTransitionError
from ledger.logic.history import History, HistoryEntry


def _entry(round_id: str, *, winner_delta: int = 8) -> HistoryEntry:
    return HistoryEntry(
        round_id=round_id,
        deltas={1: winner_delta, 2: -winner_delta, 3: 0, 4: 0},
        prior_round_number=1,
        prior_dealer_seat=1,
        prior_wind_index=0,
        prior_dealer_repeat=0,
        prior_hand_in_wind=0,
    )


class TestHistory:
    def test_starts_empty(self):
        history = History()
        assert history.is_empty
        assert len(history) == 0
        assert history.peek() is None

    def test_append_returns_new_history(self):
        history = History()
        grown = history.append(_entry("s-1"))

        assert history.is_empty
        assert len(grown) == 1
        assert grown.peek().round_id == "s-1"
        assert grown.peek().action == HistoryAction.APPLY_ROUND

    def test_pop_removes_tail_only(self):
        history = History().append(_entry("s-1")).append(_entry("s-2", winner_delta=16))

        remaining, popped = history.pop()

        assert popped.round_id == "s-2"
        assert popped.deltas[1] == 16
        assert [e.round_id for e in remaining.entries] == ["s-1"]
        assert len(history) == 2

    def test_pop_empty_raises(self):
        with pytest.raises(EmptyHistoryError, match="no rounds to undo") as exc_info:
            History().pop()
        assert exc_info.value.action == SessionAction.UNDO
        assert exc_info.value.status == SessionStatus.ACTIVE

    def test_empty_history_error_is_state_transition_error(self):
        with pytest.raises(IllegalStateTransitionError):
            History().pop()
