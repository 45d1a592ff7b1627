"""Tests for the ledger exception hierarchy."""

import pytest

from ledger.logic.enums import SessionAction, SessionStatus
from ledger.logic.exceptions import (
    DuplicateSessionError,
    EmptyHistoryError,
    IllegalStateTransitionError,
    InvalidPlayersError,
    InvalidRoundOutcomeError,
    InvalidRulesetError,
    LedgerError,
    SessionCapacityError,
    SessionNotFoundError,
    UnknownRulesetError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_cls",
        [
            InvalidRulesetError,
            UnknownRulesetError,
            InvalidRoundOutcomeError,
            IllegalStateTransitionError,
            EmptyHistoryError,
            InvalidPlayersError,
            SessionNotFoundError,
            DuplicateSessionError,
            SessionCapacityError,
        ],
    )
    def test_all_errors_are_ledger_errors(self, error_cls):
        assert issubclass(error_cls, LedgerError)

    def test_empty_history_is_a_state_transition_error(self):
        assert issubclass(EmptyHistoryError, IllegalStateTransitionError)


class TestInvalidRulesetError:
    def test_joins_violations(self):
        err = InvalidRulesetError(["name must not be empty", "min_unit must be at least 1"])
        assert err.violations == ["name must not be empty", "min_unit must be at least 1"]
        assert str(err) == "name must not be empty; min_unit must be at least 1"


class TestIllegalStateTransitionError:
    def test_stores_action_and_status(self):
        err = IllegalStateTransitionError(action=SessionAction.APPLY, status=SessionStatus.COMPLETED)
        assert err.action == SessionAction.APPLY
        assert err.status == SessionStatus.COMPLETED
        assert str(err) == "cannot apply a session that is completed"

    def test_reason_replaces_status_message(self):
        err = IllegalStateTransitionError(action=SessionAction.UNDO, status=SessionStatus.ACTIVE, reason="busy")
        assert str(err) == "cannot undo: busy"

    def test_requires_keyword_arguments(self):
        with pytest.raises(TypeError):
            IllegalStateTransitionError(SessionAction.APPLY, SessionStatus.ACTIVE)  # type: ignore[misc]

    def test_empty_history_message(self):
        err = EmptyHistoryError()
        assert err.action == SessionAction.UNDO
        assert str(err) == "cannot undo: no rounds to undo"


class TestLookupErrors:
    def test_session_not_found(self):
        err = SessionNotFoundError("abc")
        assert err.session_id == "abc"
        assert str(err) == "session not found: abc"

    def test_duplicate_session(self):
        assert str(DuplicateSessionError("abc")) == "session already exists: abc"

    def test_unknown_ruleset(self):
        assert str(UnknownRulesetError("zzz")) == "unknown ruleset: zzz"
