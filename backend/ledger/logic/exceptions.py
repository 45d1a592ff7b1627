"""Typed domain exceptions for the round ledger.

All engine failures use subclasses of LedgerError rather than raw
ValueError. Every one of them is a local, recoverable condition: the
caller gets the typed error and the session snapshot it passed in is
left untouched.
"""

from ledger.logic.enums import SessionAction, SessionStatus


class LedgerError(Exception):
    """Base exception for ledger rule violations."""


class InvalidRulesetError(LedgerError):
    """Ruleset failed validation at authoring time.

    Attributes:
        violations: Human-readable list of every rule the ruleset breaks.

    """

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(self.violations))


class UnknownRulesetError(LedgerError):
    """No ruleset is registered under the requested id."""

    def __init__(self, ruleset_id: str) -> None:
        self.ruleset_id = ruleset_id
        super().__init__(f"unknown ruleset: {ruleset_id}")


class InvalidRoundOutcomeError(LedgerError):
    """Round outcome references unseated players or is self-contradictory."""


class IllegalStateTransitionError(LedgerError):
    """Session is not in a state that permits the requested action.

    Attributes:
        action: The transition that was attempted.
        status: The session status at the time of the attempt.

    """

    def __init__(self, *, action: SessionAction, status: SessionStatus, reason: str | None = None) -> None:
        self.action = action
        self.status = status
        message = f"cannot {action.value} a session that is {status.value}"
        if reason:
            message = f"cannot {action.value}: {reason}"
        super().__init__(message)


class EmptyHistoryError(IllegalStateTransitionError):
    """Undo requested with no recorded rounds."""

    def __init__(self, status: SessionStatus = SessionStatus.ACTIVE) -> None:
        super().__init__(action=SessionAction.UNDO, status=status, reason="no rounds to undo")


class SessionNotFoundError(LedgerError):
    """No live session exists under the requested id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"session not found: {session_id}")


class DuplicateSessionError(LedgerError):
    """A live session already exists under the requested id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"session already exists: {session_id}")


class SessionCapacityError(LedgerError):
    """The manager already holds the configured maximum number of sessions."""


class InvalidPlayersError(LedgerError):
    """Session creation needs exactly four distinct, non-empty player names."""
