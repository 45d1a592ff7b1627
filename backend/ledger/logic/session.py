"""
Session state machine: running scores, dealer/wind rotation, undo.

All operations are pure. They take a frozen SessionState and return a new
one, so a failed operation leaves the caller's snapshot untouched. The
engine never locks: callers serialize mutations of a single session.
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ledger.logic.enums import WIND_ORDER, SessionAction, SessionStatus, Wind
from ledger.logic.exceptions import IllegalStateTransitionError, InvalidPlayersError, InvalidRoundOutcomeError
from ledger.logic.history import History, HistoryEntry
from ledger.logic.rulesets import Ruleset
from ledger.logic.scoring import NUM_SEATS, SEATS, score_round
from ledger.logic.types import RoundOutcome, RoundRecord

logger = structlog.get_logger()

HANDS_PER_WIND = 4


class SeatedPlayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    seat: int = Field(ge=1, le=NUM_SEATS)
    name: str
    score: int = 0


class SessionState(BaseModel):
    """
    Snapshot of one game session.

    ``hand_in_wind`` counts dealer rotations since the prevailing wind last
    advanced; it is independent of ``dealer_repeat``.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    players: tuple[SeatedPlayer, ...]
    ruleset: Ruleset
    status: SessionStatus = SessionStatus.ACTIVE

    round_number: int = 1
    wind_index: int = Field(default=0, ge=0, lt=len(WIND_ORDER))
    dealer_seat: int = Field(default=1, ge=1, le=NUM_SEATS)
    dealer_repeat: int = Field(default=0, ge=0)
    hand_in_wind: int = Field(default=0, ge=0, lt=HANDS_PER_WIND)

    rounds: tuple[RoundRecord, ...] = ()
    history: History = Field(default_factory=History)

    @property
    def wind(self) -> Wind:
        return WIND_ORDER[self.wind_index]

    @property
    def scores(self) -> dict[int, int]:
        return {player.seat: player.score for player in self.players}

    def player_at(self, seat: int) -> SeatedPlayer:
        return self.players[seat - 1]


class ApplyResult(BaseModel):
    """New session snapshot plus the round record for the persistence layer."""

    model_config = ConfigDict(frozen=True)

    state: SessionState
    record: RoundRecord


class UndoResult(BaseModel):
    """Restored session snapshot plus the id of the round record to delete."""

    model_config = ConfigDict(frozen=True)

    state: SessionState
    removed_round_id: str
    entry: HistoryEntry


def create_session(session_id: str, player_names: list[str], ruleset: Ruleset) -> SessionState:
    """
    Seat four players in order and snapshot the ruleset.

    Seat 1 deals first, in the east wind.
    """
    names = [name.strip() for name in player_names]
    if len(names) != NUM_SEATS:
        raise InvalidPlayersError(f"a session needs exactly {NUM_SEATS} players, got {len(names)}")
    if not all(names):
        raise InvalidPlayersError("player names must not be empty")
    if len(set(names)) != len(names):
        raise InvalidPlayersError("player names must be unique")

    players = tuple(SeatedPlayer(seat=seat, name=name) for seat, name in zip(SEATS, names, strict=True))
    state = SessionState(session_id=session_id, players=players, ruleset=ruleset.model_copy(deep=True))
    logger.debug("session created", session_id=session_id, ruleset_id=ruleset.id)
    return state


def _require_active(state: SessionState, action: SessionAction) -> None:
    if state.status != SessionStatus.ACTIVE:
        raise IllegalStateTransitionError(action=action, status=state.status)


def _stamp_turn_state(state: SessionState, outcome: RoundOutcome) -> RoundOutcome:
    """Fill in the dealer seat and repeat count from the session, rejecting contradictions."""
    if outcome.dealer_seat is not None and outcome.dealer_seat != state.dealer_seat:
        raise InvalidRoundOutcomeError(
            f"outcome names seat {outcome.dealer_seat} as dealer but the dealer is seat {state.dealer_seat}"
        )
    if outcome.dealer_repeat is not None and outcome.dealer_repeat != state.dealer_repeat:
        raise InvalidRoundOutcomeError(
            f"outcome dealer repeat {outcome.dealer_repeat} does not match session repeat {state.dealer_repeat}"
        )
    return outcome.model_copy(update={"dealer_seat": state.dealer_seat, "dealer_repeat": state.dealer_repeat})


def _next_turn_state(state: SessionState, outcome: RoundOutcome) -> dict[str, int]:
    """
    Compute dealer, repeat and wind after a round.

    The dealer keeps the seat on a win, or on a draw when the ruleset says
    so; otherwise the seat passes to the next player and the wind advances
    after every fourth rotation.
    """
    if outcome.is_draw:
        retains = state.ruleset.retain_dealer_on_draw
    else:
        retains = state.dealer_seat in outcome.winner_seats

    if retains:
        return {
            "dealer_seat": state.dealer_seat,
            "dealer_repeat": state.dealer_repeat + 1,
            "wind_index": state.wind_index,
            "hand_in_wind": state.hand_in_wind,
        }

    hand_in_wind = state.hand_in_wind + 1
    wind_index = state.wind_index
    if hand_in_wind == HANDS_PER_WIND:
        hand_in_wind = 0
        wind_index = (wind_index + 1) % len(WIND_ORDER)
    return {
        "dealer_seat": state.dealer_seat % NUM_SEATS + 1,
        "dealer_repeat": 0,
        "wind_index": wind_index,
        "hand_in_wind": hand_in_wind,
    }


def apply_round(state: SessionState, outcome: RoundOutcome) -> ApplyResult:
    """
    Score a round and advance the session.

    Raises IllegalStateTransitionError when the session is completed and
    InvalidRoundOutcomeError when the outcome is rejected.
    """
    _require_active(state, SessionAction.APPLY)
    stamped = _stamp_turn_state(state, outcome)
    result = score_round(state.ruleset, stamped)

    round_id = f"{state.session_id}-{state.round_number}"
    record = RoundRecord(
        round_id=round_id,
        round_number=state.round_number,
        wind=state.wind,
        hand_number=state.hand_in_wind + 1,
        dealer_seat=state.dealer_seat,
        dealer_repeat=state.dealer_repeat,
        outcome=stamped,
        deltas=result.deltas,
        effective_unit=result.effective_unit,
        base_points=result.base_points,
        limit=result.limit,
    )
    entry = HistoryEntry(
        round_id=round_id,
        deltas=result.deltas,
        prior_round_number=state.round_number,
        prior_dealer_seat=state.dealer_seat,
        prior_wind_index=state.wind_index,
        prior_dealer_repeat=state.dealer_repeat,
        prior_hand_in_wind=state.hand_in_wind,
    )
    players = tuple(
        player.model_copy(update={"score": player.score + result.deltas[player.seat]}) for player in state.players
    )

    new_state = state.model_copy(
        update={
            **_next_turn_state(state, stamped),
            "players": players,
            "round_number": state.round_number + 1,
            "rounds": (*state.rounds, record),
            "history": state.history.append(entry),
        },
    )
    logger.debug(
        "round applied",
        session_id=state.session_id,
        round_id=round_id,
        deltas=result.deltas,
        dealer_seat=new_state.dealer_seat,
        dealer_repeat=new_state.dealer_repeat,
        wind=new_state.wind,
    )
    return ApplyResult(state=new_state, record=record)


def undo_round(state: SessionState) -> UndoResult:
    """
    Reverse the most recent round exactly.

    Raises EmptyHistoryError with nothing to undo and
    IllegalStateTransitionError once the session is completed.
    """
    _require_active(state, SessionAction.UNDO)
    history, entry = state.history.pop(state.status)

    players = tuple(
        player.model_copy(update={"score": player.score - entry.deltas.get(player.seat, 0)})
        for player in state.players
    )
    new_state = state.model_copy(
        update={
            "players": players,
            "round_number": entry.prior_round_number,
            "dealer_seat": entry.prior_dealer_seat,
            "wind_index": entry.prior_wind_index,
            "dealer_repeat": entry.prior_dealer_repeat,
            "hand_in_wind": entry.prior_hand_in_wind,
            "rounds": tuple(record for record in state.rounds if record.round_id != entry.round_id),
            "history": history,
        },
    )
    logger.debug("round undone", session_id=state.session_id, round_id=entry.round_id)
    return UndoResult(state=new_state, removed_round_id=entry.round_id, entry=entry)


def complete_session(state: SessionState) -> SessionState:
    """Mark the session completed. Completing twice is a no-op."""
    if state.status == SessionStatus.COMPLETED:
        return state
    logger.debug("session completed", session_id=state.session_id, rounds=len(state.rounds))
    return state.model_copy(update={"status": SessionStatus.COMPLETED})


def final_totals(state: SessionState) -> dict[str, int]:
    """Running score per player name, in seat order."""
    return {player.name: player.score for player in state.players}
