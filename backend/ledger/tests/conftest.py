"""Shared builders for ledger tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger.logic.registry import RulesetRegistry
from ledger.logic.session import SessionState, apply_round, create_session
from ledger.logic.types import RoundOutcome

if TYPE_CHECKING:
    from ledger.logic.rulesets import Ruleset

DEFAULT_PLAYERS = ["Alice", "Bob", "Carol", "Dave"]


def get_preset(ruleset_id: str) -> Ruleset:
    return RulesetRegistry().get(ruleset_id)


def create_test_session(
    ruleset_id: str = "hongkong",
    *,
    session_id: str = "test-session",
    player_names: list[str] | None = None,
    ruleset: Ruleset | None = None,
) -> SessionState:
    return create_session(
        session_id,
        player_names if player_names is not None else list(DEFAULT_PLAYERS),
        ruleset if ruleset is not None else get_preset(ruleset_id),
    )


def discard_win(
    winner: int | tuple[int, ...],
    loser: int,
    unit_value: int,
    *,
    dealer_seat: int | None = None,
    dealer_repeat: int | None = None,
    fu: int = 30,
    honba: int | None = None,
) -> RoundOutcome:
    winners = winner if isinstance(winner, tuple) else (winner,)
    return RoundOutcome(
        winner_seats=winners,
        loser_seat=loser,
        unit_value=unit_value,
        dealer_seat=dealer_seat,
        dealer_repeat=dealer_repeat,
        fu=fu,
        honba=honba,
    )


def self_draw(
    winner: int,
    unit_value: int,
    *,
    dealer_seat: int | None = None,
    dealer_repeat: int | None = None,
    fu: int = 30,
    honba: int | None = None,
) -> RoundOutcome:
    return RoundOutcome(
        winner_seats=(winner,),
        is_self_draw=True,
        unit_value=unit_value,
        dealer_seat=dealer_seat,
        dealer_repeat=dealer_repeat,
        fu=fu,
        honba=honba,
    )


def exhaustive_draw() -> RoundOutcome:
    return RoundOutcome(is_draw=True)


def play_rounds(state: SessionState, outcomes: list[RoundOutcome]) -> SessionState:
    for outcome in outcomes:
        state = apply_round(state, outcome).state
    return state
