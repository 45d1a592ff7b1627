"""
Round scoring for the ledger.

Turns a declared round outcome into per-seat point deltas using the
session's ruleset. Each variant has its own pure scoring function; all of
them share the RoundOutcome -> ScoreResult shape and are dispatched on the
ruleset's kind.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from ledger.logic.enums import Variant
from ledger.logic.exceptions import InvalidRoundOutcomeError
from ledger.logic.rulesets import clamp_unit, japanese_basic_points, resolve_base_points, round_half_up
from ledger.logic.types import ScoreResult

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ledger.logic.rulesets import Ruleset
    from ledger.logic.types import RoundOutcome

logger = structlog.get_logger()

NUM_SEATS = 4
SEATS: tuple[int, ...] = tuple(range(1, NUM_SEATS + 1))

# han-based payments: the hand value is basic points x 6 (dealer) or x 4
DEALER_HAND_MULTIPLIER = 6
NON_DEALER_HAND_MULTIPLIER = 4
HONBA_RON_PAYERS = 3


def _zero_deltas() -> dict[int, int]:
    return dict.fromkeys(SEATS, 0)


def _ceil_hundreds(value: int, divisor: int) -> int:
    """Divide and round the share up to the next multiple of 100 points."""
    return -(-value // (divisor * 100)) * 100


def _split_evenly(total: int, winner_seats: Iterable[int]) -> dict[int, int]:
    """
    Divide ``total`` among winners, rounding each share down.

    The remainder goes to the first winner in seat order.
    """
    ordered = sorted(winner_seats)
    share, remainder = divmod(total, len(ordered))
    shares = dict.fromkeys(ordered, share)
    shares[ordered[0]] += remainder
    return shares


def _require_loser(outcome: RoundOutcome) -> int:
    if outcome.loser_seat is None:
        raise InvalidRoundOutcomeError("a discard win needs a loser seat")
    return outcome.loser_seat


def validate_outcome(outcome: RoundOutcome, seats: Iterable[int] = SEATS) -> None:  # noqa: C901, PLR0912
    """
    Reject outcomes that reference unseated players or contradict themselves.

    Raises InvalidRoundOutcomeError describing the first problem found.
    """
    seated = set(seats)
    winners = outcome.winner_seats
    referenced = list(winners)
    if outcome.loser_seat is not None:
        referenced.append(outcome.loser_seat)
    if outcome.dealer_seat is not None:
        referenced.append(outcome.dealer_seat)
    for seat in referenced:
        if seat not in seated:
            raise InvalidRoundOutcomeError(f"seat {seat} is not seated at this table")

    if len(set(winners)) != len(winners):
        raise InvalidRoundOutcomeError("winner seats must not repeat")

    if outcome.is_draw:
        if winners or outcome.loser_seat is not None:
            raise InvalidRoundOutcomeError("a draw cannot have winners or a loser")
        if outcome.is_self_draw:
            raise InvalidRoundOutcomeError("a draw cannot be a self-draw")
        return

    if not winners:
        raise InvalidRoundOutcomeError("a non-draw outcome needs at least one winner")

    if outcome.is_self_draw:
        if outcome.loser_seat is not None:
            raise InvalidRoundOutcomeError("a self-draw cannot have a loser seat")
        if len(winners) > 1:
            raise InvalidRoundOutcomeError("a self-draw has exactly one winner")
    else:
        if outcome.loser_seat is None:
            raise InvalidRoundOutcomeError("a discard win needs a loser seat")
        if outcome.loser_seat in winners:
            raise InvalidRoundOutcomeError("the loser seat cannot also be a winner")

    if outcome.unit_value is not None and outcome.components:
        component_total = sum(component.value for component in outcome.components)
        if component_total != outcome.unit_value:
            raise InvalidRoundOutcomeError(
                f"unit value {outcome.unit_value} does not match component total {component_total}"
            )


def score_hongkong(ruleset: Ruleset, outcome: RoundOutcome) -> ScoreResult:
    """
    Score a table-driven (Hong Kong style or custom) round.

    Self-draw: every other seat pays base x self-draw multiplier, rounded.
    Discard: the loser pays the base once, shared among the winners.
    """
    unit = outcome.aggregate_unit
    base_points = resolve_base_points(ruleset, unit)
    deltas = _zero_deltas()

    if outcome.is_self_draw:
        winner = outcome.winner_seats[0]
        payment = round_half_up(Decimal(base_points) * Decimal(str(ruleset.self_draw_multiplier)))
        for seat in SEATS:
            if seat != winner:
                deltas[seat] -= payment
                deltas[winner] += payment
    else:
        deltas[_require_loser(outcome)] -= base_points
        for seat, share in _split_evenly(base_points, outcome.winner_seats).items():
            deltas[seat] += share

    return ScoreResult(
        deltas=deltas,
        unit_value=unit,
        effective_unit=clamp_unit(ruleset, unit),
        base_points=base_points,
    )


def score_taiwan(ruleset: Ruleset, outcome: RoundOutcome) -> ScoreResult:
    """
    Score a tai-based round.

    A winning dealer adds the dealer bonus plus the repeat bonus for each
    consecutive hand held. Self-draw: all three others pay the full points.
    Discard: only the discarder pays, once per winner.
    """
    unit = outcome.aggregate_unit
    bonus_units = 0
    if outcome.is_dealer_win:
        bonus_units = ruleset.dealer_bonus + ruleset.dealer_repeat_bonus * (outcome.dealer_repeat or 0)
    effective_unit = clamp_unit(ruleset, unit) + bonus_units
    points = resolve_base_points(ruleset, unit) + bonus_units * ruleset.base_point_unit
    deltas = _zero_deltas()

    if outcome.is_self_draw:
        winner = outcome.winner_seats[0]
        for seat in SEATS:
            if seat != winner:
                deltas[seat] -= points
                deltas[winner] += points
    else:
        total = points * len(outcome.winner_seats)
        deltas[_require_loser(outcome)] -= total
        for seat, share in _split_evenly(total, outcome.winner_seats).items():
            deltas[seat] += share

    return ScoreResult(deltas=deltas, unit_value=unit, effective_unit=effective_unit, base_points=points)


def score_japanese(ruleset: Ruleset, outcome: RoundOutcome) -> ScoreResult:
    """
    Score a han/fu round.

    Hand value is basic points x 6 for the dealer and x 4 otherwise.

    Self-draw payments (before honba):
    - dealer wins: each opponent pays value / 3
    - non-dealer wins: dealer pays value / 2, the other two pay value / 4
    each rounded up to the next 100.

    Discard: the discarder pays the hand value of every winner.

    Honba: each self-draw payer adds honba_bonus per honba; on a discard the
    discarder adds three times that, credited to the first winner in seat order.
    """
    if outcome.dealer_seat is None:
        raise InvalidRoundOutcomeError("han-based scoring needs the dealer seat")

    unit = outcome.aggregate_unit
    han = clamp_unit(ruleset, unit)
    basic_points, limit = japanese_basic_points(han, outcome.fu)
    honba_bonus = ruleset.honba_bonus * outcome.effective_honba
    deltas = _zero_deltas()

    if outcome.is_self_draw:
        winner = outcome.winner_seats[0]
        for seat in SEATS:
            if seat == winner:
                continue
            if outcome.is_dealer_win:
                payment = _ceil_hundreds(basic_points * DEALER_HAND_MULTIPLIER, 3)
            elif seat == outcome.dealer_seat:
                payment = _ceil_hundreds(basic_points * NON_DEALER_HAND_MULTIPLIER, 2)
            else:
                payment = _ceil_hundreds(basic_points * NON_DEALER_HAND_MULTIPLIER, 4)
            payment += honba_bonus
            deltas[seat] -= payment
            deltas[winner] += payment
    else:
        loser = _require_loser(outcome)
        ordered_winners = sorted(outcome.winner_seats)
        for winner in ordered_winners:
            multiplier = DEALER_HAND_MULTIPLIER if winner == outcome.dealer_seat else NON_DEALER_HAND_MULTIPLIER
            payment = basic_points * multiplier
            if winner == ordered_winners[0]:
                payment += honba_bonus * HONBA_RON_PAYERS
            deltas[loser] -= payment
            deltas[winner] += payment

    return ScoreResult(
        deltas=deltas,
        unit_value=unit,
        effective_unit=han,
        base_points=basic_points,
        limit=limit,
    )


_SCORERS: dict[Variant, Callable[[Ruleset, RoundOutcome], ScoreResult]] = {
    Variant.HONGKONG: score_hongkong,
    Variant.CUSTOM: score_hongkong,
    Variant.TAIWAN: score_taiwan,
    Variant.JAPANESE: score_japanese,
}


def score_round(ruleset: Ruleset, outcome: RoundOutcome) -> ScoreResult:
    """
    Compute per-seat deltas for one round under the given ruleset.

    Draws score zero for everyone. Never fails on out-of-range unit values:
    those clamp to the ruleset's bounds.
    """
    validate_outcome(outcome)

    if outcome.is_draw:
        return ScoreResult(deltas=_zero_deltas(), unit_value=0, effective_unit=0, base_points=0)

    result = _SCORERS[ruleset.kind](ruleset, outcome)
    logger.debug(
        "round scored",
        variant=ruleset.kind,
        unit_value=result.unit_value,
        effective_unit=result.effective_unit,
        base_points=result.base_points,
        deltas=result.deltas,
    )
    return result
