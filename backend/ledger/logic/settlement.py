"""
End-of-session settlement.

Converts point totals to money and nets the table's debts into a short list
of payments: the largest remaining winner is always paid by the largest
remaining loser, which needs at most ``winners + losers - 1`` payments.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import structlog

from ledger.logic.types import Payment, Settlement, SettlementRow

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger()

DEFAULT_POINTS_PER_UNIT = Decimal(10)
MAX_DECIMAL_PLACES = 2


def _quantum(decimal_places: int) -> Decimal:
    return Decimal(1).scaleb(-decimal_places)


def money_from_points(points: int, points_per_unit: Decimal, decimal_places: int = 0) -> Decimal:
    """Divide points by the divisor and round half up to the requested precision."""
    if points_per_unit <= 0:
        raise ValueError("points_per_unit must be positive")
    if not 0 <= decimal_places <= MAX_DECIMAL_PLACES:
        raise ValueError(f"decimal_places must be between 0 and {MAX_DECIMAL_PLACES}")
    return (Decimal(points) / points_per_unit).quantize(_quantum(decimal_places), rounding=ROUND_HALF_UP)


def _net_payments(money: Mapping[str, Decimal], epsilon: Decimal) -> list[Payment]:
    # stable sorts keep seat order among equal amounts
    winners = [[name, amount] for name, amount in sorted(money.items(), key=lambda item: -item[1]) if amount > 0]
    losers = [[name, -amount] for name, amount in sorted(money.items(), key=lambda item: item[1]) if amount < 0]

    payments: list[Payment] = []
    while winners and losers:
        winner, loser = winners[0], losers[0]
        amount = min(winner[1], loser[1])
        payments.append(Payment(from_player=loser[0], to_player=winner[0], amount=amount))
        winner[1] -= amount
        loser[1] -= amount
        if winner[1] < epsilon:
            winners.pop(0)
        if loser[1] < epsilon:
            losers.pop(0)
    return payments


def calculate_settlement(
    totals: Mapping[str, int],
    *,
    points_per_unit: Decimal = DEFAULT_POINTS_PER_UNIT,
    decimal_places: int = 0,
) -> Settlement:
    """
    Build final standings and the netted payment list.

    ``totals`` maps player name to final points, in seat order. Ranks are
    distinct, ordered by points descending; equal points keep seat order.
    """
    money = {name: money_from_points(points, points_per_unit, decimal_places) for name, points in totals.items()}
    epsilon = _quantum(decimal_places) / 2

    ordered = sorted(totals.items(), key=lambda item: -item[1])
    rows = tuple(
        SettlementRow(player=name, points=points, money=money[name], rank=rank)
        for rank, (name, points) in enumerate(ordered, start=1)
    )
    payments = _net_payments(money, epsilon)

    settlement = Settlement(
        rows=rows,
        payments=tuple(payments),
        points_per_unit=points_per_unit,
        decimal_places=decimal_places,
    )
    logger.debug(
        "settlement calculated",
        players=len(rows),
        payments=len(payments),
        total_transferred=settlement.total_transferred,
    )
    return settlement
