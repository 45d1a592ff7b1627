"""
Pydantic models for ledger data structures.

Contains the round outcome submitted by callers, scorer output, the
persisted round record, and settlement / statistics results that cross
the engine boundary.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from ledger.logic.enums import LimitHand, Wind
from ledger.logic.rulesets import DEFAULT_FU


class UnitComponent(BaseModel):
    """One named contribution to a hand's scoring-unit total (e.g. a fan source)."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: int = Field(ge=0)


class RoundOutcome(BaseModel):
    """
    Declared result of one hand, as submitted by the caller.

    Winners and loser are seat numbers (1-4). The unit value is either given
    directly or as a breakdown of named components. ``dealer_seat`` and
    ``dealer_repeat`` are stamped by the session when the round is applied;
    standalone scoring needs them supplied explicitly.
    """

    model_config = ConfigDict(frozen=True)

    winner_seats: tuple[int, ...] = ()
    loser_seat: int | None = None
    is_self_draw: bool = False
    is_draw: bool = False

    unit_value: int | None = Field(default=None, ge=0)
    components: tuple[UnitComponent, ...] = ()

    dealer_seat: int | None = None
    dealer_repeat: int | None = Field(default=None, ge=0)

    # han-based extras
    fu: int = Field(default=DEFAULT_FU, ge=20)
    honba: int | None = Field(default=None, ge=0)  # defaults to dealer_repeat

    @property
    def aggregate_unit(self) -> int:
        if self.unit_value is not None:
            return self.unit_value
        return sum(component.value for component in self.components)

    @property
    def is_dealer_win(self) -> bool:
        return self.dealer_seat is not None and self.dealer_seat in self.winner_seats

    @property
    def effective_honba(self) -> int:
        if self.honba is not None:
            return self.honba
        return self.dealer_repeat or 0


class ScoreResult(BaseModel):
    """Per-seat point deltas produced by the round scorer."""

    model_config = ConfigDict(frozen=True)

    deltas: dict[int, int]  # seat -> signed points, every seat present
    unit_value: int  # declared aggregate
    effective_unit: int  # after dealer bonuses and clamping
    base_points: int
    limit: LimitHand | None = None


class RoundRecord(BaseModel):
    """Persisted artifact of an applied round, with the turn state it was played under."""

    model_config = ConfigDict(frozen=True)

    round_id: str
    round_number: int
    wind: Wind
    hand_number: int  # 1-4 within the prevailing wind
    dealer_seat: int
    dealer_repeat: int
    outcome: RoundOutcome
    deltas: dict[int, int]
    effective_unit: int
    base_points: int
    limit: LimitHand | None = None


class Payment(BaseModel):
    """A single transfer of money from a losing player to a winning player."""

    model_config = ConfigDict(frozen=True)

    from_player: str
    to_player: str
    amount: Decimal


class SettlementRow(BaseModel):
    """Final standing of one player."""

    model_config = ConfigDict(frozen=True)

    player: str
    points: int
    money: Decimal
    rank: int


class Settlement(BaseModel):
    """Final standings plus the netted payment list."""

    model_config = ConfigDict(frozen=True)

    rows: tuple[SettlementRow, ...]
    payments: tuple[Payment, ...]
    points_per_unit: Decimal
    decimal_places: int

    @property
    def total_transferred(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), Decimal(0))


class PlayerStats(BaseModel):
    """Round statistics for one seat over a session."""

    model_config = ConfigDict(frozen=True)

    seat: int
    name: str
    score: int
    wins: int = 0
    self_draws: int = 0
    deal_ins: int = 0
    draws: int = 0
