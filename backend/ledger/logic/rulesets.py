"""
Scoring rulesets: immutable per-variant parameters and unit-to-points resolution.

A ruleset is either table-driven (Hong Kong style and user-authored custom
rulesets map each fan value to points) or formula-driven (Taiwan multiplies
tai by a base unit, Japanese derives basic points from han and fu).
Resolution never fails: out-of-range unit values clamp to the nearest bound.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field

from ledger.logic.enums import LimitHand, Variant
from ledger.logic.exceptions import InvalidRulesetError

# Stake used when a table-driven ruleset has no table at all.
NOMINAL_MIN_STAKE = 1

MIN_SELF_DRAW_MULTIPLIER = 0.5
DEFAULT_FU = 30

# (minimum han, limit level, fixed basic points), highest first
JAPANESE_LIMITS: tuple[tuple[int, LimitHand, int], ...] = (
    (13, LimitHand.YAKUMAN, 8000),
    (11, LimitHand.SANBAIMAN, 6000),
    (8, LimitHand.BAIMAN, 4000),
    (6, LimitHand.HANEMAN, 3000),
    (5, LimitHand.MANGAN, 2000),
)
MANGAN_BASIC_POINTS = 2000

TABLE_VARIANTS = frozenset({Variant.HONGKONG, Variant.CUSTOM})


class Ruleset(BaseModel):
    """
    Scoring parameters for one variant.

    Frozen: a session takes a snapshot at creation and editing a ruleset
    means registering a new one that supersedes it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: Variant

    # --- Units ---
    min_unit: int = 0
    max_unit: int = 13
    unit_points: dict[int, int] = Field(default_factory=dict)  # table variants only
    base_point_unit: int = 1  # points per tai (taiwan)

    # --- Payments ---
    self_draw_multiplier: float = 1.0  # table variants: each payer pays base x multiplier
    dealer_bonus: int = 0  # extra units when the dealer wins
    dealer_repeat_bonus: int = 0  # extra units per dealer repeat when the dealer wins
    honba_bonus: int = 300  # japanese: per honba, per payer

    # --- Round flow ---
    retain_dealer_on_draw: bool = True

    # --- Authoring ---
    is_preset: bool = False
    supersedes: str | None = None

    @property
    def is_table_driven(self) -> bool:
        return self.kind in TABLE_VARIANTS


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def generate_unit_points(min_unit: int, max_unit: int, base: int = 4) -> dict[int, int]:
    """
    Build a default fan-to-points table for a new custom ruleset.

    Starts at ``base`` points for ``min_unit`` and grows by half again per unit.
    """
    points: dict[int, int] = {}
    current = base
    for unit in range(min_unit, max_unit + 1):
        points[unit] = current
        current = round_half_up(Decimal(current) * Decimal("1.5"))
    return points


def clamp_unit(ruleset: Ruleset, unit_value: int) -> int:
    return max(ruleset.min_unit, min(unit_value, ruleset.max_unit))


def _lookup_table(table: dict[int, int], unit_value: int) -> int:
    if not table:
        return NOMINAL_MIN_STAKE
    if unit_value in table:
        return table[unit_value]
    lowest = min(table)
    if unit_value < lowest:
        return table[lowest]
    # above the table or inside a gap: nearest defined key below
    return table[max(key for key in table if key <= unit_value)]


def japanese_basic_points(han: int, fu: int = DEFAULT_FU) -> tuple[int, LimitHand | None]:
    """
    Compute basic points for a han/fu hand.

    The formula ``fu * 2^(han+2)`` is rounded up to the nearest 100; from five
    han upward the named limit replaces it with a fixed value, and below five
    han the result never exceeds the mangan value.
    """
    for min_han, limit, fixed_points in JAPANESE_LIMITS:
        if han >= min_han:
            return fixed_points, limit
    raw = fu * 2 ** (han + 2)
    rounded = math.ceil(raw / 100) * 100
    if rounded >= MANGAN_BASIC_POINTS:
        return MANGAN_BASIC_POINTS, LimitHand.MANGAN
    return rounded, None


def resolve_base_points(ruleset: Ruleset, unit_value: int, *, fu: int = DEFAULT_FU) -> int:
    """
    Resolve a scoring-unit value to positive base points for the ruleset.

    The value first clamps to the ruleset's unit bounds. Table-driven rulesets
    then look it up, falling back to the nearest defined key when absent.
    Taiwan multiplies the clamped tai by the base unit. Japanese returns basic
    points from the clamped han and the given fu.
    """
    clamped = clamp_unit(ruleset, unit_value)
    if ruleset.is_table_driven:
        return _lookup_table(ruleset.unit_points, clamped)
    if ruleset.kind == Variant.TAIWAN:
        return clamped * ruleset.base_point_unit
    basic_points, _limit = japanese_basic_points(clamped, fu)
    return basic_points


def _min_unit_floor(kind: Variant) -> int:
    # hong kong counts the zero-fan chicken hand as a win
    return 0 if kind == Variant.HONGKONG else 1


def validate_ruleset(ruleset: Ruleset) -> list[str]:
    """
    Return every rule the ruleset violates; an empty list means valid.

    Used at authoring time only. A live session never re-validates its ruleset.
    """
    violations: list[str] = []

    if not ruleset.name.strip():
        violations.append("name must not be empty")

    floor = _min_unit_floor(ruleset.kind)
    if ruleset.min_unit < floor:
        violations.append(f"min_unit must be at least {floor}")

    if ruleset.max_unit < ruleset.min_unit:
        violations.append("max_unit must be greater than or equal to min_unit")

    if ruleset.self_draw_multiplier < MIN_SELF_DRAW_MULTIPLIER:
        violations.append(f"self_draw_multiplier must be at least {MIN_SELF_DRAW_MULTIPLIER}")

    if ruleset.is_table_driven:
        for unit in range(ruleset.min_unit, ruleset.max_unit + 1):
            points = ruleset.unit_points.get(unit)
            if points is None:
                violations.append(f"missing base points for unit value {unit}")
            elif points < 1:
                violations.append(f"base points for unit value {unit} must be at least 1")
    elif ruleset.kind == Variant.TAIWAN and ruleset.base_point_unit < 1:
        violations.append("base_point_unit must be at least 1")

    return violations


def ensure_valid_ruleset(ruleset: Ruleset) -> Ruleset:
    """Return the ruleset unchanged, or raise InvalidRulesetError listing every violation."""
    violations = validate_ruleset(ruleset)
    if violations:
        raise InvalidRulesetError(violations)
    return ruleset


HONG_KONG_FAN_TABLE: dict[int, int] = {
    0: 1,  # chicken hand: nominal stake
    1: 2,
    2: 4,
    3: 8,
    4: 16,
    5: 24,
    6: 32,
    7: 48,
    8: 64,
    9: 96,
    10: 128,
    11: 192,
    12: 256,
    13: 384,
}

_HK_3FAN_4_TABLE = {3: 4, 4: 8, 5: 12, 6: 16, 7: 24, 8: 32, 9: 40, 10: 48}
_HK_2FAN_5_TABLE = {2: 2, 3: 5, 4: 10, 5: 15, 6: 20, 7: 30, 8: 40, 9: 50, 10: 60}
_HK_1FAN_1_TABLE = {fan: fan for fan in range(1, 11)}
_HK_CLASSIC_TABLE = {1: 2, 2: 4, 3: 8, 4: 12, 5: 16, 6: 24, 7: 32, 8: 48, 9: 64, 10: 96, 11: 128, 12: 192, 13: 256}

PRESET_RULESETS: tuple[Ruleset, ...] = (
    Ruleset(
        id="hongkong",
        name="Hong Kong",
        kind=Variant.HONGKONG,
        min_unit=0,
        max_unit=13,
        unit_points=HONG_KONG_FAN_TABLE,
        self_draw_multiplier=0.5,
        is_preset=True,
    ),
    Ruleset(
        id="taiwan",
        name="Taiwan",
        kind=Variant.TAIWAN,
        min_unit=1,
        max_unit=50,
        base_point_unit=100,
        dealer_bonus=1,
        dealer_repeat_bonus=1,
        is_preset=True,
    ),
    Ruleset(
        id="japanese",
        name="Japanese (Riichi)",
        kind=Variant.JAPANESE,
        min_unit=1,
        max_unit=13,
        honba_bonus=300,
        is_preset=True,
    ),
    Ruleset(
        id="custom",
        name="Custom",
        kind=Variant.CUSTOM,
        min_unit=1,
        max_unit=10,
        unit_points=generate_unit_points(1, 10),
        self_draw_multiplier=2.0,
        is_preset=True,
    ),
    Ruleset(
        id="hk-3fan-4",
        name="3 fan minimum, 4 point base",
        kind=Variant.CUSTOM,
        min_unit=3,
        max_unit=10,
        unit_points=_HK_3FAN_4_TABLE,
        is_preset=True,
    ),
    Ruleset(
        id="hk-2fan-5",
        name="2 fan minimum, 5 point base",
        kind=Variant.CUSTOM,
        min_unit=2,
        max_unit=10,
        unit_points=_HK_2FAN_5_TABLE,
        is_preset=True,
    ),
    Ruleset(
        id="hk-1fan-1",
        name="1 fan minimum, 1 point per fan",
        kind=Variant.CUSTOM,
        min_unit=1,
        max_unit=10,
        unit_points=_HK_1FAN_1_TABLE,
        retain_dealer_on_draw=False,
        is_preset=True,
    ),
    Ruleset(
        id="hk-classic",
        name="Classic Hong Kong",
        kind=Variant.CUSTOM,
        min_unit=1,
        max_unit=13,
        unit_points=_HK_CLASSIC_TABLE,
        self_draw_multiplier=2.0,
        is_preset=True,
    ),
)
