"""
String enum definitions for the round ledger.
"""

from enum import Enum


class Variant(str, Enum):
    """Scoring rule family a ruleset belongs to."""

    HONGKONG = "hongkong"  # fan table lookup
    TAIWAN = "taiwan"  # tai x base unit, dealer bonuses
    JAPANESE = "japanese"  # han/fu formula with limit hands
    CUSTOM = "custom"  # user-authored fan table


class SessionStatus(str, Enum):
    """Lifecycle status of a session."""

    ACTIVE = "active"
    COMPLETED = "completed"


class Wind(str, Enum):
    """Prevailing wind, in rotation order."""

    EAST = "east"
    SOUTH = "south"
    WEST = "west"
    NORTH = "north"


WIND_ORDER: tuple[Wind, ...] = (Wind.EAST, Wind.SOUTH, Wind.WEST, Wind.NORTH)


class LimitHand(str, Enum):
    """Named limit levels for han-based scoring."""

    MANGAN = "mangan"
    HANEMAN = "haneman"
    BAIMAN = "baiman"
    SANBAIMAN = "sanbaiman"
    YAKUMAN = "yakuman"


class HistoryAction(str, Enum):
    """Kinds of undoable actions recorded in session history."""

    APPLY_ROUND = "apply_round"


class SessionAction(str, Enum):
    """Session state machine transitions."""

    APPLY = "apply"
    UNDO = "undo"
    COMPLETE = "complete"


class StatTitle(str, Enum):
    """End-of-session titles awarded from round statistics."""

    MOST_WINS = "most_wins"
    MOST_SELF_DRAWS = "most_self_draws"
    MOST_DEAL_INS = "most_deal_ins"
