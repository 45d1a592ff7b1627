"""Per-player round statistics and end-of-session titles."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger.logic.enums import StatTitle
from ledger.logic.types import PlayerStats

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledger.logic.session import SessionState

_TITLE_FIELDS: dict[StatTitle, str] = {
    StatTitle.MOST_WINS: "wins",
    StatTitle.MOST_SELF_DRAWS: "self_draws",
    StatTitle.MOST_DEAL_INS: "deal_ins",
}


def compute_player_stats(state: SessionState) -> list[PlayerStats]:
    """Count wins, self-draws, deal-ins and draws for each seat over the applied rounds."""
    counts = {player.seat: {"wins": 0, "self_draws": 0, "deal_ins": 0, "draws": 0} for player in state.players}
    for record in state.rounds:
        outcome = record.outcome
        if outcome.is_draw:
            for seat_counts in counts.values():
                seat_counts["draws"] += 1
            continue
        for seat in outcome.winner_seats:
            counts[seat]["wins"] += 1
            if outcome.is_self_draw:
                counts[seat]["self_draws"] += 1
        if outcome.loser_seat is not None:
            counts[outcome.loser_seat]["deal_ins"] += 1

    return [
        PlayerStats(seat=player.seat, name=player.name, score=player.score, **counts[player.seat])
        for player in state.players
    ]


def award_titles(stats: Sequence[PlayerStats]) -> dict[StatTitle, PlayerStats]:
    """
    Pick the leader for each title.

    A title is only awarded for a positive count; ties go to the lowest seat.
    """
    titles: dict[StatTitle, PlayerStats] = {}
    for title, field in _TITLE_FIELDS.items():
        leader = max(sorted(stats, key=lambda s: s.seat), key=lambda s: getattr(s, field), default=None)
        if leader is not None and getattr(leader, field) > 0:
            titles[title] = leader
    return titles
