"""
Derived statistics.

Strike rate, economy rate and run rate are never carried forward on their
own: after each transition the engine rebuilds them from the authoritative
counters with the helpers below.
"""

from __future__ import annotations

from dataclasses import replace

from scorebook.config import BALLS_PER_OVER
from scorebook.state.models import Player, Team


def overs_as_decimal(overs: int, balls: int) -> float:
    """Overs as a true fraction, e.g. 3 overs 3 balls -> 3.5."""
    return overs + balls / BALLS_PER_OVER


def strike_rate(runs: int, balls_faced: int) -> float:
    """Runs per 100 balls, rounded to 2 decimals."""
    if balls_faced <= 0:
        return 0.0
    return round(runs / balls_faced * 100, 2)


def per_over_rate(runs: int, overs: int, balls: int) -> float:
    """Runs per over, rounded to 2 decimals; 0 when no ball has been bowled."""
    divisor = overs_as_decimal(overs, balls)
    if divisor <= 0:
        return 0.0
    return round(runs / divisor, 2)


def economy_rate(runs_conceded: int, overs: int, balls: int) -> float:
    return per_over_rate(runs_conceded, overs, balls)


def run_rate(total_runs: int, overs: int, balls: int) -> float:
    return per_over_rate(total_runs, overs, balls)


def refresh_batter(player: Player) -> Player:
    return replace(player, strike_rate=strike_rate(player.runs, player.balls_faced))


def refresh_bowler(player: Player, balls_in_over: int = 0) -> Player:
    """Recompute economy from completed overs plus the partial over in progress.

    ``balls_in_over`` is only non-zero for the bowler currently in the
    middle of an over.
    """
    return replace(
        player,
        economy_rate=economy_rate(player.runs_conceded, player.overs, balls_in_over),
    )


def refresh_team(team: Team) -> Team:
    return replace(team, run_rate=run_rate(team.total_runs, team.overs, team.balls))
