"""
Plain-text scorecard rendering.

Formatting only: every number shown here is read straight off the
MatchState produced by the engine.
"""

from __future__ import annotations

from scorebook.state.models import MatchState, Player, Team


def format_overs(overs: int, balls: int) -> str:
    return f"{overs}.{balls}"


def score_line(state: MatchState) -> str:
    team = state.batting_team
    if team is None:
        return "No innings in progress"
    line = (
        f"{team.name} {team.total_runs}/{team.total_wickets} "
        f"({state.overs_str} ov, RR {team.run_rate:.2f})"
    )
    if state.target is not None:
        line += f" | target {state.target}, need {state.runs_required}"
    return line


def _dismissal_text(player: Player, fielding: Team | None) -> str:
    if not player.is_out:
        return "not out"
    text = player.dismissal.value.lower()
    if player.dismissed_by and fielding is not None:
        fielder = fielding.get_player(player.dismissed_by)
        if fielder is not None:
            text += f" ({fielder.name})"
    return text


def batting_card(team: Team, fielding: Team | None = None) -> list[str]:
    rows = [f"{'Batter':<20} {'R':>4} {'B':>4} {'4s':>3} {'6s':>3} {'SR':>7}  How out"]
    for p in team.players:
        if p.balls_faced == 0 and not p.is_out:
            continue
        rows.append(
            f"{p.name:<20} {p.runs:>4} {p.balls_faced:>4} {p.fours:>3} {p.sixes:>3} "
            f"{p.strike_rate:>7.2f}  {_dismissal_text(p, fielding)}"
        )
    rows.append(
        f"Total: {team.total_runs}/{team.total_wickets} "
        f"({format_overs(team.overs, team.balls)} ov)"
    )
    return rows


def bowling_card(team: Team) -> list[str]:
    rows = [f"{'Bowler':<20} {'O':>4} {'M':>3} {'R':>4} {'W':>3} {'Econ':>6}"]
    for p in team.players:
        if p.overs == 0 and p.runs_conceded == 0:
            continue
        rows.append(
            f"{p.name:<20} {p.overs:>4} {p.maidens:>3} {p.runs_conceded:>4} "
            f"{p.wickets:>3} {p.economy_rate:>6.2f}"
        )
    return rows


def render(state: MatchState) -> str:
    """Full scoreboard for the current innings."""
    lines = [score_line(state)]
    batting = state.batting_team
    bowling = state.bowling_team
    if batting is not None:
        striker = state.striker
        non_striker = state.non_striker
        bowler = state.bowler
        lines.append(
            f"Striker: {striker.name if striker else '-'} | "
            f"Non-striker: {non_striker.name if non_striker else '-'} | "
            f"Bowler: {bowler.name if bowler else '-'}"
        )
        lines.append("")
        lines.extend(batting_card(batting, bowling))
    if bowling is not None:
        lines.append("")
        lines.extend(bowling_card(bowling))
    return "\n".join(lines)
