"""
Match setup.

Pure functions that assemble a MatchState before the first ball: teams,
squads, toss, openers and the opening bowler. Once ``start_match`` has
accepted the state, squads are frozen and only the engine replaces them.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Optional, Union

from scorebook.config import TossChoice
from scorebook.errors import (
    InvalidPlayerError,
    InvalidStateError,
    InvalidTransitionError,
)
from scorebook.state.models import TEAM_A_ID, TEAM_B_ID, MatchState, Player, Team

logger = logging.getLogger(__name__)

MIN_SQUAD_SIZE = 2


def new_match(
    team_a_name: str = "",
    team_b_name: str = "",
    match_id: Optional[str] = None,
) -> MatchState:
    return MatchState(
        match_id=match_id or uuid.uuid4().hex,
        team_a=Team(team_id=TEAM_A_ID, name=team_a_name),
        team_b=Team(team_id=TEAM_B_ID, name=team_b_name),
    )


def _require_setup(state: MatchState, action: str) -> None:
    if state.is_started:
        raise InvalidTransitionError(f"Cannot {action}: match has already started")


def _get_team(state: MatchState, team_id: str) -> Team:
    team = state.team(team_id)
    if team is None:
        raise InvalidPlayerError(f"Unknown team {team_id!r}")
    return team


def rename_team(state: MatchState, team_id: str, name: str) -> MatchState:
    _require_setup(state, "rename a team")
    return state.with_team(replace(_get_team(state, team_id), name=name))


def add_player(
    state: MatchState,
    team_id: str,
    name: str,
    player_id: Optional[str] = None,
) -> MatchState:
    """Append a player to the end of a squad (squad order is batting order)."""
    _require_setup(state, "add a player")
    team = _get_team(state, team_id)
    player_id = player_id or uuid.uuid4().hex
    if state.team_a.has_player(player_id) or state.team_b.has_player(player_id):
        raise InvalidPlayerError(f"Player id {player_id!r} is already in use")

    team = replace(team, players=team.players + (Player(player_id=player_id, name=name),))
    return state.with_team(team)


def select_batting_team(state: MatchState, team_id: str) -> MatchState:
    _require_setup(state, "choose the batting side")
    _get_team(state, team_id)
    return replace(
        state,
        batting_team_id=team_id,
        bowling_team_id=state.other_team_id(team_id),
        striker_id=None,
        non_striker_id=None,
        bowler_id=None,
    )


def set_toss(
    state: MatchState,
    winner_id: str,
    choice: Union[str, TossChoice],
) -> MatchState:
    """Record the toss and let the winner's choice decide who bats first."""
    choice = TossChoice(choice)
    _get_team(state, winner_id)
    batting_id = winner_id if choice == TossChoice.BAT else state.other_team_id(winner_id)
    state = replace(state, toss_winner_id=winner_id, toss_choice=choice)
    return select_batting_team(state, batting_id)


def _require_sides(state: MatchState) -> tuple[Team, Team]:
    if state.batting_team is None or state.bowling_team is None:
        raise InvalidStateError("Batting and bowling sides have not been chosen")
    return state.batting_team, state.bowling_team


def select_striker(state: MatchState, player_id: str) -> MatchState:
    _require_setup(state, "select the striker")
    batting, _ = _require_sides(state)
    if not batting.has_player(player_id):
        raise InvalidPlayerError(f"Striker {player_id!r} is not in the batting side")
    if player_id == state.non_striker_id:
        raise InvalidPlayerError("Striker and non-striker must be different players")
    return replace(state, striker_id=player_id)


def select_non_striker(state: MatchState, player_id: str) -> MatchState:
    _require_setup(state, "select the non-striker")
    batting, _ = _require_sides(state)
    if not batting.has_player(player_id):
        raise InvalidPlayerError(f"Non-striker {player_id!r} is not in the batting side")
    if player_id == state.striker_id:
        raise InvalidPlayerError("Striker and non-striker must be different players")
    return replace(state, non_striker_id=player_id)


def select_bowler(state: MatchState, player_id: str) -> MatchState:
    _require_setup(state, "select the opening bowler")
    _, bowling = _require_sides(state)
    if not bowling.has_player(player_id):
        raise InvalidPlayerError(f"Bowler {player_id!r} is not in the bowling side")
    return replace(state, bowler_id=player_id)


def start_match(state: MatchState) -> MatchState:
    """Validate the setup and open play."""
    _require_setup(state, "start the match")
    missing = []
    for team in (state.team_a, state.team_b):
        if not team.name:
            missing.append(f"{team.team_id} name")
        if team.squad_size < MIN_SQUAD_SIZE:
            missing.append(f"{team.team_id} needs {MIN_SQUAD_SIZE}+ players")
    if state.batting_team is None or state.bowling_team is None:
        missing.append("batting/bowling sides")
    if state.striker is None:
        missing.append("striker")
    if state.non_striker is None:
        missing.append("non-striker")
    if state.bowler is None:
        missing.append("bowler")
    if missing:
        raise InvalidStateError(f"Match setup is incomplete: {', '.join(missing)}")

    logger.debug("Match %s started: %s batting", state.match_id, state.batting_team.name)
    return replace(state, is_started=True)


# ----------------------------------------------------------------------
# Selection helpers
# ----------------------------------------------------------------------

def available_batsmen(state: MatchState, team: Optional[Team] = None) -> list:
    """Not-out players who are not at the crease, in squad order.

    ``team`` overrides the current batting side, e.g. with
    ``state.pending_batting_team`` while an innings switch is open.
    """
    team = team or state.batting_team
    if team is None:
        return []
    batting_now = ()
    if team.team_id == state.batting_team_id:
        batting_now = (state.striker_id, state.non_striker_id)
    return [
        p for p in team.players
        if not p.is_out and p.player_id not in batting_now
    ]


def available_bowlers(state: MatchState) -> list:
    """Bowling side minus whoever bowled the previous over."""
    team = state.bowling_team
    if team is None:
        return []
    return [p for p in team.players if p.player_id != state.previous_bowler_id]
