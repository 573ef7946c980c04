"""
Match State Engine.

Pure transitions over an immutable MatchState. Each operation validates its
preconditions against the incoming state, raises a ScoringError subclass if
any fails, and otherwise returns a brand new MatchState. Nothing here does
I/O or keeps state between calls.

Every transition is tagged with ``undoable`` so callers can decide whether
to snapshot the previous state without knowing the operation.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Union

from scorebook.config import (
    BALLS_PER_OVER,
    BOWLER_CREDITED_DISMISSALS,
    DismissalType,
    ExtrasType,
    InningsPhase,
)
from scorebook.errors import (
    InvalidPlayerError,
    InvalidStateError,
    InvalidTransitionError,
)
from scorebook.state.models import MatchState, Team
from scorebook.state.stats import refresh_batter, refresh_bowler, refresh_team

logger = logging.getLogger(__name__)


def transition(undoable: bool) -> Callable:
    """Mark a function as a match transition with an undo policy."""

    def decorator(func: Callable) -> Callable:
        func.undoable = undoable
        return func

    return decorator


def is_undoable(op: Callable) -> bool:
    return bool(getattr(op, "undoable", False))


# ----------------------------------------------------------------------
# Precondition checks
# ----------------------------------------------------------------------

def _require_in_play(state: MatchState, action: str) -> None:
    if not state.is_started:
        raise InvalidTransitionError(f"Cannot {action}: match has not started")
    if state.is_completed:
        raise InvalidTransitionError(f"Cannot {action}: match is completed")
    if state.innings_phase == InningsPhase.SWITCH_PENDING:
        raise InvalidTransitionError(f"Cannot {action}: innings switch is pending")


def _require_actors(
    state: MatchState,
    action: str,
    striker: bool = False,
    non_striker: bool = False,
    bowler: bool = False,
) -> None:
    missing = []
    if striker and state.striker is None:
        missing.append("striker")
    if non_striker and state.non_striker is None:
        missing.append("non-striker")
    if bowler and state.bowler is None:
        missing.append("bowler")
    if missing:
        raise InvalidStateError(f"Cannot {action}: no {', '.join(missing)} selected")


def _eligible_batter(team: Team, player_id: Optional[str], role: str) -> None:
    player = team.get_player(player_id)
    if player is None:
        raise InvalidPlayerError(f"{role} {player_id!r} is not in {team.name or team.team_id}")
    if player.is_out:
        raise InvalidPlayerError(f"{role} {player.name or player_id} is already out")


# ----------------------------------------------------------------------
# Shared mechanics
# ----------------------------------------------------------------------

def _swap_ends(state: MatchState) -> MatchState:
    return replace(state, striker_id=state.non_striker_id, non_striker_id=state.striker_id)


def _advance_ball(state: MatchState) -> tuple[MatchState, bool]:
    """Count one legal delivery by the current bowler.

    On the sixth ball the counter rolls over, the bowler is credited with
    the over (and a maiden if it cost nothing) and stood down until
    start_new_over names the next bowler. Returns (state, over_completed).
    """
    bowler_id = state.bowler_id
    bowling = state.bowling_team
    bowler = bowling.get_player(bowler_id)

    ball = state.current_ball + 1
    over = state.current_over
    over_completed = ball >= BALLS_PER_OVER
    if over_completed:
        ball = 0
        over += 1
        bowler = replace(
            bowler,
            overs=bowler.overs + 1,
            maidens=bowler.maidens + (1 if state.runs_this_over == 0 else 0),
        )

    bowling = bowling.with_player(refresh_bowler(bowler, ball))
    batting = refresh_team(replace(state.batting_team, overs=over, balls=ball))

    next_state = replace(
        state.with_team(batting).with_team(bowling),
        current_over=over,
        current_ball=ball,
    )
    if over_completed:
        next_state = replace(
            next_state,
            bowler_id=None,
            previous_bowler_id=bowler_id,
            runs_this_over=0,
        )
        logger.debug("Over %d completed by %s", over, bowler.name or bowler_id)
    return next_state, over_completed


# ----------------------------------------------------------------------
# Scoring transitions
# ----------------------------------------------------------------------

@transition(undoable=True)
def score_runs(state: MatchState, runs: int) -> MatchState:
    """Record a legal delivery off which the striker scored ``runs``."""
    if isinstance(runs, bool) or not isinstance(runs, int) or runs < 0:
        raise ValueError(f"runs must be a non-negative integer, got {runs!r}")
    _require_in_play(state, "score runs")
    _require_actors(state, "score runs", striker=True, non_striker=True, bowler=True)

    striker = state.striker
    striker = refresh_batter(replace(
        striker,
        runs=striker.runs + runs,
        balls_faced=striker.balls_faced + 1,
        fours=striker.fours + (1 if runs == 4 else 0),
        sixes=striker.sixes + (1 if runs == 6 else 0),
    ))
    batting = state.batting_team.with_player(striker)
    batting = replace(batting, total_runs=batting.total_runs + runs)

    bowler = state.bowler
    bowling = state.bowling_team.with_player(
        replace(bowler, runs_conceded=bowler.runs_conceded + runs)
    )

    next_state = replace(
        state.with_team(batting).with_team(bowling),
        runs_this_over=state.runs_this_over + runs,
    )
    next_state, over_completed = _advance_ball(next_state)

    # End-of-over rotation takes precedence over running-runs rotation
    if over_completed or runs % 2 == 1:
        next_state = _swap_ends(next_state)

    logger.debug("%s scored %d off %s", striker.name, runs, bowler.name)
    return next_state


@transition(undoable=True)
def record_extra(state: MatchState, kind: Union[str, ExtrasType] = ExtrasType.WIDE) -> MatchState:
    """Record a wide: one run to the batting side and the bowler, no ball counted."""
    ExtrasType(kind)  # raises ValueError for anything but a wide
    _require_in_play(state, "record an extra")
    _require_actors(state, "record an extra", bowler=True)

    bowler = state.bowler
    bowler = refresh_bowler(
        replace(bowler, runs_conceded=bowler.runs_conceded + 1),
        state.current_ball,
    )
    batting = state.batting_team
    batting = refresh_team(replace(batting, total_runs=batting.total_runs + 1))

    return replace(
        state.with_team(batting).with_team(state.bowling_team.with_player(bowler)),
        runs_this_over=state.runs_this_over + 1,
    )


@transition(undoable=True)
def record_wicket(
    state: MatchState,
    dismissal: Union[str, DismissalType],
    incoming_batsman_id: Optional[str],
    fielder_id: Optional[str] = None,
) -> MatchState:
    """Dismiss the striker and bring ``incoming_batsman_id`` in at the striker's end.

    The dismissing delivery counts as a ball faced and a legal ball bowled.
    ``incoming_batsman_id`` may only be None when the wicket leaves the
    batting side all out.
    """
    kind = DismissalType(dismissal)
    if kind == DismissalType.NOT_OUT:
        raise ValueError("A wicket needs a dismissal kind other than 'Not Out'")
    _require_in_play(state, "record a wicket")
    _require_actors(state, "record a wicket", striker=True, bowler=True)

    batting = state.batting_team
    bowling = state.bowling_team
    wickets = batting.total_wickets + 1
    all_out = batting.squad_size >= 2 and wickets >= batting.all_out_wickets

    if incoming_batsman_id is None:
        if not all_out:
            raise InvalidPlayerError("An incoming batsman is required")
    else:
        _eligible_batter(batting, incoming_batsman_id, "Incoming batsman")
        if incoming_batsman_id in (state.striker_id, state.non_striker_id):
            raise InvalidPlayerError(f"Incoming batsman {incoming_batsman_id!r} is already batting")
    if fielder_id is not None and not bowling.has_player(fielder_id):
        raise InvalidPlayerError(f"Fielder {fielder_id!r} is not in {bowling.name or bowling.team_id}")

    striker = state.striker
    striker = refresh_batter(replace(
        striker,
        is_out=True,
        dismissal=kind,
        dismissed_by=fielder_id,
        balls_faced=striker.balls_faced + 1,
    ))
    batting = replace(batting.with_player(striker), total_wickets=wickets)

    if kind in BOWLER_CREDITED_DISMISSALS:
        bowler = state.bowler
        bowling = bowling.with_player(replace(bowler, wickets=bowler.wickets + 1))

    next_state = replace(
        state.with_team(batting).with_team(bowling),
        striker_id=incoming_batsman_id,
    )
    next_state, _ = _advance_ball(next_state)

    logger.debug(
        "%s out (%s), %d down", striker.name, kind.value, wickets,
    )
    return next_state


# ----------------------------------------------------------------------
# Structural transitions
# ----------------------------------------------------------------------

@transition(undoable=False)
def switch_strike(state: MatchState) -> MatchState:
    _require_actors(state, "switch strike", striker=True, non_striker=True)
    return _swap_ends(state)


@transition(undoable=False)
def start_new_over(state: MatchState, new_bowler_id: Optional[str]) -> MatchState:
    """Name the bowler for the over that follows a completed one.

    The ball counter, over counter and change of ends have already rolled
    over when the sixth legal ball was recorded.
    """
    if not new_bowler_id:
        raise InvalidStateError("Cannot start a new over: no bowler supplied")
    _require_in_play(state, "start a new over")
    if state.bowler_id is not None or state.current_ball != 0 or state.current_over == 0:
        raise InvalidTransitionError(
            f"Cannot start a new over: {state.current_ball} of {BALLS_PER_OVER} "
            f"legal deliveries bowled in over {state.current_over + 1}"
        )

    bowling = state.bowling_team
    if not bowling.has_player(new_bowler_id):
        raise InvalidPlayerError(f"Bowler {new_bowler_id!r} is not in {bowling.name or bowling.team_id}")
    if new_bowler_id == state.previous_bowler_id:
        raise InvalidPlayerError("A bowler cannot bowl consecutive overs")

    return replace(state, bowler_id=new_bowler_id)


@transition(undoable=False)
def request_innings_switch(
    state: MatchState,
    enforce_end: bool = False,
    overs_limit: Optional[int] = None,
) -> MatchState:
    """Open the innings switch; the first innings stays authoritative until committed."""
    if not state.is_started or state.is_completed:
        raise InvalidTransitionError("Cannot switch innings: match is not in play")
    if state.innings_phase != InningsPhase.FIRST_INNINGS:
        raise InvalidTransitionError(
            f"Cannot switch innings from {state.innings_phase.value}"
        )
    if enforce_end and not (state.innings_can_end or state.overs_exhausted(overs_limit)):
        raise InvalidTransitionError(
            "Cannot switch innings: batting side is not all out and overs remain"
        )
    return replace(state, innings_phase=InningsPhase.SWITCH_PENDING)


@transition(undoable=False)
def cancel_innings_switch(state: MatchState) -> MatchState:
    if state.innings_phase != InningsPhase.SWITCH_PENDING:
        raise InvalidTransitionError("No innings switch is pending")
    return replace(state, innings_phase=InningsPhase.FIRST_INNINGS)


@transition(undoable=False)
def switch_innings(
    state: MatchState,
    striker_id: str,
    non_striker_id: str,
    bowler_id: str,
) -> MatchState:
    """Commit a pending innings switch with the second innings' openers and bowler."""
    if state.innings_phase != InningsPhase.SWITCH_PENDING:
        raise InvalidTransitionError("Cannot commit innings switch: none is pending")

    new_batting = state.bowling_team
    new_bowling = state.batting_team
    if striker_id == non_striker_id:
        raise InvalidPlayerError("Striker and non-striker must be different players")
    _eligible_batter(new_batting, striker_id, "Striker")
    _eligible_batter(new_batting, non_striker_id, "Non-striker")
    if not new_bowling.has_player(bowler_id):
        raise InvalidPlayerError(f"Bowler {bowler_id!r} is not in {new_bowling.name or new_bowling.team_id}")

    logger.debug("Second innings: %s batting", new_batting.name)
    return replace(
        state,
        batting_team_id=new_batting.team_id,
        bowling_team_id=new_bowling.team_id,
        striker_id=striker_id,
        non_striker_id=non_striker_id,
        bowler_id=bowler_id,
        previous_bowler_id=None,
        current_over=0,
        current_ball=0,
        runs_this_over=0,
        innings_phase=InningsPhase.SECOND_INNINGS,
    )


@transition(undoable=False)
def complete_match(state: MatchState) -> MatchState:
    if not state.is_started:
        raise InvalidTransitionError("Cannot complete a match that has not started")
    if state.is_completed:
        raise InvalidTransitionError("Match is already completed")
    return replace(state, is_completed=True)
