"""Tests for the Match State Engine."""

from __future__ import annotations

from dataclasses import replace

import pytest

from scorebook.config import DismissalType, ExtrasType, InningsPhase
from scorebook.errors import (
    InvalidPlayerError,
    InvalidStateError,
    InvalidTransitionError,
)
from scorebook.state.match_state import (
    cancel_innings_switch,
    complete_match,
    is_undoable,
    record_extra,
    record_wicket,
    request_innings_switch,
    score_runs,
    start_new_over,
    switch_innings,
    switch_strike,
)
from scorebook.state.models import TEAM_A_ID, TEAM_B_ID, MatchState


def set_player(state: MatchState, team_id: str, player_id: str, **changes) -> MatchState:
    team = state.team(team_id)
    return state.with_team(team.with_player(replace(team.get_player(player_id), **changes)))


def bowler_figures(state: MatchState, player_id: str = "b1"):
    return state.team(TEAM_B_ID).get_player(player_id)


def complete_over(state: MatchState, runs: int = 0) -> MatchState:
    for _ in range(6 - state.current_ball):
        state = score_runs(state, runs)
    return state


@pytest.fixture
def mid_over_state(match_state: MatchState) -> MatchState:
    """a1 on 10 (5), b1 has 2-0-20-0 and is 3 balls into his third over."""
    state = set_player(match_state, TEAM_A_ID, "a1", runs=10, balls_faced=5)
    state = set_player(state, TEAM_B_ID, "b1", overs=2, runs_conceded=20)
    return replace(state, current_over=2, current_ball=3)


class TestScoreRuns:
    def test_boundary_mid_over(self, mid_over_state: MatchState):
        state = score_runs(mid_over_state, 4)

        striker = state.team(TEAM_A_ID).get_player("a1")
        assert striker.runs == 14
        assert striker.balls_faced == 6
        assert striker.fours == 1
        assert striker.strike_rate == pytest.approx(233.33)
        assert state.current_ball == 4
        assert state.current_over == 2
        assert state.bowler.runs_conceded == 24
        assert state.bowler.economy_rate == pytest.approx(9.0)
        assert state.striker_id == "a1"
        assert state.non_striker_id == "a2"

    def test_last_ball_of_over_rotates_strike(self, mid_over_state: MatchState):
        state = replace(mid_over_state, current_ball=5)
        state = score_runs(state, 1)

        assert state.current_ball == 0
        assert state.current_over == 3
        assert bowler_figures(state).overs == 3
        assert bowler_figures(state).economy_rate == pytest.approx(7.0)
        # Over completion swaps ends once; the odd run does not swap again
        assert state.striker_id == "a2"
        assert state.non_striker_id == "a1"

    @pytest.mark.parametrize("runs", [0, 1, 2, 3, 4, 5, 6])
    def test_totals_increase_by_runs(self, match_state: MatchState, runs: int):
        state = score_runs(match_state, runs)
        assert state.batting_team.total_runs == runs
        assert state.bowler.runs_conceded == runs

    @pytest.mark.parametrize("runs", [1, 3, 5])
    def test_odd_runs_rotate_strike(self, match_state: MatchState, runs: int):
        state = score_runs(match_state, runs)
        assert (state.striker_id, state.non_striker_id) == ("a2", "a1")

    @pytest.mark.parametrize("runs", [0, 2, 4, 6])
    def test_even_runs_keep_strike(self, match_state: MatchState, runs: int):
        state = score_runs(match_state, runs)
        assert (state.striker_id, state.non_striker_id) == ("a1", "a2")

    def test_six_counted(self, match_state: MatchState):
        state = score_runs(match_state, 6)
        assert state.team(TEAM_A_ID).get_player("a1").sixes == 1
        assert state.team(TEAM_A_ID).get_player("a1").fours == 0

    def test_six_deliveries_complete_an_over(self, match_state: MatchState):
        state = match_state
        for runs in (1, 4, 0, 3, 2, 6):
            state = score_runs(state, runs)

        assert state.current_ball == 0
        assert state.current_over == 1
        assert state.bowler_id is None
        assert state.previous_bowler_id == "b1"
        assert bowler_figures(state).overs == 1

    def test_mixed_runs_and_wickets_complete_an_over(self, match_state: MatchState):
        state = score_runs(match_state, 1)
        state = record_wicket(state, DismissalType.BOWLED, "a3")
        state = score_runs(state, 2)
        state = record_wicket(state, DismissalType.CAUGHT, "a4", "b2")
        state = score_runs(state, 0)
        state = score_runs(state, 4)

        assert state.current_ball == 0
        assert state.current_over == 1

    def test_run_rate_recomputed(self, match_state: MatchState):
        state = complete_over(match_state, runs=2)
        assert state.batting_team.run_rate == pytest.approx(12.0)
        assert state.batting_team.overs == 1
        assert state.batting_team.balls == 0

    def test_maiden_credited_for_dot_over(self, match_state: MatchState):
        state = complete_over(match_state)
        assert bowler_figures(state).maidens == 1

    def test_no_maiden_when_over_concedes(self, match_state: MatchState):
        state = score_runs(match_state, 0)
        state = record_extra(state)
        state = complete_over(state)
        assert bowler_figures(state).maidens == 0

    def test_requires_bowler(self, match_state: MatchState):
        state = complete_over(match_state)
        with pytest.raises(InvalidStateError):
            score_runs(state, 1)

    def test_requires_non_striker(self, match_state: MatchState):
        state = replace(match_state, non_striker_id=None)
        with pytest.raises(InvalidStateError):
            score_runs(state, 1)

    def test_rejects_negative_runs(self, match_state: MatchState):
        with pytest.raises(ValueError):
            score_runs(match_state, -1)

    def test_rejects_before_start(self, match_state: MatchState):
        with pytest.raises(InvalidTransitionError):
            score_runs(replace(match_state, is_started=False), 1)

    def test_rejects_after_completion(self, match_state: MatchState):
        with pytest.raises(InvalidTransitionError):
            score_runs(complete_match(match_state), 1)

    def test_input_state_untouched(self, match_state: MatchState):
        before = match_state
        score_runs(match_state, 4)
        assert match_state == before
        assert match_state.batting_team.total_runs == 0


class TestRecordExtra:
    def test_wide(self, mid_over_state: MatchState):
        state = record_extra(mid_over_state, "wide")

        assert state.current_ball == 3
        assert state.current_over == 2
        assert state.batting_team.total_runs == 1
        assert state.bowler.runs_conceded == 21
        assert state.bowler.economy_rate == pytest.approx(round(21 / 2.5, 2))
        assert state.striker_id == "a1"
        assert state.team(TEAM_A_ID).get_player("a1").balls_faced == 5

    def test_accepts_enum(self, match_state: MatchState):
        state = record_extra(match_state, ExtrasType.WIDE)
        assert state.batting_team.total_runs == 1

    def test_rejects_unknown_extra(self, match_state: MatchState):
        with pytest.raises(ValueError):
            record_extra(match_state, "no_ball")

    def test_requires_bowler(self, match_state: MatchState):
        with pytest.raises(InvalidStateError):
            record_extra(replace(match_state, bowler_id=None))


class TestRecordWicket:
    def test_bowled(self, match_state: MatchState):
        state = record_wicket(match_state, DismissalType.BOWLED, "a3")

        out = state.team(TEAM_A_ID).get_player("a1")
        assert state.striker_id == "a3"
        assert state.non_striker_id == "a2"
        assert out.is_out
        assert out.dismissal == DismissalType.BOWLED
        assert out.balls_faced == 1
        assert state.bowler.wickets == 1
        assert state.batting_team.total_wickets == 1
        assert state.current_ball == 1

    def test_run_out_not_credited_to_bowler(self, match_state: MatchState):
        state = record_wicket(match_state, "Run Out", "a3", fielder_id="b4")

        out = state.team(TEAM_A_ID).get_player("a1")
        assert out.dismissal == DismissalType.RUN_OUT
        assert out.dismissed_by == "b4"
        assert state.bowler.wickets == 0
        assert state.batting_team.total_wickets == 1

    def test_incoming_already_out(self, match_state: MatchState):
        state = record_wicket(match_state, DismissalType.BOWLED, "a3")
        with pytest.raises(InvalidPlayerError):
            record_wicket(state, DismissalType.LBW, "a1")
        assert state.batting_team.total_wickets == 1

    def test_incoming_already_batting(self, match_state: MatchState):
        with pytest.raises(InvalidPlayerError):
            record_wicket(match_state, DismissalType.BOWLED, "a2")

    def test_incoming_unknown(self, match_state: MatchState):
        with pytest.raises(InvalidPlayerError):
            record_wicket(match_state, DismissalType.BOWLED, "b3")

    def test_fielder_must_be_fielding(self, match_state: MatchState):
        with pytest.raises(InvalidPlayerError):
            record_wicket(match_state, DismissalType.CAUGHT, "a3", fielder_id="a4")

    def test_not_out_is_not_a_dismissal(self, match_state: MatchState):
        with pytest.raises(ValueError):
            record_wicket(match_state, DismissalType.NOT_OUT, "a3")

    def test_wicket_on_last_ball_keeps_new_batsman_on_strike(self, match_state: MatchState):
        state = replace(match_state, current_ball=5)
        state = record_wicket(state, DismissalType.STUMPED, "a3", fielder_id="b2")

        assert state.current_ball == 0
        assert state.current_over == 1
        assert state.striker_id == "a3"
        assert state.non_striker_id == "a2"
        assert bowler_figures(state).overs == 1
        assert bowler_figures(state).wickets == 1

    def test_last_wicket_needs_no_incoming(self, match_factory):
        state = match_factory(3)
        with pytest.raises(InvalidPlayerError):
            record_wicket(state, DismissalType.BOWLED, None)

        state = record_wicket(state, DismissalType.BOWLED, "a3")
        state = record_wicket(state, DismissalType.CAUGHT, None)
        assert state.batting_team.total_wickets == 2
        assert state.striker_id is None
        assert state.innings_can_end


class TestSwitchStrike:
    def test_swaps(self, match_state: MatchState):
        state = switch_strike(match_state)
        assert (state.striker_id, state.non_striker_id) == ("a2", "a1")
        assert replace(state, striker_id="a1", non_striker_id="a2") == match_state

    def test_requires_both(self, match_state: MatchState):
        with pytest.raises(InvalidStateError):
            switch_strike(replace(match_state, striker_id=None))


class TestStartNewOver:
    def test_new_bowler(self, match_state: MatchState):
        state = start_new_over(complete_over(match_state), "b2")
        assert state.bowler_id == "b2"
        assert state.current_over == 1
        assert state.current_ball == 0

    def test_consecutive_overs_rejected(self, match_state: MatchState):
        with pytest.raises(InvalidPlayerError):
            start_new_over(complete_over(match_state), "b1")

    def test_bowler_must_be_fielding(self, match_state: MatchState):
        with pytest.raises(InvalidPlayerError):
            start_new_over(complete_over(match_state), "a3")

    def test_requires_bowler_id(self, match_state: MatchState):
        with pytest.raises(InvalidStateError):
            start_new_over(complete_over(match_state), "")

    def test_mid_over_rejected(self, match_state: MatchState):
        state = score_runs(match_state, 1)
        with pytest.raises(InvalidTransitionError):
            start_new_over(state, "b2")

    def test_first_bowler_may_return_after_a_gap(self, match_state: MatchState):
        state = start_new_over(complete_over(match_state), "b2")
        state = start_new_over(complete_over(state), "b1")
        assert state.bowler_id == "b1"
        assert state.current_over == 2


class TestInningsSwitch:
    def test_request_and_cancel(self, match_state: MatchState):
        state = score_runs(match_state, 4)
        pending = request_innings_switch(state)

        assert pending.innings_phase == InningsPhase.SWITCH_PENDING
        assert pending.current_innings == 1
        assert pending.pending_batting_team.team_id == TEAM_B_ID
        assert pending.pending_bowling_team.team_id == TEAM_A_ID
        assert pending.batting_team.total_runs == 4
        assert cancel_innings_switch(pending) == state

    def test_scoring_refused_while_pending(self, match_state: MatchState):
        pending = request_innings_switch(match_state)
        with pytest.raises(InvalidTransitionError):
            score_runs(pending, 1)

    def test_commit(self, match_state: MatchState):
        state = complete_over(match_state, runs=1)
        state = request_innings_switch(state)
        state = switch_innings(state, "b1", "b2", "a3")

        assert state.innings_phase == InningsPhase.SECOND_INNINGS
        assert state.current_innings == 2
        assert state.batting_team_id == TEAM_B_ID
        assert state.bowling_team_id == TEAM_A_ID
        assert state.current_over == 0
        assert state.current_ball == 0
        assert state.previous_bowler_id is None
        assert (state.striker_id, state.non_striker_id, state.bowler_id) == ("b1", "b2", "a3")
        assert state.target == 7
        assert state.runs_required == 7

    def test_former_batsman_may_bowl(self, match_state: MatchState):
        state = score_runs(match_state, 2)
        state = request_innings_switch(state)
        state = switch_innings(state, "b1", "b2", "a1")
        assert state.bowler.name == "Thunder_1"

    def test_commit_requires_pending(self, match_state: MatchState):
        with pytest.raises(InvalidTransitionError):
            switch_innings(match_state, "b1", "b2", "a3")

    def test_commit_rejects_same_openers(self, match_state: MatchState):
        pending = request_innings_switch(match_state)
        with pytest.raises(InvalidPlayerError):
            switch_innings(pending, "b1", "b1", "a3")

    def test_commit_rejects_wrong_team(self, match_state: MatchState):
        pending = request_innings_switch(match_state)
        with pytest.raises(InvalidPlayerError):
            switch_innings(pending, "a1", "b2", "a3")
        with pytest.raises(InvalidPlayerError):
            switch_innings(pending, "b1", "b2", "b3")

    def test_only_one_switch(self, match_state: MatchState):
        state = switch_innings(request_innings_switch(match_state), "b1", "b2", "a3")
        with pytest.raises(InvalidTransitionError):
            request_innings_switch(state)

    def test_cancel_without_pending(self, match_state: MatchState):
        with pytest.raises(InvalidTransitionError):
            cancel_innings_switch(match_state)

    def test_enforced_end_requires_all_out_or_overs(self, match_state: MatchState):
        with pytest.raises(InvalidTransitionError):
            request_innings_switch(match_state, enforce_end=True, overs_limit=2)

        state = complete_over(match_state)
        state = start_new_over(state, "b2")
        state = complete_over(state)
        pending = request_innings_switch(state, enforce_end=True, overs_limit=2)
        assert pending.innings_phase == InningsPhase.SWITCH_PENDING

    def test_overs_exhausted_counts_legal_balls(self, match_state: MatchState):
        assert not match_state.overs_exhausted(None)
        state = replace(match_state, current_over=1, current_ball=5)
        assert state.legal_balls == 11
        assert not state.overs_exhausted(2)
        assert replace(state, current_over=2, current_ball=0).overs_exhausted(2)

    def test_enforced_end_after_all_out(self, match_factory):
        state = match_factory(2)
        state = record_wicket(state, DismissalType.BOWLED, None)
        pending = request_innings_switch(state, enforce_end=True)
        assert pending.innings_phase == InningsPhase.SWITCH_PENDING


class TestCompleteMatch:
    def test_complete(self, match_state: MatchState):
        assert complete_match(match_state).is_completed

    def test_twice_rejected(self, match_state: MatchState):
        with pytest.raises(InvalidTransitionError):
            complete_match(complete_match(match_state))


class TestUndoPolicy:
    def test_scoring_transitions_are_undoable(self):
        assert is_undoable(score_runs)
        assert is_undoable(record_extra)
        assert is_undoable(record_wicket)

    def test_structural_transitions_are_not(self):
        for op in (
            switch_strike,
            start_new_over,
            request_innings_switch,
            cancel_innings_switch,
            switch_innings,
            complete_match,
        ):
            assert not is_undoable(op)

    def test_plain_function_is_not(self):
        assert not is_undoable(lambda state: state)
