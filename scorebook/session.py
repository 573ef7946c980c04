"""
Scoring session.

The imperative shell around the pure engine. A session owns the single
authoritative MatchState and its undo history, applies transitions one at
a time, and tells listeners (scoreboards, persistence) about each commit.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from scorebook.config import DismissalType, ExtrasType, ScorerConfig
from scorebook.data.delivery import DeliveryRecord, build_record
from scorebook.state import match_state as engine
from scorebook.state.history import History
from scorebook.state.models import MatchState

logger = logging.getLogger(__name__)

Listener = Callable[[DeliveryRecord, MatchState], None]


class ScoringSession:
    """Holds the current match state and applies transitions atomically.

    A transition either returns a new state, which is then adopted, or
    raises, in which case the current state and history are untouched.
    """

    def __init__(self, state: MatchState, config: Optional[ScorerConfig] = None):
        self.config = config or ScorerConfig()
        self._state = state
        self.history = History(limit=self.config.undo_limit)
        self._listeners: list[Listener] = []

    @property
    def state(self) -> MatchState:
        return self._state

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def apply(self, op: Callable, *args, record_details: Optional[dict] = None, **kwargs) -> MatchState:
        """Run ``op(state, *args, **kwargs)`` and commit the result.

        Listeners see the new state before it is adopted; if one raises,
        nothing is committed and the error propagates as a rejection.
        """
        before = self._state
        after = op(before, *args, **kwargs)

        record = build_record(op.__name__, before, after, **(record_details or {}))
        self._notify(record, after)

        if engine.is_undoable(op):
            self.history.push(before)
        self._state = after
        logger.info(
            "%s -> %s/%d (%s ov)",
            op.__name__,
            after.batting_team.total_runs if after.batting_team else 0,
            after.batting_team.total_wickets if after.batting_team else 0,
            after.overs_str,
        )
        return after

    def _notify(self, record: DeliveryRecord, state: MatchState) -> None:
        for listener in self._listeners:
            try:
                listener(record, state)
            except Exception:
                logger.exception("Listener failed on %s at %s", record.action, record.over_ball_str)
                raise

    def undo(self) -> bool:
        """Restore the state before the last undoable transition."""
        previous = self.history.undo()
        if previous is None:
            return False
        self._state = previous
        logger.info("Last action undone (%s ov)", previous.overs_str)
        return True

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    def score_runs(self, runs: int) -> MatchState:
        return self.apply(engine.score_runs, runs, record_details={"runs": runs})

    def record_wide(self) -> MatchState:
        return self.apply(
            engine.record_extra,
            ExtrasType.WIDE,
            record_details={"extras_type": ExtrasType.WIDE},
        )

    def record_wicket(
        self,
        dismissal: Union[str, DismissalType],
        incoming_batsman_id: Optional[str],
        fielder_id: Optional[str] = None,
    ) -> MatchState:
        return self.apply(
            engine.record_wicket,
            dismissal,
            incoming_batsman_id,
            fielder_id,
            record_details={"wicket_type": DismissalType(dismissal), "fielder": fielder_id},
        )

    def switch_strike(self) -> MatchState:
        return self.apply(engine.switch_strike)

    def start_new_over(self, bowler_id: str) -> MatchState:
        return self.apply(engine.start_new_over, bowler_id)

    def request_innings_switch(self) -> MatchState:
        return self.apply(
            engine.request_innings_switch,
            enforce_end=self.config.enforce_innings_end,
            overs_limit=self.config.overs_limit,
        )

    def cancel_innings_switch(self) -> MatchState:
        return self.apply(engine.cancel_innings_switch)

    def switch_innings(self, striker_id: str, non_striker_id: str, bowler_id: str) -> MatchState:
        return self.apply(engine.switch_innings, striker_id, non_striker_id, bowler_id)

    def complete_match(self) -> MatchState:
        return self.apply(engine.complete_match)

    # ------------------------------------------------------------------
    # Completion checks (caller policy layered on the engine's state)
    # ------------------------------------------------------------------

    def innings_over(self) -> bool:
        return self._state.innings_can_end or self._state.overs_exhausted(self.config.overs_limit)

    def chase_decided(self) -> bool:
        """True once the second innings has reached the target or ended."""
        state = self._state
        if state.target is None:
            return False
        return state.runs_required == 0 or self.innings_over()
