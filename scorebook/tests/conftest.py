"""Shared test fixtures for scoring engine tests."""

from __future__ import annotations

from typing import Callable

import pytest

from scorebook.config import ScorerConfig, TossChoice
from scorebook.state.models import TEAM_A_ID, TEAM_B_ID, MatchState
from scorebook.state.setup import (
    add_player,
    new_match,
    select_bowler,
    select_non_striker,
    select_striker,
    set_toss,
    start_match,
)


def build_match(squad_size: int = 5) -> MatchState:
    """Started match: Thunder (a1..aN) batting, Strikers (b1..bN) bowling.

    a1 on strike, a2 at the other end, b1 bowling the first over.
    """
    state = new_match("Thunder", "Strikers", match_id="test_001")
    for i in range(1, squad_size + 1):
        state = add_player(state, TEAM_A_ID, f"Thunder_{i}", f"a{i}")
        state = add_player(state, TEAM_B_ID, f"Strikers_{i}", f"b{i}")
    state = set_toss(state, TEAM_A_ID, TossChoice.BAT)
    state = select_striker(state, "a1")
    state = select_non_striker(state, "a2")
    state = select_bowler(state, "b1")
    return start_match(state)


@pytest.fixture
def scorer_config() -> ScorerConfig:
    """Standard test configuration."""
    return ScorerConfig(overs_limit=2, enforce_innings_end=False, undo_limit=None)


@pytest.fixture
def match_factory() -> Callable[..., MatchState]:
    return build_match


@pytest.fixture
def match_state() -> MatchState:
    return build_match()
