"""
Match state data model.

Players, teams and the match itself are frozen dataclasses. Every scoring
transition builds replacements with ``dataclasses.replace``; nothing is
ever updated in place, so any held reference is a stable snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from scorebook.config import (
    BALLS_PER_OVER,
    DismissalType,
    InningsPhase,
    TossChoice,
)

TEAM_A_ID = "team-a"
TEAM_B_ID = "team-b"


@dataclass(frozen=True)
class Player:
    """A squad member with cumulative batting and bowling figures."""

    player_id: str
    name: str

    # Batting
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    strike_rate: float = 0.0
    is_out: bool = False
    dismissal: DismissalType = DismissalType.NOT_OUT
    dismissed_by: Optional[str] = None  # fielder player_id

    # Bowling
    overs: int = 0  # completed overs
    runs_conceded: int = 0
    wickets: int = 0
    maidens: int = 0
    economy_rate: float = 0.0


@dataclass(frozen=True)
class Team:
    """A side: squad in batting order plus innings totals."""

    team_id: str
    name: str = ""
    players: tuple[Player, ...] = ()
    total_runs: int = 0
    total_wickets: int = 0
    overs: int = 0
    balls: int = 0
    run_rate: float = 0.0

    @property
    def squad_size(self) -> int:
        return len(self.players)

    @property
    def all_out_wickets(self) -> int:
        """Wickets at which no batting pair remains."""
        return max(0, self.squad_size - 1)

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def has_player(self, player_id: Optional[str]) -> bool:
        return self.get_player(player_id) is not None

    def with_player(self, player: Player) -> "Team":
        """Return a copy with ``player`` substituted by id, keeping squad order."""
        players = tuple(
            player if p.player_id == player.player_id else p for p in self.players
        )
        return replace(self, players=players)


@dataclass(frozen=True)
class MatchState:
    """Complete match state between two deliveries.

    Striker, non-striker and bowler are held as ids into the batting and
    bowling squads, so the squads remain the single source of player figures.
    """

    match_id: str
    team_a: Team
    team_b: Team
    batting_team_id: Optional[str] = None
    bowling_team_id: Optional[str] = None
    toss_winner_id: Optional[str] = None
    toss_choice: Optional[TossChoice] = None

    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    bowler_id: Optional[str] = None
    previous_bowler_id: Optional[str] = None  # bowled the last completed over

    current_over: int = 0
    current_ball: int = 0  # legal deliveries in the over in progress, 0-5
    runs_this_over: int = 0
    innings_phase: InningsPhase = InningsPhase.FIRST_INNINGS

    is_started: bool = False
    is_completed: bool = False

    # ------------------------------------------------------------------
    # Team lookups
    # ------------------------------------------------------------------

    def team(self, team_id: Optional[str]) -> Optional[Team]:
        if team_id == self.team_a.team_id:
            return self.team_a
        if team_id == self.team_b.team_id:
            return self.team_b
        return None

    def other_team_id(self, team_id: str) -> str:
        return self.team_b.team_id if team_id == self.team_a.team_id else self.team_a.team_id

    def with_team(self, team: Team) -> "MatchState":
        if team.team_id == self.team_a.team_id:
            return replace(self, team_a=team)
        return replace(self, team_b=team)

    @property
    def batting_team(self) -> Optional[Team]:
        return self.team(self.batting_team_id)

    @property
    def bowling_team(self) -> Optional[Team]:
        return self.team(self.bowling_team_id)

    @property
    def pending_batting_team(self) -> Optional[Team]:
        """Side that will bat once a pending innings switch is committed."""
        if self.innings_phase != InningsPhase.SWITCH_PENDING:
            return None
        return self.bowling_team

    @property
    def pending_bowling_team(self) -> Optional[Team]:
        if self.innings_phase != InningsPhase.SWITCH_PENDING:
            return None
        return self.batting_team

    # ------------------------------------------------------------------
    # Actors
    # ------------------------------------------------------------------

    @property
    def striker(self) -> Optional[Player]:
        team = self.batting_team
        return team.get_player(self.striker_id) if team else None

    @property
    def non_striker(self) -> Optional[Player]:
        team = self.batting_team
        return team.get_player(self.non_striker_id) if team else None

    @property
    def bowler(self) -> Optional[Player]:
        team = self.bowling_team
        return team.get_player(self.bowler_id) if team else None

    # ------------------------------------------------------------------
    # Derived match situation
    # ------------------------------------------------------------------

    @property
    def current_innings(self) -> int:
        return 2 if self.innings_phase == InningsPhase.SECOND_INNINGS else 1

    @property
    def legal_balls(self) -> int:
        return self.current_over * BALLS_PER_OVER + self.current_ball

    @property
    def overs_str(self) -> str:
        """Overs in ``<overs>.<ball>`` notation, e.g. '5.3'."""
        return f"{self.current_over}.{self.current_ball}"

    @property
    def innings_can_end(self) -> bool:
        """True once the batting side has lost all but one batter."""
        team = self.batting_team
        if team is None or team.squad_size < 2:
            return False
        return team.total_wickets >= team.all_out_wickets

    def overs_exhausted(self, overs_limit: Optional[int]) -> bool:
        if overs_limit is None:
            return False
        return self.legal_balls >= overs_limit * BALLS_PER_OVER

    @property
    def target(self) -> Optional[int]:
        if self.innings_phase != InningsPhase.SECOND_INNINGS:
            return None
        bowling = self.bowling_team
        return bowling.total_runs + 1 if bowling else None

    @property
    def runs_required(self) -> Optional[int]:
        target = self.target
        batting = self.batting_team
        if target is None or batting is None:
            return None
        return max(0, target - batting.total_runs)
