"""
Delivery record data model.

One DeliveryRecord is produced for every committed scoring transition. It
is what persistence and display collaborators receive; the engine itself
never sees these.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from scorebook.config import DismissalType, ExtrasType
from scorebook.state.models import MatchState


@dataclass
class DeliveryRecord:
    """A single committed action in a match."""

    match_id: str
    action: str  # transition name, e.g. "score_runs"
    innings: int
    over: int  # over counter after the action
    ball: int  # ball counter after the action (0-5)
    batting_team: str
    bowling_team: str
    striker: Optional[str]
    non_striker: Optional[str]
    bowler: Optional[str]

    runs_off_bat: int = 0
    extras: int = 0
    extras_type: Optional[ExtrasType] = None

    is_wicket: bool = False
    wicket_type: Optional[DismissalType] = None
    player_dismissed: Optional[str] = None
    fielder: Optional[str] = None

    # Cumulative batting side state after this action
    cumulative_score: int = 0
    cumulative_wickets: int = 0

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def over_ball_str(self) -> str:
        """Human-readable over.ball string, e.g. '5.3'."""
        return f"{self.over}.{self.ball}"

    @property
    def is_legal_delivery(self) -> bool:
        return self.action in ("score_runs", "record_wicket")

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable dict."""
        d = asdict(self)
        d["extras_type"] = self.extras_type.value if self.extras_type else None
        d["wicket_type"] = self.wicket_type.value if self.wicket_type else None
        d["timestamp"] = self.timestamp.isoformat()
        return d


def build_record(
    action: str,
    before: MatchState,
    after: MatchState,
    runs: int = 0,
    extras_type: Optional[ExtrasType] = None,
    wicket_type: Optional[DismissalType] = None,
    fielder: Optional[str] = None,
) -> DeliveryRecord:
    """Describe the change from ``before`` to ``after``.

    Actors are taken from ``before``: they are who was on the field when
    the ball was bowled.
    """
    batting = after.batting_team
    return DeliveryRecord(
        match_id=after.match_id,
        action=action,
        innings=after.current_innings,
        over=after.current_over,
        ball=after.current_ball,
        batting_team=after.batting_team_id or "",
        bowling_team=after.bowling_team_id or "",
        striker=before.striker_id,
        non_striker=before.non_striker_id,
        bowler=before.bowler_id,
        runs_off_bat=runs,
        extras=1 if extras_type is not None else 0,
        extras_type=extras_type,
        is_wicket=wicket_type is not None,
        wicket_type=wicket_type,
        player_dismissed=before.striker_id if wicket_type is not None else None,
        fielder=fielder,
        cumulative_score=batting.total_runs if batting else 0,
        cumulative_wickets=batting.total_wickets if batting else 0,
    )
