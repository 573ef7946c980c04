"""
Configuration management for the scoring engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


BALLS_PER_OVER = 6


class DismissalType(Enum):
    BOWLED = "Bowled"
    CAUGHT = "Caught"
    LBW = "LBW"
    RUN_OUT = "Run Out"
    STUMPED = "Stumped"
    HIT_WICKET = "Hit Wicket"
    RETIRED_HURT = "Retired Hurt"
    NOT_OUT = "Not Out"


class ExtrasType(Enum):
    WIDE = "wide"


class TossChoice(Enum):
    BAT = "bat"
    BOWL = "bowl"


class InningsPhase(Enum):
    FIRST_INNINGS = "first_innings"
    SWITCH_PENDING = "switch_pending"
    SECOND_INNINGS = "second_innings"


# Dismissals that count towards the bowler's wicket tally
BOWLER_CREDITED_DISMISSALS: frozenset[DismissalType] = frozenset({
    DismissalType.BOWLED,
    DismissalType.LBW,
    DismissalType.CAUGHT,
    DismissalType.STUMPED,
})


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass(frozen=True)
class ScorerConfig:
    """Scorer configuration."""
    overs_limit: Optional[int] = None  # None = no over limit checked
    enforce_innings_end: bool = False  # Refuse innings switch until all out / overs done
    undo_limit: Optional[int] = None  # None = unbounded history
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.undo_limit is not None and self.undo_limit < 1:
            raise ValueError(f"undo_limit must be at least 1, got {self.undo_limit}")
        if self.overs_limit is not None and self.overs_limit < 1:
            raise ValueError(f"overs_limit must be at least 1, got {self.overs_limit}")

    @classmethod
    def from_env(cls) -> "ScorerConfig":
        """Load configuration from environment variables."""
        return cls(
            overs_limit=_optional_int(os.getenv("SCOREBOOK_OVERS_LIMIT")),
            enforce_innings_end=os.getenv("SCOREBOOK_ENFORCE_INNINGS_END", "").lower() == "true",
            undo_limit=_optional_int(os.getenv("SCOREBOOK_UNDO_LIMIT")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
