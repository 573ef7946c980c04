"""
Exceptions raised by the scoring engine.

Every failure is raised before any state is replaced, so the caller's
current state is always still valid after catching one of these.
"""

from __future__ import annotations


class ScoringError(Exception):
    """Base class for rejected scoring operations."""
    pass


class InvalidStateError(ScoringError):
    """Raised when the striker, non-striker or bowler an operation needs is missing."""
    pass


class InvalidPlayerError(ScoringError):
    """Raised when a player id is unknown, ineligible or duplicates another pick."""
    pass


class InvalidTransitionError(ScoringError):
    """Raised when the match is not in a phase that permits the operation."""
    pass
