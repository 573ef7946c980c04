"""
Scorebook - live cricket scoring engine

Tracks a limited-overs, two-innings cricket match ball by ball: a pure
state-transition engine over an immutable match state, an undo history,
and a small session shell that owns the authoritative state.
"""

__version__ = "0.1.0"
