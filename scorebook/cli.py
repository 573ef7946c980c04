"""
Scorebook command-line scorer.

Two modes:
1. Demo: play a seeded synthetic match through a ScoringSession
2. Script: replay a text file of scoring commands, one per line

Usage:
    python -m scorebook.cli --demo --seed 7
    python -m scorebook.cli --script match.txt

Script commands (blank lines and lines starting with '#' are ignored):
    team A|B NAME            player A|B ID NAME      toss A|B bat|bowl
    bat A|B                  striker ID              nonstriker ID
    bowler ID                start
    runs N                   wide                    wicket KIND IN|- [FIELDER]
    swap                     over BOWLER             innings
    cancel                   commit STRIKER NONSTRIKER BOWLER
    undo                     end                     show

KIND is a dismissal with spaces written as '_' or '-', e.g. run_out.
"""

from __future__ import annotations

import argparse
import logging
import random
import shlex
import sys
from pathlib import Path
from typing import Iterable, Optional

from scorebook.config import DismissalType, ScorerConfig
from scorebook.errors import ScoringError
from scorebook.scorecard import render
from scorebook.session import ScoringSession
from scorebook.state import setup
from scorebook.state.models import TEAM_A_ID, TEAM_B_ID, MatchState

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("scorebook.cli")

TEAM_ALIASES = {"A": TEAM_A_ID, "B": TEAM_B_ID}


class ScriptError(Exception):
    """Raised when a script line cannot be applied."""

    def __init__(self, line_no: int, message: str):
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no


def parse_dismissal(text: str) -> DismissalType:
    wanted = text.replace("_", " ").replace("-", " ").lower()
    for kind in DismissalType:
        if kind.value.lower() == wanted:
            return kind
    raise ValueError(f"Unknown dismissal {text!r}")


def _team_id(alias: str) -> str:
    try:
        return TEAM_ALIASES[alias.upper()]
    except KeyError:
        raise ValueError(f"Team must be A or B, got {alias!r}") from None


class ScriptRunner:
    """Applies script commands to a match, first as setup then through a session."""

    def __init__(self, config: ScorerConfig, match_id: Optional[str] = None):
        self.config = config
        self.state: MatchState = setup.new_match(match_id=match_id)
        self.session: Optional[ScoringSession] = None

    @property
    def current(self) -> MatchState:
        return self.session.state if self.session else self.state

    def run(self, lines: Iterable[str]) -> MatchState:
        for line_no, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            try:
                tokens = shlex.split(line)
                self.execute(tokens)
            except IndexError as e:
                raise ScriptError(line_no, f"missing argument for {line.split()[0]!r}") from e
            except (ScoringError, ValueError) as e:
                raise ScriptError(line_no, str(e)) from e
        return self.current

    def _session(self) -> ScoringSession:
        if self.session is None:
            raise ValueError("Match has not started (missing 'start')")
        return self.session

    def execute(self, tokens: list[str]) -> None:
        cmd, args = tokens[0].lower(), tokens[1:]

        # Setup
        if cmd == "team":
            self.state = setup.rename_team(self.state, _team_id(args[0]), " ".join(args[1:]))
        elif cmd == "player":
            self.state = setup.add_player(self.state, _team_id(args[0]), " ".join(args[2:]), args[1])
        elif cmd == "toss":
            self.state = setup.set_toss(self.state, _team_id(args[0]), args[1].lower())
        elif cmd == "bat":
            self.state = setup.select_batting_team(self.state, _team_id(args[0]))
        elif cmd == "striker":
            self.state = setup.select_striker(self.state, args[0])
        elif cmd == "nonstriker":
            self.state = setup.select_non_striker(self.state, args[0])
        elif cmd == "bowler":
            self.state = setup.select_bowler(self.state, args[0])
        elif cmd == "start":
            self.state = setup.start_match(self.state)
            self.session = ScoringSession(self.state, self.config)

        # Play
        elif cmd == "runs":
            self._session().score_runs(int(args[0]))
        elif cmd == "wide":
            self._session().record_wide()
        elif cmd == "wicket":
            incoming = None if args[1] == "-" else args[1]
            fielder = args[2] if len(args) > 2 else None
            self._session().record_wicket(parse_dismissal(args[0]), incoming, fielder)
        elif cmd == "swap":
            self._session().switch_strike()
        elif cmd == "over":
            self._session().start_new_over(args[0])
        elif cmd == "innings":
            self._session().request_innings_switch()
        elif cmd == "cancel":
            self._session().cancel_innings_switch()
        elif cmd == "commit":
            self._session().switch_innings(args[0], args[1], args[2])
        elif cmd == "undo":
            if not self._session().undo():
                logger.warning("Nothing to undo")
        elif cmd == "end":
            self._session().complete_match()
        elif cmd == "show":
            print(render(self.current))
        else:
            raise ValueError(f"Unknown command {cmd!r}")


def run_script(config: ScorerConfig, path: str) -> MatchState:
    logger.info("Replaying %s", path)
    runner = ScriptRunner(config)
    with Path(path).open(encoding="utf-8") as f:
        state = runner.run(f)
    print("\n" + render(state))
    return state


# ----------------------------------------------------------------------
# Demo
# ----------------------------------------------------------------------

def _demo_setup(squad_size: int) -> MatchState:
    state = setup.new_match("Thunder", "Strikers", match_id="demo_001")
    for team_id, prefix in ((TEAM_A_ID, "T"), (TEAM_B_ID, "S")):
        for i in range(1, squad_size + 1):
            state = setup.add_player(state, team_id, f"{prefix}_Player_{i}", f"{prefix.lower()}{i}")
    state = setup.set_toss(state, TEAM_A_ID, "bat")
    state = setup.select_striker(state, "t1")
    state = setup.select_non_striker(state, "t2")
    state = setup.select_bowler(state, f"s{squad_size}")
    return setup.start_match(state)


def _play_innings(session: ScoringSession, rng: random.Random) -> None:
    while not session.innings_over() and not session.chase_decided():
        state = session.state
        if state.bowler_id is None:
            # Rotate through the last four of the bowling side
            candidates = [p.player_id for p in setup.available_bowlers(state)][-4:]
            session.start_new_over(rng.choice(candidates))
            continue

        r = rng.random()
        if r < 0.05:
            session.record_wide()
        elif r < 0.12:
            waiting = setup.available_batsmen(state)
            incoming = waiting[0].player_id if waiting else None
            kind = rng.choice([DismissalType.BOWLED, DismissalType.CAUGHT, DismissalType.RUN_OUT])
            session.record_wicket(kind, incoming)
        else:
            session.score_runs(rng.choice([0, 0, 0, 1, 1, 1, 2, 3, 4, 6]))


def run_demo(config: ScorerConfig, seed: Optional[int] = None, squad_size: int = 11) -> MatchState:
    """Play a short synthetic match to exercise the whole engine."""
    if config.overs_limit is None:
        config = ScorerConfig(
            overs_limit=5,
            enforce_innings_end=config.enforce_innings_end,
            undo_limit=config.undo_limit,
            log_level=config.log_level,
        )
    rng = random.Random(seed)

    logger.info("=" * 60)
    logger.info("SCOREBOOK - DEMO MODE (%d overs a side)", config.overs_limit)
    logger.info("=" * 60)

    session = ScoringSession(_demo_setup(squad_size), config)

    _play_innings(session, rng)
    print("\n" + render(session.state))

    session.request_innings_switch()
    pending = session.state
    openers = setup.available_batsmen(pending, pending.pending_batting_team)
    session.switch_innings(openers[0].player_id, openers[1].player_id, "t11" if squad_size >= 11 else f"t{squad_size}")

    _play_innings(session, rng)
    session.complete_match()
    print("\n" + render(session.state))
    return session.state


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Scorebook live cricket scorer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scorebook.cli --demo --seed 7
  python -m scorebook.cli --script match.txt
        """,
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--demo", action="store_true", help="Play a synthetic match")
    mode.add_argument("--script", type=str, help="Replay a file of scoring commands")

    parser.add_argument("--seed", type=int, help="Random seed for --demo")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    config = ScorerConfig.from_env()
    logging.getLogger().setLevel(logging.DEBUG if args.verbose else config.log_level)

    if args.demo:
        run_demo(config, seed=args.seed)
    elif args.script:
        try:
            run_script(config, args.script)
        except ScriptError as e:
            logger.error("%s", e)
            sys.exit(1)


if __name__ == "__main__":
    main()
