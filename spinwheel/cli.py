"""Command-line front end.

Usage:
    python -m spinwheel spin Alien:3 Heat:1 Ran:5
    python -m spinwheel spin Alien Heat --mode one-spin --fast
    python -m spinwheel audit Alien:1 Heat:3 --iterations 100000 --seed 7
"""

import argparse
import asyncio
import random
import re
import sys

from spinwheel.audit import AuditError, audit
from spinwheel.clock import AsyncioFrameClock, SteppedFrameClock, asyncio_sleep_ms, instant_sleep
from spinwheel.config import AUDIT_ITERATIONS, FRAME_RATE, LOG_LEVEL
from spinwheel.display import ConsoleEventHandler, console, create_knockout_table, print_audit_report
from spinwheel.engine import SpinEngine
from spinwheel.knockout.controller import TournamentController
from spinwheel.logging import configure_logging
from spinwheel.models import Candidate, SpinMode, WeightMode
from spinwheel.session import WheelSession

WEIGHT_SUFFIX = re.compile(r"-?\d+(\.\d+)?")


def parse_candidate(token: str) -> Candidate:
    """Parse ``ID`` or ``ID:WEIGHT``.

    Only a numeric suffix counts as a weight, so titles such as
    ``"Star Wars: Episode IV"`` keep their colon. Out-of-range weights are
    normalized, not rejected.
    """
    name, sep, weight = token.rpartition(":")
    if not sep or not WEIGHT_SUFFIX.fullmatch(weight.strip()):
        name, weight = token, "1"
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"missing candidate name in {token!r}")
    return Candidate(id=name, weight=weight, label=name)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spinwheel", description="Spin a weighted wheel")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Log level for engine events")
    subparsers = parser.add_subparsers(dest="command", required=True)

    spin = subparsers.add_parser("spin", help="Spin the wheel or run a knockout")
    spin.add_argument("candidates", nargs="+", type=parse_candidate, metavar="ID[:WEIGHT]")
    spin.add_argument(
        "--mode",
        type=SpinMode,
        choices=list(SpinMode),
        default=SpinMode.KNOCKOUT,
        help="knockout (default), one-spin, or random-boost",
    )
    spin.add_argument("--inverse", action="store_true", help="Favor low weights on single spins")
    spin.add_argument("--seed", type=int, default=None)
    spin.add_argument("--fast", action="store_true", help="Skip animation timing and delays")
    spin.add_argument("--ticks", action="store_true", help="Print every segment crossing")

    audit_cmd = subparsers.add_parser("audit", help="Monte Carlo check of the draw odds")
    audit_cmd.add_argument("candidates", nargs="+", type=parse_candidate, metavar="ID[:WEIGHT]")
    audit_cmd.add_argument("--iterations", type=int, default=AUDIT_ITERATIONS)
    audit_cmd.add_argument("--seed", type=int, default=None)

    return parser


async def run_spin(args: argparse.Namespace) -> int:
    handler = ConsoleEventHandler(args.candidates, show_ticks=args.ticks)
    if args.fast:
        clock = SteppedFrameClock(step_ms=1000.0 / FRAME_RATE)
        sleep = instant_sleep
    else:
        clock = AsyncioFrameClock(FRAME_RATE)
        sleep = asyncio_sleep_ms

    engine = SpinEngine(clock=clock, rng=random.Random(args.seed), event_handler=handler)
    session = WheelSession(
        engine,
        TournamentController(engine, sleep=sleep),
        weight_mode=WeightMode.INVERSE if args.inverse else WeightMode.NORMAL,
    )

    outcome = await session.spin_wheel(args.candidates, args.mode)

    if outcome.tournament is not None:
        console.print(create_knockout_table(outcome.tournament, args.candidates))
    elif outcome.winner_id is not None:
        winner = next(c for c in outcome.candidates if c.id == outcome.winner_id)
        console.print(f"[bold green]🎉 {winner.display_name}[/bold green] [dim](weight {winner.weight})[/dim]")

    return 0 if outcome.winner_id is not None else 1


def run_audit(args: argparse.Namespace) -> int:
    rng = random.Random(args.seed)
    report = audit(args.candidates, iterations=args.iterations, rng=rng)
    if isinstance(report, AuditError):
        console.print(f"[red]{report.error}[/red]")
        return 1
    print_audit_report(report)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(cli_mode=True, log_level=args.log_level)

    if args.command == "audit":
        return run_audit(args)
    return asyncio.run(run_spin(args))


if __name__ == "__main__":
    sys.exit(main())
