from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable

from commit_reveal import CommitmentError, verify_commitment
from protocol import InvalidCatalogError, validate_catalog
from scoreboard import ScoreBoard, ScoreBoardError
from session import (
    EXIT_COMMAND,
    HELP_COMMAND,
    HISTORY_COMMAND,
    Exited,
    GameSession,
    HelpShown,
    HistoryShown,
    InvalidMoveSelectionError,
    Revealed,
    format_history,
)

USAGE_EXAMPLE = "Example: nrps Rock Paper Scissors Lizard Spock"

_LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None, *, input_fn: Callable[[str], str] = input) -> int:
    parser = argparse.ArgumentParser(
        prog="nrps",
        description="Play N-way rock-paper-scissors against a computer that commits to its move with HMAC-SHA256.",
        epilog=USAGE_EXAMPLE,
    )
    parser.add_argument("moves", nargs="*", help="Odd number (3 or more) of unique move names, in cyclic order")
    parser.add_argument(
        "--scores",
        default=os.environ.get("NRPS_SCORES"),
        help="JSON file for lifetime scores (default: $NRPS_SCORES, or none)",
    )
    parser.add_argument(
        "--verify",
        nargs=3,
        metavar=("KEY", "MOVE", "HMAC"),
        default=None,
        help="Check a revealed key and move against a published HMAC, then exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.verify is not None:
        return _verify(*args.verify)

    try:
        catalog = validate_catalog(args.moves)
    except InvalidCatalogError as exc:
        print(f"Invalid input: {exc}.", file=sys.stderr)
        print("Please provide an odd number (3 or more) of unique moves.", file=sys.stderr)
        print(USAGE_EXAMPLE, file=sys.stderr)
        return 1

    try:
        scoreboard = ScoreBoard.load(args.scores)
    except (OSError, ScoreBoardError) as exc:
        print(f"Cannot read scores file: {exc}", file=sys.stderr)
        return 1

    session = GameSession(catalog)
    try:
        play(session, scoreboard, input_fn=input_fn)
    except CommitmentError as exc:
        print(f"Could not commit to a move: {exc}", file=sys.stderr)
        return 1

    if args.scores:
        print("\nLifetime scores:\n" + scoreboard.format_table())
    return 0


def play(session: GameSession, scoreboard: ScoreBoard, *, input_fn: Callable[[str], str] = input) -> None:
    commitment = session.begin_round()
    while True:
        _print_menu(session, commitment)
        try:
            choice = input_fn("Enter your move: ")
        except (EOFError, KeyboardInterrupt):
            print()
            choice = EXIT_COMMAND

        try:
            event = session.submit(choice)
        except InvalidMoveSelectionError as exc:
            _LOGGER.debug("Rejected selection: %s", exc)
            print("Invalid move. Please choose a valid move.")
            continue

        if isinstance(event, Exited):
            print("Bye!")
            return
        if isinstance(event, HelpShown):
            print(event.table)
            continue
        if isinstance(event, HistoryShown):
            print("Game History:")
            print(format_history(event.history))
            continue
        if isinstance(event, Revealed):
            _show_reveal(event)
            try:
                scoreboard.record(session.catalog, event.result.outcome)
            except OSError as exc:
                print(f"Cannot save scores, continuing without them: {exc}", file=sys.stderr)
                scoreboard.detach()
            commitment = session.begin_round()


def _print_menu(session: GameSession, commitment: str) -> None:
    print(f"\nHMAC: {commitment}")
    print("Available moves:")
    for index, move in enumerate(session.catalog, start=1):
        print(f"{index} - {move}")
    print(f"{EXIT_COMMAND} - exit")
    print(f"{HELP_COMMAND} - help")
    print(f"{HISTORY_COMMAND} - history")


def _show_reveal(event: Revealed) -> None:
    result = event.result
    print(f"Your move: {result.human_move}")
    print(f"Computer move: {result.opponent_move}")
    if result.outcome == "Draw":
        print("Draw!")
    else:
        print(f"You {result.outcome}!")
    print(f"HMAC key: {event.key_hex}")
    print(event.tally.format_line())


def _verify(key_hex: str, move: str, expected: str) -> int:
    if verify_commitment(expected_commitment=expected, key=key_hex, message=move):
        print(f"OK: HMAC matches move {move!r}")
        return 0
    print(f"MISMATCH: HMAC does not match move {move!r} under this key")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
