"""Round orchestration for one interactive game.

A round always publishes its commitment before any input is accepted:
``GameSession.submit`` refuses to run unless ``begin_round`` has produced a
commitment for the current round.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import IntEnum, auto
from typing import Callable, Sequence, Union

from commit_reveal import CommitmentError, compute_commitment, generate_key, key_to_hex
from matchup import format_matchup
from protocol import MoveCatalog, Outcome, determine_outcome
from scoreboard import Tally

EXIT_COMMAND = "0"
HELP_COMMAND = "?"
HISTORY_COMMAND = "!"

MAX_COMMIT_ATTEMPTS = 3

_LOGGER = logging.getLogger(__name__)


class InvalidMoveSelectionError(ValueError):
    """Input is neither a catalog index nor a known command."""


class SessionStateError(RuntimeError):
    """A session operation was called in the wrong phase."""


class Phase(IntEnum):
    AWAITING_COMMITMENT = auto()
    AWAITING_MOVE = auto()
    ROUND_COMPLETE = auto()
    EXITED = auto()


@dataclass(frozen=True)
class PendingRound:
    opponent_move: str
    key: bytes = field(repr=False)
    commitment: str


@dataclass(frozen=True)
class RoundResult:
    opponent_move: str
    human_move: str
    outcome: Outcome


@dataclass(frozen=True)
class SessionState:
    catalog: MoveCatalog
    history: tuple[RoundResult, ...] = ()
    tally: Tally = field(default_factory=Tally)


# --- Events returned by GameSession.submit ---
@dataclass(frozen=True)
class Revealed:
    result: RoundResult
    key_hex: str
    commitment: str
    tally: Tally


@dataclass(frozen=True)
class HelpShown:
    table: str


@dataclass(frozen=True)
class HistoryShown:
    history: tuple[RoundResult, ...]


@dataclass(frozen=True)
class Exited:
    pass


Event = Union[Revealed, HelpShown, HistoryShown, Exited]


def new_round(
    catalog: MoveCatalog,
    *,
    key_factory: Callable[[], bytes] = generate_key,
    chooser: Callable[[Sequence[str]], str] = random.choice,
) -> PendingRound:
    key = key_factory()
    opponent_move = chooser(catalog)
    commitment = compute_commitment(key, opponent_move)
    return PendingRound(opponent_move=opponent_move, key=key, commitment=commitment)


def play_round(state: SessionState, pending: PendingRound, human_move: str) -> tuple[SessionState, RoundResult]:
    outcome = determine_outcome(human_move, pending.opponent_move, state.catalog)
    result = RoundResult(opponent_move=pending.opponent_move, human_move=human_move, outcome=outcome)
    new_state = replace(state, history=state.history + (result,), tally=state.tally.record(outcome))
    return new_state, result


def parse_selection(text: str, catalog: MoveCatalog) -> str:
    """Map 1-based menu input to a move name."""
    choice = text.strip()
    if not (choice.isascii() and choice.isdigit()):
        raise InvalidMoveSelectionError(f"not a move number: {text!r}")
    index = int(choice)
    if not 1 <= index <= len(catalog):
        raise InvalidMoveSelectionError(f"move number must be 1..{len(catalog)}, got {index}")
    return catalog[index - 1]


class GameSession:
    """Drives rounds against the computer for a fixed catalog."""

    def __init__(
        self,
        catalog: MoveCatalog,
        *,
        key_factory: Callable[[], bytes] = generate_key,
        chooser: Callable[[Sequence[str]], str] = random.choice,
    ) -> None:
        self._state = SessionState(catalog=catalog)
        self._key_factory = key_factory
        self._chooser = chooser
        self._pending: PendingRound | None = None
        self._phase = Phase.AWAITING_COMMITMENT

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def catalog(self) -> MoveCatalog:
        return self._state.catalog

    @property
    def commitment(self) -> str | None:
        return self._pending.commitment if self._pending is not None else None

    def begin_round(self) -> str:
        self._require(Phase.AWAITING_COMMITMENT, Phase.ROUND_COMPLETE)

        last_error: CommitmentError | None = None
        for attempt in range(1, MAX_COMMIT_ATTEMPTS + 1):
            try:
                pending = new_round(self.catalog, key_factory=self._key_factory, chooser=self._chooser)
            except CommitmentError as exc:
                _LOGGER.warning("Commitment attempt %d failed (%s); starting a fresh round", attempt, exc)
                last_error = exc
                continue
            self._pending = pending
            self._phase = Phase.AWAITING_MOVE
            _LOGGER.debug("Round %d committed: %s", len(self._state.history) + 1, pending.commitment)
            return pending.commitment

        raise CommitmentError(f"gave up after {MAX_COMMIT_ATTEMPTS} attempts") from last_error

    def submit(self, text: str) -> Event:
        self._require(Phase.AWAITING_MOVE)
        if self._pending is None:
            raise SessionStateError("no commitment has been published for this round")

        command = text.strip()
        if command == EXIT_COMMAND:
            self._pending = None
            self._phase = Phase.EXITED
            return Exited()
        if command == HELP_COMMAND:
            return HelpShown(table=format_matchup(self.catalog))
        if command == HISTORY_COMMAND:
            return HistoryShown(history=self._state.history)

        human_move = parse_selection(command, self.catalog)
        pending = self._pending
        self._state, result = play_round(self._state, pending, human_move)
        self._pending = None
        self._phase = Phase.ROUND_COMPLETE
        _LOGGER.debug("Round %d revealed: %s", len(self._state.history), result)
        return Revealed(
            result=result,
            key_hex=key_to_hex(pending.key),
            commitment=pending.commitment,
            tally=self._state.tally,
        )

    def _require(self, *allowed: Phase) -> None:
        if self._phase not in allowed:
            names = ", ".join(p.name for p in allowed)
            raise SessionStateError(f"expected phase {names}, session is {self._phase.name}")


def format_history(history: Sequence[RoundResult]) -> str:
    if not history:
        return "(no rounds yet)"

    headers = ("#", "computer move", "your move", "result")
    rows = [(str(i), r.opponent_move, r.human_move, r.outcome) for i, r in enumerate(history, start=1)]
    widths = [max(len(row[col]) for row in (headers, *rows)) for col in range(len(headers))]

    def fmt(row: Sequence[str]) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()

    lines = [fmt(headers), "-" * len(fmt(headers))]
    lines.extend(fmt(row) for row in rows)
    return "\n".join(lines)
