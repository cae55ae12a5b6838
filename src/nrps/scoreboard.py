from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Sequence

from protocol import Outcome

_LOGGER = logging.getLogger(__name__)


class ScoreBoardError(ValueError):
    """The scores file exists but does not hold a scoreboard."""


@dataclass(frozen=True)
class Tally:
    wins: int = 0
    losses: int = 0
    draws: int = 0

    def record(self, outcome: Outcome) -> "Tally":
        if outcome == "Win":
            return replace(self, wins=self.wins + 1)
        if outcome == "Lose":
            return replace(self, losses=self.losses + 1)
        if outcome == "Draw":
            return replace(self, draws=self.draws + 1)
        return self

    @property
    def rounds(self) -> int:
        return self.wins + self.losses + self.draws

    def format_line(self) -> str:
        return f"Wins: {self.wins}, Losses: {self.losses}, Draws: {self.draws}"


def catalog_signature(catalog: Sequence[str]) -> str:
    # JSON keeps names containing commas or quotes distinct.
    return json.dumps(list(catalog), separators=(",", ":"))


@dataclass
class ScoreBoard:
    """Lifetime tallies per move catalog, optionally backed by a JSON file."""

    _scores: dict[str, Tally] = field(default_factory=dict)
    _path: Path | None = None

    @classmethod
    def load(cls, path: str | Path | None) -> "ScoreBoard":
        if path is None:
            return cls()
        p = Path(path).expanduser()
        if not p.exists():
            _LOGGER.debug("No scoreboard at %s yet", p)
            return cls(_path=p)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except ValueError as exc:
            raise ScoreBoardError(f"{p} is not valid JSON: {exc}") from None
        if not isinstance(data, dict) or not isinstance(data.get("scores", {}), dict):
            raise ScoreBoardError(f"{p} does not contain a scores object")
        scores: dict[str, Tally] = {}
        for signature, entry in data.get("scores", {}).items():
            if isinstance(entry, dict):
                try:
                    scores[signature] = Tally(
                        wins=int(entry.get("wins", 0)),
                        losses=int(entry.get("losses", 0)),
                        draws=int(entry.get("draws", 0)),
                    )
                except (TypeError, ValueError):
                    raise ScoreBoardError(f"{p} has a non-numeric tally for {signature}") from None
        _LOGGER.debug("Loaded %d scoreboard entries from %s", len(scores), p)
        return cls(_scores=scores, _path=p)

    def save(self) -> None:
        if self._path is None:
            return
        payload = {"scores": {sig: asdict(tally) for sig, tally in self._scores.items()}}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        _LOGGER.debug("Saved scoreboard to %s", self._path)

    def detach(self) -> None:
        """Keep counting in memory but stop writing to disk."""
        self._path = None

    def record(self, catalog: Sequence[str], outcome: Outcome) -> Tally:
        signature = catalog_signature(catalog)
        tally = self.get(catalog).record(outcome)
        self._scores[signature] = tally
        self.save()
        return tally

    def get(self, catalog: Sequence[str]) -> Tally:
        return self._scores.get(catalog_signature(catalog), Tally())

    def format_table(self) -> str:
        if not self._scores:
            return "(no games yet)"

        name_width = max(len("moves"), *(len(sig) for sig in self._scores))
        lines: list[str] = []
        header = f"{'moves':{name_width}}  {'wins':>4}  {'losses':>6}  {'draws':>5}"
        lines.append(header)
        lines.append("-" * len(header))
        for sig in sorted(self._scores.keys()):
            t = self._scores[sig]
            lines.append(f"{sig:{name_width}}  {t.wins:>4}  {t.losses:>6}  {t.draws:>5}")
        return "\n".join(lines)
