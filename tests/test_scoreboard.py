from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
APP_DIR = ROOT / "src" / "nrps"
sys.path.insert(0, str(APP_DIR))

from scoreboard import ScoreBoard, ScoreBoardError, Tally, catalog_signature  # type: ignore[import-not-found]  # noqa: E402

RPS = ("Rock", "Paper", "Scissors")


def test_tally_record_is_immutable() -> None:
    tally = Tally()
    updated = tally.record("Win").record("Lose").record("Draw").record("Draw").record("Invalid")
    assert tally == Tally()
    assert updated == Tally(wins=1, losses=1, draws=2)
    assert updated.rounds == 4
    assert updated.format_line() == "Wins: 1, Losses: 1, Draws: 2"


def test_in_memory_scoreboard_does_not_write(tmp_path: Path) -> None:
    sb = ScoreBoard.load(None)
    assert sb.record(RPS, "Win") == Tally(wins=1)
    assert list(tmp_path.iterdir()) == []
    assert sb.get(RPS) == Tally(wins=1)


def test_scoreboard_persists_per_catalog(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "scores.json"
    sb = ScoreBoard.load(path)
    assert sb.format_table() == "(no games yet)"

    sb.record(RPS, "Win")
    sb.record(RPS, "Draw")
    sb.record(("a", "b", "c", "d", "e"), "Lose")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["scores"]['["Rock","Paper","Scissors"]'] == {"wins": 1, "losses": 0, "draws": 1}

    reloaded = ScoreBoard.load(path)
    assert reloaded.get(RPS) == Tally(wins=1, draws=1)
    assert reloaded.get(("a", "b", "c", "d", "e")) == Tally(losses=1)

    table = reloaded.format_table().splitlines()
    assert table[0].split() == ["moves", "wins", "losses", "draws"]
    assert table[2].split() == ['["Rock","Paper","Scissors"]', "1", "0", "1"]
    assert table[3].split() == ['["a","b","c","d","e"]', "0", "1", "0"]


def test_signature_keeps_comma_names_apart() -> None:
    assert catalog_signature(("a,b", "c", "d")) != catalog_signature(("a", "b,c", "d"))

    sb = ScoreBoard.load(None)
    sb.record(("a,b", "c", "d"), "Win")
    assert sb.get(("a", "b,c", "d")) == Tally()
    assert sb.get(("a,b", "c", "d")) == Tally(wins=1)


def test_scoreboard_ignores_non_object_entries(tmp_path: Path) -> None:
    path = tmp_path / "scores.json"
    payload = {"scores": {'["x","y","z"]': "oops", catalog_signature(RPS): {"wins": 3}}}
    path.write_text(json.dumps(payload), encoding="utf-8")
    sb = ScoreBoard.load(path)
    assert sb.get(RPS) == Tally(wins=3)
    assert sb.get(("x", "y", "z")) == Tally()


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        '{"scores": []}',
        '{"scores": {"[\\"a\\"]": {"wins": "many"}}}',
    ],
)
def test_malformed_file_raises_scoreboard_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "scores.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ScoreBoardError):
        ScoreBoard.load(path)


def test_detach_stops_writing(tmp_path: Path) -> None:
    path = tmp_path / "scores.json"
    sb = ScoreBoard.load(path)
    sb.detach()
    assert sb.record(RPS, "Lose") == Tally(losses=1)
    assert not path.exists()
