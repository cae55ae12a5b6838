from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Literal, Sequence

Outcome = Literal["Win", "Lose", "Draw", "Invalid"]
MoveCatalog = tuple[str, ...]

MIN_MOVES = 3

_LOGGER = logging.getLogger(__name__)


class InvalidCatalogError(ValueError):
    """The move list cannot be played: too short, even-sized or with duplicates."""


def validate_catalog(moves: Iterable[str]) -> MoveCatalog:
    catalog = tuple(moves)
    if len(catalog) < MIN_MOVES:
        raise InvalidCatalogError(f"at least {MIN_MOVES} moves are required, got {len(catalog)}")
    if len(set(catalog)) != len(catalog):
        dupes = sorted(m for m, count in Counter(catalog).items() if count > 1)
        raise InvalidCatalogError("moves must be unique, repeated: " + ", ".join(dupes))
    if len(catalog) % 2 == 0:
        raise InvalidCatalogError(f"an odd number of moves is required, got {len(catalog)}")
    return catalog


def is_valid_move(value: str, catalog: Sequence[str]) -> bool:
    return value in catalog


def beats_indices(index: int, size: int) -> tuple[int, ...]:
    # The next size // 2 positions, wrapping around the catalog.
    half = size // 2
    return tuple((index + step) % size for step in range(1, half + 1))


def beats(move: str, catalog: Sequence[str]) -> tuple[str, ...]:
    """Moves that ``move`` defeats, in catalog order starting after ``move``."""
    return tuple(catalog[i] for i in beats_indices(catalog.index(move), len(catalog)))


def loses_to(move: str, catalog: Sequence[str]) -> tuple[str, ...]:
    """Moves that defeat ``move``."""
    won = set(beats(move, catalog))
    return tuple(m for m in catalog if m != move and m not in won)


def determine_outcome(player: str, opponent: str, catalog: Sequence[str]) -> Outcome:
    """Resolve one pairing from ``player``'s point of view.

    Moves outside ``catalog`` yield ``"Invalid"`` rather than raising.
    """
    if not is_valid_move(player, catalog) or not is_valid_move(opponent, catalog):
        _LOGGER.warning("Invalid pairing %r vs %r for catalog of %d moves", player, opponent, len(catalog))
        return "Invalid"

    if player == opponent:
        return "Draw"

    wins = beats_indices(catalog.index(player), len(catalog))
    return "Win" if catalog.index(opponent) in wins else "Lose"
