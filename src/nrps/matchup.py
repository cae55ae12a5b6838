from __future__ import annotations

from functools import lru_cache

from protocol import MoveCatalog, Outcome, determine_outcome

OutcomeMatrix = tuple[tuple[Outcome, ...], ...]

CORNER = "v You \\ PC >"


@lru_cache(maxsize=32)
def build_matchup(catalog: MoveCatalog) -> OutcomeMatrix:
    """Every pairing of ``catalog``: ``matrix[i][j]`` is row move i against column move j."""
    rows: list[tuple[Outcome, ...]] = []
    for row_move in catalog:
        row: list[Outcome] = []
        for col_move in catalog:
            if row_move == col_move:
                row.append("Draw")
            else:
                row.append(determine_outcome(row_move, col_move, catalog))
        rows.append(tuple(row))
    return tuple(rows)


def format_matchup(catalog: MoveCatalog) -> str:
    matrix = build_matchup(catalog)
    cells = [[CORNER, *catalog]] + [[move, *row] for move, row in zip(catalog, matrix)]

    width = max(len(cell) for row in cells for cell in row) + 2
    border = ("+" + "-" * width) * len(cells[0]) + "+"

    lines = [border]
    for i, row in enumerate(cells):
        lines.append("|" + "|".join(f" {cell}".ljust(width) for cell in row) + "|")
        if i == 0:
            lines.append(border)
    lines.append(border)
    return "\n".join(lines)
