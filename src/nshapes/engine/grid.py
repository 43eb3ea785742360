"""Grid topology over a linear board.

The board is a flat list; row and column are derived from the index and a
fixed column count. The last row may be partial.
"""

from __future__ import annotations

from .config import GRID


def dimensions(board_size: int) -> tuple[int, int]:
    """Return ``(cols, rows)`` for a board of ``board_size`` cards."""
    cols = GRID.columns
    rows = -(-max(0, board_size) // cols)
    return cols, rows


def adjacent_indices(index: int, board_size: int) -> list[int]:
    """Up/down/left/right neighbors of ``index`` that exist on the board."""
    if index < 0 or index >= board_size:
        return []
    cols, _ = dimensions(board_size)
    row, col = divmod(index, cols)
    adjacent: list[int] = []

    if row > 0:
        adjacent.append(index - cols)
    if index + cols < board_size:
        adjacent.append(index + cols)
    # Left/right stay inside the row
    if col > 0:
        adjacent.append(index - 1)
    if col < cols - 1 and index + 1 < board_size:
        adjacent.append(index + 1)
    return adjacent


def line_indices(index: int, board_size: int, is_row: bool) -> list[int]:
    """All indices in the same row (``is_row``) or column as ``index``."""
    if index < 0 or index >= board_size:
        return []
    cols, rows = dimensions(board_size)
    row, col = divmod(index, cols)
    if is_row:
        candidates = (row * cols + c for c in range(cols))
    else:
        candidates = (r * cols + col for r in range(rows))
    return [i for i in candidates if i < board_size]
