"""Move coordinate helpers.

Moves are flat integer indices: board points are ``row * N + col`` with row
0 at the top of the board, ``N * N`` is pass and ``RESIGN`` is a sentinel that
never indexes an array.
"""

from __future__ import annotations

from typing import Tuple

from .errors import InvalidMoveError

RESIGN = -1

GTP_COLUMNS = "ABCDEFGHJKLMNOPQRST"


def pass_move(board_size: int) -> int:
    return board_size * board_size


def num_moves(board_size: int) -> int:
    """Size of the move space: every point plus pass."""
    return board_size * board_size + 1


def to_flat(board_size: int, row: int, col: int) -> int:
    return row * board_size + col


def from_flat(board_size: int, c: int) -> Tuple[int, int]:
    return divmod(c, board_size)


def to_gtp(board_size: int, c: int) -> str:
    """Render a move as GTP text, e.g. ``D4``, ``pass`` or ``resign``."""
    if c == RESIGN:
        return "resign"
    if c == pass_move(board_size):
        return "pass"
    row, col = from_flat(board_size, c)
    return f"{GTP_COLUMNS[col]}{board_size - row}"


def from_gtp(board_size: int, text: str) -> int:
    """Parse GTP text back into a flat move index."""
    s = text.strip().upper()
    if s == "PASS":
        return pass_move(board_size)
    if s == "RESIGN":
        return RESIGN
    try:
        col = GTP_COLUMNS.index(s[0])
        row = board_size - int(s[1:])
    except (IndexError, ValueError) as e:
        raise InvalidMoveError(f"Unparseable GTP coordinate {text!r}") from e
    if not (0 <= row < board_size and 0 <= col < board_size):
        raise InvalidMoveError(f"GTP coordinate {text!r} is off the board")
    return to_flat(board_size, row, col)
