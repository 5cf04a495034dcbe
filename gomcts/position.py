"""Go board position.

Positions are immutable: ``play_move`` returns a successor and never touches
the receiver, so search nodes can share them freely. Rules are the usual
area-scored ones: captures, simple ko, no suicide, and the game ends after
two consecutive passes (or at the move limit).
"""

from __future__ import annotations

import functools
from typing import List, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np

from .coords import num_moves, pass_move, to_gtp
from .errors import InvalidMoveError
from .models import Color

DEFAULT_BOARD_SIZE = 9


class PlayerMove(NamedTuple):
    color: Color
    move: int


@functools.lru_cache(maxsize=None)
def _neighbors(board_size: int) -> Tuple[Tuple[int, ...], ...]:
    """Orthogonal neighbors of every flat point."""
    table: List[Tuple[int, ...]] = []
    for c in range(board_size * board_size):
        row, col = divmod(c, board_size)
        nbrs = []
        if row > 0:
            nbrs.append(c - board_size)
        if row < board_size - 1:
            nbrs.append(c + board_size)
        if col > 0:
            nbrs.append(c - 1)
        if col < board_size - 1:
            nbrs.append(c + 1)
        table.append(tuple(nbrs))
    return tuple(table)


def _find_group(
    flat: np.ndarray, c: int, neighbors: Sequence[Tuple[int, ...]]
) -> Tuple[Set[int], Set[int]]:
    """Return (stones, liberties) of the group containing point ``c``."""
    color = flat[c]
    stones = {c}
    liberties: Set[int] = set()
    frontier = [c]
    while frontier:
        p = frontier.pop()
        for q in neighbors[p]:
            v = flat[q]
            if v == 0:
                liberties.add(q)
            elif v == color and q not in stones:
                stones.add(q)
                frontier.append(q)
    return stones, liberties


class Position:
    """A Go position together with the bookkeeping needed to continue play."""

    def __init__(
        self,
        board_size: int = DEFAULT_BOARD_SIZE,
        board: Optional[np.ndarray] = None,
        n: int = 0,
        to_play: Color = Color.BLACK,
        ko: Optional[int] = None,
        recent: Tuple[PlayerMove, ...] = (),
        consecutive_passes: int = 0,
        max_game_length: Optional[int] = None,
    ) -> None:
        self.board_size = board_size
        if board is None:
            flat = np.zeros(board_size * board_size, dtype=np.int8)
        else:
            flat = np.array(board, dtype=np.int8).reshape(-1)
            if flat.size != board_size * board_size:
                raise ValueError(
                    f"Board has {flat.size} points, expected {board_size * board_size}"
                )
        flat.setflags(write=False)
        self._flat = flat
        self.n = n
        self.to_play = Color(to_play)
        self.ko = ko
        self.recent = tuple(recent)
        self.consecutive_passes = consecutive_passes
        self.max_game_length = (
            max_game_length if max_game_length is not None else 2 * board_size * board_size
        )
        self._legal_mask: Optional[np.ndarray] = None

    @property
    def board(self) -> np.ndarray:
        """Read-only (N, N) view: +1 black, -1 white, 0 empty."""
        return self._flat.reshape(self.board_size, self.board_size)

    @property
    def pass_move(self) -> int:
        return pass_move(self.board_size)

    def stones(self) -> np.ndarray:
        """Writable snapshot of the board."""
        return self.board.copy()

    def legal_move(self, c: int) -> bool:
        if c == self.pass_move:
            return True
        if not 0 <= c < self.board_size * self.board_size:
            return False
        if self._flat[c] != 0 or c == self.ko:
            return False
        return not self._is_suicide(c)

    def legal_moves(self) -> np.ndarray:
        """Boolean mask over the whole move space (points then pass)."""
        if self._legal_mask is None:
            mask = np.zeros(num_moves(self.board_size), dtype=bool)
            for c in range(mask.size):
                mask[c] = self.legal_move(c)
            mask.setflags(write=False)
            self._legal_mask = mask
        return self._legal_mask

    def _is_suicide(self, c: int) -> bool:
        neighbors = _neighbors(self.board_size)
        me = int(self.to_play)
        if any(self._flat[q] == 0 for q in neighbors[c]):
            return False
        for q in neighbors[c]:
            _, liberties = _find_group(self._flat, q, neighbors)
            if self._flat[q] == me and len(liberties) > 1:
                return False
            if self._flat[q] == -me and len(liberties) == 1:
                return False
        return True

    def play_move(self, c: int) -> "Position":
        """Return the position after the side to move plays ``c``."""
        if not self.legal_move(c):
            raise InvalidMoveError(
                f"Illegal move {to_gtp(self.board_size, c)}",
                move=c,
                context={"to_play": self.to_play.name, "n": self.n},
            )
        color = self.to_play
        recent = self.recent + (PlayerMove(color, c),)
        if c == self.pass_move:
            return Position(
                self.board_size,
                self._flat,
                self.n + 1,
                color.other,
                None,
                recent,
                self.consecutive_passes + 1,
                self.max_game_length,
            )

        neighbors = _neighbors(self.board_size)
        flat = self._flat.copy()
        flat[c] = color
        captured: List[int] = []
        for q in neighbors[c]:
            if flat[q] == -color:
                stones, liberties = _find_group(flat, q, neighbors)
                if not liberties:
                    for s in stones:
                        flat[s] = 0
                    captured.extend(stones)

        ko = None
        if len(captured) == 1:
            stones, liberties = _find_group(flat, c, neighbors)
            if len(stones) == 1 and len(liberties) == 1:
                ko = captured[0]

        return Position(
            self.board_size,
            flat,
            self.n + 1,
            color.other,
            ko,
            recent,
            0,
            self.max_game_length,
        )

    def is_game_over(self) -> bool:
        return self.consecutive_passes >= 2

    def at_move_limit(self) -> bool:
        return self.n >= self.max_game_length

    def calculate_score(self, komi: float) -> float:
        """Area score from black's perspective, komi already subtracted."""
        neighbors = _neighbors(self.board_size)
        flat = self._flat
        black = int(np.count_nonzero(flat == Color.BLACK))
        white = int(np.count_nonzero(flat == Color.WHITE))
        visited = np.zeros(flat.size, dtype=bool)
        for c in range(flat.size):
            if flat[c] != 0 or visited[c]:
                continue
            region = [c]
            visited[c] = True
            borders: Set[int] = set()
            frontier = [c]
            while frontier:
                p = frontier.pop()
                for q in neighbors[p]:
                    v = int(flat[q])
                    if v == 0:
                        if not visited[q]:
                            visited[q] = True
                            region.append(q)
                            frontier.append(q)
                    else:
                        borders.add(v)
            if borders == {Color.BLACK}:
                black += len(region)
            elif borders == {Color.WHITE}:
                white += len(region)
        return float(black - white - komi)

    def __str__(self) -> str:
        glyphs = {0: ".", 1: "X", -1: "O"}
        rows = [
            " ".join(glyphs[int(v)] for v in row) for row in self.board
        ]
        return "\n".join(rows)

    def __repr__(self) -> str:
        return (
            f"Position(n={self.n}, to_play={self.to_play.name}, "
            f"ko={self.ko}, passes={self.consecutive_passes})"
        )
