"""In-memory game record.

The player forwards one ``GameMove`` per committed move together with the
search statistics behind it; the record also tracks how and when the game
ended. Persisting the record (SGF, databases) is left to callers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .coords import to_gtp
from .errors import GameOverError
from .models import Color, GameOptions, GameOverReason

logger = logging.getLogger(__name__)


@dataclass
class GameMove:
    """One committed move and the search statistics that chose it."""

    color: Color
    c: int
    stones: np.ndarray
    comment: str
    q: float
    search_pi: np.ndarray
    models: List[str] = field(default_factory=list)
    trainable: bool = False


class Game:
    """History of a single game plus its final result."""

    def __init__(self, options: Optional[GameOptions] = None) -> None:
        self.options = options or GameOptions()
        self.moves: List[GameMove] = []
        self.game_over = False
        self.game_over_reason = GameOverReason.NONE
        self.result = 0.0
        self.score: Optional[float] = None

    @property
    def move_count(self) -> int:
        return len(self.moves)

    def new_game(self) -> None:
        self.moves.clear()
        self._reopen()

    def _reopen(self) -> None:
        self.game_over = False
        self.game_over_reason = GameOverReason.NONE
        self.result = 0.0
        self.score = None

    def add_move(
        self,
        color: Color,
        c: int,
        stones: np.ndarray,
        comment: str,
        q: float,
        search_pi: np.ndarray,
        models: List[str],
    ) -> None:
        if self.game_over:
            raise GameOverError(
                "Cannot add a move to a finished game",
                context={"move": to_gtp(self.options.board_size, c)},
            )
        self.moves.append(
            GameMove(
                color=color,
                c=c,
                stones=stones,
                comment=comment,
                q=q,
                search_pi=search_pi,
                models=list(models),
            )
        )

    def undo_move(self) -> bool:
        """Drop the last move; a finished game becomes active again."""
        if not self.moves:
            return False
        self.moves.pop()
        self._reopen()
        return True

    def get_move(self, i: int) -> GameMove:
        return self.moves[i]

    def mark_last_move_as_trainable(self) -> None:
        if self.moves:
            self.moves[-1].trainable = True

    def mark_over_by_resignation(self, winner: Color) -> None:
        self._finish(GameOverReason.RESIGNATION, float(winner), None)

    def mark_over_by_move_limit(self, score: float) -> None:
        self._finish(GameOverReason.MOVE_LIMIT, float(np.sign(score)), score)

    def mark_over_by_passes(self, score: float) -> None:
        self._finish(GameOverReason.PASSES, float(np.sign(score)), score)

    def _finish(self, reason: GameOverReason, result: float, score: Optional[float]) -> None:
        self.game_over = True
        self.game_over_reason = reason
        self.result = result
        self.score = score
        logger.info(f"Game over by {reason.value}: {self.result_string()}")

    def result_string(self) -> str:
        """Result in SGF notation, e.g. ``B+R`` or ``W+3.5``."""
        if not self.game_over or self.result == 0:
            return "Void"
        winner = "B" if self.result > 0 else "W"
        if self.game_over_reason == GameOverReason.RESIGNATION:
            return f"{winner}+R"
        return f"{winner}+{abs(self.score or 0.0):g}"
