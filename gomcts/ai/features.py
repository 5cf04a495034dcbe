"""Input features for the predictor.

The encoding stacks, for each of the last ``MOVE_HISTORY`` positions, one
plane with the stones of the side to move and one with the opponent's
stones, followed by a constant plane that is all ones when black is to play.
History older than the start of the search tree is zero padded.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..models import Color
from ..position import Position

MOVE_HISTORY = 8
NUM_STONE_FEATURES = 2 * MOVE_HISTORY
NUM_FEATURES = NUM_STONE_FEATURES + 1


def set_features(positions: Sequence[Position], to_play: Color) -> np.ndarray:
    """Build a ``(NUM_FEATURES, N, N)`` float32 tensor.

    Args:
        positions: Most recent position first; at most ``MOVE_HISTORY`` are used.
        to_play: Side to move at the most recent position.
    """
    if not positions:
        raise ValueError("set_features needs at least the current position")
    board_size = positions[0].board_size
    features = np.zeros((NUM_FEATURES, board_size, board_size), dtype=np.float32)
    me = int(to_play)
    for i, position in enumerate(positions[:MOVE_HISTORY]):
        board = position.board
        features[2 * i] = board == me
        features[2 * i + 1] = board == -me
    if to_play == Color.BLACK:
        features[NUM_STONE_FEATURES] = 1.0
    return features
