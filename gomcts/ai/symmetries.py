"""Board symmetries (the dihedral group D4) for inference augmentation.

Each symmetry is a rotation by ``k`` quarter turns applied after an optional
left-right flip. Flipped elements are their own inverse; plain rotations
invert to the opposite rotation.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np


class Symmetry(IntEnum):
    IDENTITY = 0
    ROT90 = 1
    ROT180 = 2
    ROT270 = 3
    FLIP = 4
    FLIP_ROT90 = 5
    FLIP_ROT180 = 6
    FLIP_ROT270 = 7

    @property
    def flipped(self) -> bool:
        return self.value >= 4

    @property
    def quarter_turns(self) -> int:
        return self.value % 4


NUM_SYMMETRIES = len(Symmetry)


def inverse(sym: Symmetry) -> Symmetry:
    sym = Symmetry(sym)
    if sym.flipped:
        return sym
    return Symmetry((4 - sym.quarter_turns) % 4)


def _transform(arr: np.ndarray, sym: Symmetry, axes: tuple) -> np.ndarray:
    sym = Symmetry(sym)
    if sym.flipped:
        arr = np.flip(arr, axis=axes[1])
    return np.rot90(arr, sym.quarter_turns, axes=axes)


def apply_symmetry_planes(sym: Symmetry, planes: np.ndarray) -> np.ndarray:
    """Transform a ``(C, N, N)`` feature tensor."""
    return np.ascontiguousarray(_transform(planes, sym, (1, 2)))


def apply_symmetry_policy(sym: Symmetry, policy: np.ndarray, board_size: int) -> np.ndarray:
    """Transform a flat ``N*N + 1`` policy; the pass entry is copied through."""
    points = board_size * board_size
    out = np.empty_like(policy)
    board = policy[:points].reshape(board_size, board_size)
    out[:points] = _transform(board, sym, (0, 1)).reshape(-1)
    out[points:] = policy[points:]
    return out
