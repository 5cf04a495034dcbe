"""Tests for predictor input features."""

import numpy as np
import pytest

from gomcts.ai.features import MOVE_HISTORY, NUM_FEATURES, NUM_STONE_FEATURES, set_features
from gomcts.models import Color
from gomcts.position import Position


def test_feature_counts() -> None:
    assert MOVE_HISTORY == 8
    assert NUM_STONE_FEATURES == 16
    assert NUM_FEATURES == 17


def test_shape_and_dtype() -> None:
    features = set_features([Position(9)], Color.BLACK)
    assert features.shape == (NUM_FEATURES, 9, 9)
    assert features.dtype == np.float32


def test_to_play_plane() -> None:
    assert set_features([Position(5)], Color.BLACK)[-1].min() == 1.0
    assert set_features([Position(5, to_play=Color.WHITE)], Color.WHITE)[-1].max() == 0.0


def test_planes_are_relative_to_side_to_move() -> None:
    p0 = Position(5)
    p1 = p0.play_move(0)  # black A5
    p2 = p1.play_move(24)  # white E1
    history = [p2, p1, p0]

    features = set_features(history, p2.to_play)

    # Black to play at p2: plane 0 is black, plane 1 is white.
    assert features[0, 0, 0] == 1.0
    assert features[1, 4, 4] == 1.0
    assert features[0].sum() == 1.0
    assert features[1].sum() == 1.0
    # One move back only the black stone is on the board.
    assert features[2, 0, 0] == 1.0
    assert features[3].sum() == 0.0
    # Missing history is zero.
    assert features[6:NUM_STONE_FEATURES].sum() == 0.0


def test_history_is_truncated() -> None:
    positions = [Position(5)] * (MOVE_HISTORY + 4)
    features = set_features(positions, Color.BLACK)
    assert features.shape[0] == NUM_FEATURES


def test_empty_history_raises() -> None:
    with pytest.raises(ValueError):
        set_features([], Color.BLACK)
