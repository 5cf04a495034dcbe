"""Tests for the predictor adapters."""

import numpy as np
import pytest
import torch
import torch.nn as nn

from gomcts.ai.features import NUM_FEATURES, set_features
from gomcts.ai.predictor import RandomPredictor, TorchPredictor
from gomcts.coords import num_moves
from gomcts.models import Color
from gomcts.position import Position


class TinyNet(nn.Module):
    """Linear policy and value heads over the flattened features."""

    def __init__(self, board_size: int, policy_size: int = None):
        super().__init__()
        inputs = NUM_FEATURES * board_size * board_size
        self.policy = nn.Linear(inputs, policy_size or num_moves(board_size))
        self.value = nn.Linear(inputs, 1)

    def forward(self, x: torch.Tensor):
        flat = x.flatten(1)
        # Scaled so the adapter's clamp is exercised.
        return self.policy(flat), 10.0 * self.value(flat)


def _features(count: int, board_size: int = 5):
    position = Position(board_size).play_move(3)
    return [set_features([position], position.to_play) for _ in range(count)]


class TestRandomPredictor:
    """Tests for RandomPredictor."""

    def test_output_shapes(self) -> None:
        predictor = RandomPredictor(board_size=5, seed=1)
        outputs, model_id = predictor.evaluate(_features(3))
        assert model_id == "random"
        assert len(outputs) == 3
        for output in outputs:
            assert output.policy.shape == (num_moves(5),)
            assert float(output.policy.sum()) == pytest.approx(1.0, abs=1e-5)
            assert -1.0 <= output.value <= 1.0

    def test_seeded_outputs_repeat(self) -> None:
        a, _ = RandomPredictor(board_size=5, seed=4).evaluate(_features(2))
        b, _ = RandomPredictor(board_size=5, seed=4).evaluate(_features(2))
        np.testing.assert_array_equal(a[1].policy, b[1].policy)
        assert a[1].value == b[1].value

    def test_empty_batch(self) -> None:
        outputs, model_id = RandomPredictor(board_size=5, model_id="r0").evaluate([])
        assert outputs == []
        assert model_id == "r0"


class TestTorchPredictor:
    """Tests for the PyTorch adapter."""

    @pytest.fixture
    def predictor(self) -> TorchPredictor:
        torch.manual_seed(0)
        return TorchPredictor(TinyNet(5), board_size=5, model_id="tiny-000")

    def test_model_in_eval_mode(self, predictor) -> None:
        assert not predictor.model.training

    def test_batch_outputs(self, predictor) -> None:
        outputs, model_id = predictor.evaluate(_features(4))
        assert model_id == "tiny-000"
        assert len(outputs) == 4
        for output in outputs:
            assert output.policy.shape == (num_moves(5),)
            assert float(output.policy.sum()) == pytest.approx(1.0, abs=1e-5)
            assert (output.policy >= 0).all()
            assert -1.0 <= output.value <= 1.0
            assert isinstance(output.value, float)

    def test_same_input_same_output(self, predictor) -> None:
        outputs, _ = predictor.evaluate(_features(2))
        np.testing.assert_allclose(outputs[0].policy, outputs[1].policy)

    def test_empty_batch(self, predictor) -> None:
        assert predictor.evaluate([]) == ([], "tiny-000")

    def test_no_gradients_recorded(self, predictor) -> None:
        predictor.evaluate(_features(1))
        assert all(p.grad is None for p in predictor.model.parameters())

    def test_wrong_policy_size_raises(self) -> None:
        predictor = TorchPredictor(TinyNet(5, policy_size=7), board_size=5, model_id="bad")
        with pytest.raises(ValueError):
            predictor.evaluate(_features(1))

    def test_drives_a_search(self) -> None:
        from gomcts.ai.mcts_player import MctsPlayer
        from gomcts.game import Game
        from gomcts.models import GameOptions, PlayerOptions

        torch.manual_seed(0)
        predictor = TorchPredictor(TinyNet(5), board_size=5, model_id="tiny-000")
        game = Game(GameOptions(board_size=5, resign_enabled=False))
        player = MctsPlayer(predictor, game, PlayerOptions(random_seed=0, virtual_losses=4))

        move = player.suggest_move(12)

        # Terminal double-pass leaves may add readouts on top of the budget.
        assert player.root.N >= 13
        assert player.root.position.legal_move(move)
        assert player.inferences[0].model_id == "tiny-000"
        assert player.root.position.to_play == Color.BLACK
