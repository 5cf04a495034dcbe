"""Tests for the option models."""

import pytest
from pydantic import ValidationError

from gomcts.models import Color, GameOptions, PlayerOptions


class TestPlayerOptions:
    """Tests for PlayerOptions."""

    def test_defaults(self) -> None:
        options = PlayerOptions()
        assert options.virtual_losses == 8
        assert options.num_readouts == 100
        assert options.value_init_penalty == 2.0
        assert options.policy_softmax_temp == 0.98
        assert options.tree_reuse is True
        assert options.random_seed is None

    def test_populate_by_alias(self) -> None:
        options = PlayerOptions(numReadouts=5, virtualLosses=2)
        assert options.num_readouts == 5
        assert options.virtual_losses == 2

    def test_frozen(self) -> None:
        options = PlayerOptions()
        with pytest.raises(ValidationError):
            options.num_readouts = 3

    @pytest.mark.parametrize(
        "field,value",
        [
            ("virtual_losses", 0),
            ("num_readouts", 0),
            ("decay_factor", 1.0),
            ("fastplay_frequency", 1.5),
            ("noise_mix", -0.1),
        ],
    )
    def test_rejects_invalid_values(self, field, value) -> None:
        with pytest.raises(ValidationError):
            PlayerOptions(**{field: value})

    def test_describe(self) -> None:
        text = PlayerOptions(num_readouts=7).describe()
        assert "num_readouts:7" in text
        assert "tree_reuse:True" in text


class TestGameOptions:
    """Tests for GameOptions."""

    def test_defaults(self) -> None:
        options = GameOptions()
        assert options.board_size == 9
        assert options.komi == 7.5
        assert options.resign_enabled is True
        assert options.resign_threshold == -0.95

    def test_board_size_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GameOptions(board_size=20)

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            GameOptions().komi = 6.5


def test_color_other() -> None:
    assert Color.BLACK.other == Color.WHITE
    assert Color.WHITE.other == Color.BLACK
    assert int(Color.WHITE) == -1
