"""
Shared pytest fixtures for gomcts tests.

Game and player fixtures are function-scoped so every test gets its own
tree, game record and random generator.
"""

from typing import Callable, List, Optional, Sequence

import numpy as np
import pytest

from gomcts.ai.inference_cache import InferenceCache
from gomcts.ai.mcts_player import MctsPlayer
from gomcts.ai.predictor import Predictor, PredictorOutput
from gomcts.coords import num_moves
from gomcts.game import Game
from gomcts.models import GameOptions, PlayerOptions


# =============================================================================
# STUB PREDICTORS
# =============================================================================


class UniformPredictor(Predictor):
    """Uniform prior over board points (never pass) and a constant value.

    Records the size of every batch it is asked to evaluate.
    """

    def __init__(self, board_size: int = 9, value: float = 0.0, model_id: str = "uniform"):
        self.board_size = board_size
        self.value = value
        self.model_id = model_id
        self.batch_sizes: List[int] = []

    def evaluate(self, features: Sequence[np.ndarray]):
        self.batch_sizes.append(len(features))
        points = self.board_size * self.board_size
        policy = np.zeros(num_moves(self.board_size), dtype=np.float32)
        policy[:points] = 1.0 / points
        return [
            PredictorOutput(policy=policy.copy(), value=self.value) for _ in features
        ], self.model_id


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def game_options() -> GameOptions:
    """9x9 rules with resignation disabled."""
    return GameOptions(board_size=9, komi=7.5, resign_enabled=False)


@pytest.fixture
def game(game_options: GameOptions) -> Game:
    return Game(game_options)


@pytest.fixture
def uniform_predictor() -> UniformPredictor:
    return UniformPredictor(board_size=9)


@pytest.fixture
def make_player(
    game_options: GameOptions, uniform_predictor: UniformPredictor
) -> Callable[..., MctsPlayer]:
    """Factory for players; keyword arguments override PlayerOptions fields."""

    def _make(
        predictor: Optional[Predictor] = None,
        game: Optional[Game] = None,
        inference_cache: Optional[InferenceCache] = None,
        **overrides,
    ) -> MctsPlayer:
        fields = {"random_seed": 0}
        fields.update(overrides)
        return MctsPlayer(
            predictor or uniform_predictor,
            game or Game(game_options),
            PlayerOptions(**fields),
            inference_cache=inference_cache,
        )

    return _make


@pytest.fixture
def player(make_player: Callable[..., MctsPlayer]) -> MctsPlayer:
    """Default 9x9 player over the uniform predictor."""
    return make_player()
