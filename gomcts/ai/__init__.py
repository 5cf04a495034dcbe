"""Search components of gomcts.

    from gomcts.ai import MctsPlayer, RandomPredictor

    player = MctsPlayer(RandomPredictor(board_size=9), Game())
    move = player.suggest_move()
    player.play_move(move)

Architecture:
- mcts_player.py: leaf selection, batched evaluation, search loop, move
  selection and game recording
- mcts_node.py: PUCT search tree node
- interfaces.py: SearchNode protocol the player relies on
- predictor.py: Predictor contract, RandomPredictor and TorchPredictor
- inference_cache.py: LRU cache of predictor outputs
- features.py / symmetries.py: network inputs and D4 augmentation
- time_budget.py: per-move time allocation
- selfplay.py: one complete self-play game
"""

from gomcts.ai.features import MOVE_HISTORY, NUM_FEATURES, set_features
from gomcts.ai.interfaces import SearchNode
from gomcts.ai.symmetries import NUM_SYMMETRIES, Symmetry
from gomcts.ai.time_budget import time_recommendation

# Modules below pull in torch; load them on first use
_LAZY_ATTRIBUTES = {
    "InferenceCache": "gomcts.ai.inference_cache",
    "InferenceRecord": "gomcts.ai.mcts_player",
    "MctsNode": "gomcts.ai.mcts_node",
    "MctsPlayer": "gomcts.ai.mcts_player",
    "Predictor": "gomcts.ai.predictor",
    "PredictorOutput": "gomcts.ai.predictor",
    "RandomPredictor": "gomcts.ai.predictor",
    "TorchPredictor": "gomcts.ai.predictor",
    "play_selfplay_game": "gomcts.ai.selfplay",
}


def __getattr__(name: str):
    """Lazy loading for the predictor-backed components."""
    if name in _LAZY_ATTRIBUTES:
        import importlib
        module = importlib.import_module(_LAZY_ATTRIBUTES[name])
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "MOVE_HISTORY",
    "NUM_FEATURES",
    "NUM_SYMMETRIES",
    "InferenceCache",
    "InferenceRecord",
    "MctsNode",
    "MctsPlayer",
    "Predictor",
    "PredictorOutput",
    "RandomPredictor",
    "SearchNode",
    "Symmetry",
    "TorchPredictor",
    "play_selfplay_game",
    "set_features",
    "time_recommendation",
]
