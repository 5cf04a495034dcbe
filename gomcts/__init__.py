"""gomcts: neural-network-guided Monte Carlo Tree Search player for Go."""

from gomcts.coords import RESIGN
from gomcts.errors import (
    ConfigurationError,
    GameOverError,
    GoMctsError,
    InvalidMoveError,
    InvalidStateError,
    RulesViolationError,
)
from gomcts.game import Game, GameMove
from gomcts.models import Color, GameOptions, GameOverReason, PlayerOptions
from gomcts.position import Position

__version__ = "0.1.0"

__all__ = [
    "RESIGN",
    "Color",
    "ConfigurationError",
    "Game",
    "GameMove",
    "GameOptions",
    "GameOverError",
    "GameOverReason",
    "GoMctsError",
    "InvalidMoveError",
    "InvalidStateError",
    "PlayerOptions",
    "Position",
    "RulesViolationError",
]
