"""
Pydantic Models for gomcts
Player and game options, plus the small enums shared across modules.
"""

from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, Field


class Color(IntEnum):
    """Stone color. The value doubles as the sign of black-relative values."""
    BLACK = 1
    WHITE = -1

    @property
    def other(self) -> "Color":
        return Color.WHITE if self is Color.BLACK else Color.BLACK


class GameOverReason(str, Enum):
    """Why a game ended"""
    NONE = "none"
    RESIGNATION = "resignation"
    MOVE_LIMIT = "move_limit"
    PASSES = "passes"


class GameOptions(BaseModel):
    """Rules and resignation settings of a game"""
    board_size: int = Field(9, ge=2, le=19, alias="boardSize")
    komi: float = 7.5
    resign_enabled: bool = Field(True, alias="resignEnabled")
    resign_threshold: float = Field(-0.95, ge=-1, le=0, alias="resignThreshold")

    class Config:
        populate_by_name = True
        frozen = True


class PlayerOptions(BaseModel):
    """Search settings of an MctsPlayer.

    ``seconds_per_move`` > 0 switches the search from a fixed readout count
    to a wall-clock budget; ``time_limit`` > 0 additionally shrinks that
    budget as the game goes on (see ``time_budget.time_recommendation``).
    """
    inject_noise: bool = Field(False, alias="injectNoise")
    soft_pick: bool = Field(True, alias="softPick")
    random_symmetry: bool = Field(True, alias="randomSymmetry")
    value_init_penalty: float = Field(2.0, ge=0, alias="valueInitPenalty")
    policy_softmax_temp: float = Field(0.98, gt=0, alias="policySoftmaxTemp")
    virtual_losses: int = Field(8, ge=1, alias="virtualLosses")
    num_readouts: int = Field(100, ge=1, alias="numReadouts")
    seconds_per_move: float = Field(0.0, ge=0, alias="secondsPerMove")
    time_limit: float = Field(0.0, ge=0, alias="timeLimit")
    decay_factor: float = Field(0.98, gt=0, lt=1, alias="decayFactor")
    fastplay_frequency: float = Field(0.0, ge=0, le=1, alias="fastplayFrequency")
    fastplay_readouts: int = Field(20, ge=1, alias="fastplayReadouts")
    tree_reuse: bool = Field(True, alias="treeReuse")
    prune_orphaned_nodes: bool = Field(True, alias="pruneOrphanedNodes")
    noise_mix: float = Field(0.25, ge=0, le=1, alias="noiseMix")
    random_seed: Optional[int] = Field(None, alias="randomSeed")

    class Config:
        populate_by_name = True
        frozen = True

    def describe(self) -> str:
        """One-line ``key:value`` rendering used in diagnostics."""
        return " ".join(f"{k}:{v}" for k, v in self.model_dump().items())
