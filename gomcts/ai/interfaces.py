"""Capability contract of the search tree as seen by the player.

``MctsPlayer`` only talks to nodes through the members listed here, so tests
may substitute lightweight fakes for ``MctsNode``.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

import numpy as np

from ..position import Position


class SearchNode(Protocol):
    position: Position
    fmove: Optional[int]
    parent: Optional["SearchNode"]
    children: Dict[int, "SearchNode"]
    is_expanded: bool
    losses_applied: int
    child_N: np.ndarray

    @property
    def N(self) -> float: ...

    @property
    def Q(self) -> float: ...

    @property
    def q_perspective(self) -> float: ...

    def select_leaf(self) -> "SearchNode": ...

    def incorporate_results(
        self,
        value_init_penalty: float,
        policy: np.ndarray,
        value: float,
        up_to: "SearchNode",
    ) -> None: ...

    def incorporate_end_game_result(self, value: float, up_to: "SearchNode") -> None: ...

    def add_virtual_loss(self, up_to: "SearchNode") -> None: ...

    def revert_virtual_loss(self, up_to: "SearchNode") -> None: ...

    def maybe_add_child(self, c: int) -> "SearchNode": ...

    def prune_children(self, keep: int) -> None: ...

    def most_visited_move(self) -> int: ...

    def inject_noise(self, noise: np.ndarray, mix: float) -> None: ...

    def is_terminal(self) -> bool: ...

    def at_move_limit(self) -> bool: ...

    def get_move_history(self, n: int) -> List[Position]: ...

    def describe(self) -> str: ...
