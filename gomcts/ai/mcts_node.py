"""
Search tree node for AlphaZero-style MCTS.

Edge statistics (visit counts, accumulated values and priors of the moves
out of a position) are stored as numpy arrays on the node that owns the
position, so a child's own ``N`` and ``W`` are views into its parent's
arrays. The root of a tree has no parent and keeps its statistics in a small
private holder instead.

Values are always black-relative: +1 means a black win. Selection multiplies
by ``position.to_play`` to score moves from the perspective of the side that
chooses them.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional

import numpy as np

from ..coords import num_moves, to_gtp
from ..errors import InvalidStateError
from ..position import Position

# PUCT exploration schedule; c_puct grows slowly with the parent's visits.
C_PUCT_BASE = 19652
C_PUCT_INIT = 1.25

ILLEGAL_MOVE_PENALTY = 1000.0


class _RootStats:
    """Stands in for the missing parent of a tree root."""

    def __init__(self) -> None:
        self.child_N = np.zeros(1, dtype=np.float32)
        self.child_W = np.zeros(1, dtype=np.float32)


class MctsNode:
    """A node of the search tree, holding the position reached by ``fmove``."""

    def __init__(
        self,
        position: Position,
        fmove: Optional[int] = None,
        parent: Optional["MctsNode"] = None,
    ) -> None:
        self.position = position
        self.fmove = fmove
        self.parent = parent
        if parent is None:
            self._stats = _RootStats()
            self._stats_index = 0
        else:
            if fmove is None:
                raise ValueError("A child node needs the move that reached it")
            self._stats = parent
            self._stats_index = fmove

        self.is_expanded = False
        self.losses_applied = 0
        self.children: Dict[int, MctsNode] = {}

        size = num_moves(position.board_size)
        self.illegal_moves = (~position.legal_moves()).astype(np.float32)
        self.child_N = np.zeros(size, dtype=np.float32)
        self.child_W = np.zeros(size, dtype=np.float32)
        self.child_P = np.zeros(size, dtype=np.float32)
        self.child_original_P = np.zeros(size, dtype=np.float32)

    def __repr__(self) -> str:
        move = "root" if self.fmove is None else to_gtp(self.position.board_size, self.fmove)
        return f"<MctsNode move={move} N={self.N:g} to_play={self.position.to_play.name}>"

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    @property
    def N(self) -> float:
        return float(self._stats.child_N[self._stats_index])

    @N.setter
    def N(self, value: float) -> None:
        self._stats.child_N[self._stats_index] = value

    @property
    def W(self) -> float:
        return float(self._stats.child_W[self._stats_index])

    @W.setter
    def W(self, value: float) -> None:
        self._stats.child_W[self._stats_index] = value

    @property
    def Q(self) -> float:
        return self.W / (1.0 + self.N)

    @property
    def q_perspective(self) -> float:
        """Q from the point of view of the side to move at this node."""
        return self.Q * int(self.position.to_play)

    @property
    def child_Q(self) -> np.ndarray:
        return self.child_W / (1.0 + self.child_N)

    @property
    def child_U(self) -> np.ndarray:
        c_puct = 2.0 * (math.log((1.0 + self.N + C_PUCT_BASE) / C_PUCT_BASE) + C_PUCT_INIT)
        return c_puct * math.sqrt(max(1.0, self.N - 1)) * self.child_P / (1.0 + self.child_N)

    @property
    def child_action_score(self) -> np.ndarray:
        return (
            self.child_Q * int(self.position.to_play)
            + self.child_U
            - ILLEGAL_MOVE_PENALTY * self.illegal_moves
        )

    def is_terminal(self) -> bool:
        return self.position.is_game_over()

    def at_move_limit(self) -> bool:
        return self.position.at_move_limit()

    # ------------------------------------------------------------------
    # Tree navigation
    # ------------------------------------------------------------------

    def select_leaf(self) -> "MctsNode":
        """Descend by PUCT until reaching a node that has not been expanded."""
        current = self
        while current.is_expanded:
            best_move = int(np.argmax(current.child_action_score))
            current = current.maybe_add_child(best_move)
        return current

    def maybe_add_child(self, c: int) -> "MctsNode":
        """Return the child reached by ``c``, creating it on first use."""
        child = self.children.get(c)
        if child is None:
            child = MctsNode(self.position.play_move(c), fmove=c, parent=self)
            self.children[c] = child
        return child

    def prune_children(self, keep: int) -> None:
        """Drop every child subtree except the one reached by ``keep``."""
        kept = self.children.get(keep)
        self.children = {keep: kept} if kept is not None else {}

    def get_move_history(self, n: int) -> List[Position]:
        """Up to ``n`` positions ending here, most recent first."""
        history: List[Position] = []
        node: Optional[MctsNode] = self
        while node is not None and len(history) < n:
            history.append(node.position)
            node = node.parent
        return history

    # ------------------------------------------------------------------
    # Virtual loss and backup
    # ------------------------------------------------------------------

    def add_virtual_loss(self, up_to: "MctsNode") -> None:
        """Make this path look like a loss for the sides choosing it.

        ``W`` moves towards the side to move here, which is the opponent of
        the side that selected this node, so repeated descents in one batch
        are steered elsewhere.
        """
        node: MctsNode = self
        while True:
            node.losses_applied += 1
            node.W += int(node.position.to_play)
            if node.parent is None or node is up_to:
                return
            node = node.parent

    def revert_virtual_loss(self, up_to: "MctsNode") -> None:
        node: MctsNode = self
        while True:
            if node.losses_applied <= 0:
                raise InvalidStateError(
                    "Reverting a virtual loss that was never applied",
                    context={"node": repr(node)},
                )
            node.losses_applied -= 1
            node.W -= int(node.position.to_play)
            if node.parent is None or node is up_to:
                return
            node = node.parent

    def backup_value(self, value: float, up_to: "MctsNode") -> None:
        node: MctsNode = self
        while True:
            node.N += 1
            node.W += value
            if node.parent is None or node is up_to:
                return
            node = node.parent

    def incorporate_results(
        self,
        value_init_penalty: float,
        policy: np.ndarray,
        value: float,
        up_to: "MctsNode",
    ) -> None:
        """Expand this node with a predictor output and back the value up.

        The policy is renormalised over legal moves. Unvisited children start
        from the leaf value shifted against the side to move by
        ``value_init_penalty``. A node expanded twice in one batch only gets
        its value backed up the second time.
        """
        if self.is_expanded:
            self.backup_value(value, up_to)
            return

        move_probs = np.asarray(policy, dtype=np.float32) * (1.0 - self.illegal_moves)
        scale = float(move_probs.sum())
        if scale > 0:
            move_probs /= scale

        self.child_P = move_probs
        self.child_original_P = move_probs.copy()
        reduce = value_init_penalty * int(self.position.to_play)
        self.child_W = np.full(
            self.child_W.shape, np.clip(value - reduce, -1.0, 1.0), dtype=np.float32
        )
        self.is_expanded = True
        self.backup_value(value, up_to)

    def incorporate_end_game_result(self, value: float, up_to: "MctsNode") -> None:
        self.backup_value(value, up_to)

    def inject_noise(self, noise: np.ndarray, mix: float) -> None:
        """Mix exploration noise into the priors, restricted to legal moves."""
        legal_noise = np.asarray(noise, dtype=np.float32) * (1.0 - self.illegal_moves)
        total = float(legal_noise.sum())
        if total > 0:
            legal_noise /= total
        self.child_P = (1.0 - mix) * self.child_P + mix * legal_noise

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def most_visited_move(self) -> int:
        """Move with the most visits; ties go to the higher prior."""
        candidates = np.flatnonzero(self.child_N == self.child_N.max())
        return int(candidates[np.argmax(self.child_P[candidates])])

    def most_visited_path(self) -> List[int]:
        path: List[int] = []
        node = self
        while node.children:
            c = node.most_visited_move()
            if c not in node.children:
                break
            path.append(c)
            node = node.children[c]
        return path

    def describe(self, max_children: int = 15) -> str:
        board_size = self.position.board_size
        order = np.lexsort((self.child_action_score, self.child_N))[::-1]
        lines = [f"Q: {self.Q:.4f}"]
        lines.append("move : action    Q      U      P    P-orig     N")
        scores = self.child_action_score
        child_Q = self.child_Q
        child_U = self.child_U
        for c in order[:max_children]:
            if self.child_N[c] == 0 and self.child_P[c] == 0:
                continue
            lines.append(
                f"{to_gtp(board_size, int(c)):>4} : {scores[c]:+.3f} {child_Q[c]:+.3f} "
                f"{child_U[c]:.3f} {self.child_P[c]:.3f} {self.child_original_P[c]:.3f} "
                f"{int(self.child_N[c]):5d}"
            )
        path = " ".join(to_gtp(board_size, c) for c in self.most_visited_path())
        lines.append(f"Most visited path: {path}")
        return "\n".join(lines)
