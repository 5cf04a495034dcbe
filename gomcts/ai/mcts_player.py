"""
Neural-network-guided MCTS player.

One search round selects a batch of leaves (virtual losses keep the batch
diverse), evaluates them with a single predictor call under random board
symmetries, and backs the results up. ``suggest_move`` repeats rounds until
a readout or wall-clock budget is spent and then picks a move from the root
visit counts; ``play_move`` commits a move to the game record and advances
the tree, reusing the chosen subtree.

All randomness (symmetries, root noise, move sampling, fastplay) is drawn
from ``self.rng``, seeded from ``PlayerOptions.random_seed``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..coords import RESIGN, num_moves, to_gtp
from ..errors import ConfigurationError, InvalidStateError
from ..game import Game
from ..metrics import (
    MCTS_BATCH_SIZE,
    MCTS_MOVES,
    MCTS_READOUTS,
    MCTS_SEARCH_SECONDS,
)
from ..models import PlayerOptions
from ..position import Position
from .features import MOVE_HISTORY, set_features
from .inference_cache import InferenceCache
from .interfaces import SearchNode
from .mcts_node import MctsNode
from .predictor import Predictor, PredictorOutput
from .symmetries import (
    NUM_SYMMETRIES,
    Symmetry,
    apply_symmetry_planes,
    apply_symmetry_policy,
    inverse,
)
from .time_budget import time_recommendation

logger = logging.getLogger(__name__)

# Dirichlet concentration tuned for 19x19; scaled by the number of points.
DIRICHLET_ALPHA_19 = 0.03

TreeSearchCallback = Callable[[Sequence[SearchNode]], None]


@dataclass
class InferenceRecord:
    """Span of moves during which one model served the search."""

    model_id: str
    first_move: int
    last_move: int
    total_count: int = 0


class MctsPlayer:
    """Plays one game at a time by batched MCTS over a policy/value predictor."""

    def __init__(
        self,
        predictor: Predictor,
        game: Game,
        options: Optional[PlayerOptions] = None,
        inference_cache: Optional[InferenceCache] = None,
    ) -> None:
        self.predictor = predictor
        self.game = game
        self.options = options or PlayerOptions()
        self.inference_cache = inference_cache
        self.board_size = game.options.board_size

        predictor_size = getattr(predictor, "board_size", self.board_size)
        if predictor_size != self.board_size:
            raise ConfigurationError(
                "Predictor and game disagree on the board size",
                context={"predictor": predictor_size, "game": self.board_size},
            )

        self.rng = np.random.default_rng(self.options.random_seed)

        # Sample moves proportionally to visits for roughly the first 1/12th
        # of the board's points (rounded to even so both sides get the same
        # number of soft-picked moves); play greedily afterwards.
        if self.options.soft_pick:
            self.temperature_cutoff = ((self.board_size * self.board_size // 12) // 2) * 2
        else:
            self.temperature_cutoff = -1

        # Lives as long as the player; new games do not reset it.
        self.inferences: List[InferenceRecord] = []
        self._tree_search_callback: Optional[TreeSearchCallback] = None
        self._search_is_trainable = True

        self.game_root: MctsNode
        self.root: MctsNode
        self.new_game()

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------

    def new_game(self) -> None:
        self.initialize_game(Position(self.board_size))

    def initialize_game(self, position: Position) -> None:
        """Start a fresh game (and tree) from ``position``."""
        if position.board_size != self.board_size:
            raise ConfigurationError(
                "Initial position has the wrong board size",
                context={"position": position.board_size, "player": self.board_size},
            )
        self.game_root = MctsNode(position)
        self.root = self.game_root
        self.game.new_game()
        logger.info(f"New {self.board_size}x{self.board_size} game")

    def set_tree_search_callback(self, cb: Optional[TreeSearchCallback]) -> None:
        """Register an observer called with every processed batch of leaves."""
        self._tree_search_callback = cb

    def models_used_for_inference(self) -> str:
        return ", ".join(
            f"{r.model_id}({r.first_move},{r.last_move})" for r in self.inferences
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def suggest_move(
        self,
        new_readouts: Optional[int] = None,
        inject_noise: Optional[bool] = None,
    ) -> int:
        """Search from the current root and return the move to play.

        With no explicit ``new_readouts`` the options decide: usually
        ``num_readouts``, but with probability ``fastplay_frequency`` a short
        noiseless ``fastplay_readouts`` search whose move is not trainable.

        Returns:
            A flat move index, or ``RESIGN`` when the position looks lost.
        """
        opts = self.options
        if inject_noise is None:
            inject_noise = opts.inject_noise
        self._search_is_trainable = True
        if new_readouts is None:
            if opts.fastplay_frequency > 0 and self.rng.random() < opts.fastplay_frequency:
                new_readouts = opts.fastplay_readouts
                inject_noise = False
                self._search_is_trainable = False
            else:
                new_readouts = opts.num_readouts

        start = time.time()

        if not self.root.is_expanded:
            leaves = self.select_leaves(self.root, 1)
            self.process_leaves(leaves, opts.random_symmetry)

        if inject_noise:
            self._inject_root_noise()

        current_readouts = self.root.N

        if opts.seconds_per_move > 0:
            seconds_per_move = opts.seconds_per_move
            if opts.time_limit > 0:
                seconds_per_move = time_recommendation(
                    self.root.position.n,
                    seconds_per_move,
                    opts.time_limit,
                    opts.decay_factor,
                )
            end_time = start + seconds_per_move
            while time.time() < end_time:
                self.tree_search()
            MCTS_SEARCH_SECONDS.labels(mode="time").observe(time.time() - start)
        else:
            target = current_readouts + new_readouts
            while self.root.N < target:
                self.tree_search(min(opts.virtual_losses, int(target - self.root.N)))
            MCTS_SEARCH_SECONDS.labels(mode="readouts").observe(time.time() - start)

        logger.debug(
            f"Searched move {self.root.position.n}: N={self.root.N:g} "
            f"Q={self.root.Q:.4f} in {time.time() - start:.3f}s"
        )
        if self.inference_cache is not None:
            logger.debug(
                f"Inference cache after move {self.root.position.n}: {self.inference_cache!r}"
            )

        if self.should_resign():
            logger.info(
                f"{self.root.position.to_play.name} resigns at move "
                f"{self.root.position.n} (Q={self.root.q_perspective:.4f})"
            )
            return RESIGN

        return self.pick_move()

    def _inject_root_noise(self) -> None:
        alpha = DIRICHLET_ALPHA_19 * 361 / (self.board_size * self.board_size)
        noise = self.rng.dirichlet([alpha] * num_moves(self.board_size))
        self.root.inject_noise(noise, self.options.noise_mix)

    def should_resign(self) -> bool:
        game_options = self.game.options
        return (
            game_options.resign_enabled
            and self.root.q_perspective < game_options.resign_threshold
        )

    def tree_search(self, num_leaves: Optional[int] = None) -> None:
        """Run one select/evaluate round from the current root."""
        if num_leaves is None:
            num_leaves = self.options.virtual_losses
        leaves = self.select_leaves(self.root, num_leaves)
        self.process_leaves(leaves, self.options.random_symmetry)

    def select_leaves(self, root: SearchNode, num_leaves: int) -> List[SearchNode]:
        """Collect up to ``num_leaves`` leaves that need a predictor call.

        Terminal leaves and inference cache hits are backed up on the spot.
        Every returned entry adds one virtual loss up to ``root``; a leaf
        chosen twice appears twice and carries two. Terminal
        leaves count against the ``2 * num_leaves`` attempt bound, cache hits
        do not.
        """
        komi = self.game.options.komi
        max_cache_misses = 2 * num_leaves
        cache_misses = 0
        leaves: List[SearchNode] = []

        while cache_misses < max_cache_misses:
            leaf = root.select_leaf()

            if leaf.is_terminal() or leaf.at_move_limit():
                value = 1.0 if leaf.position.calculate_score(komi) > 0 else -1.0
                leaf.incorporate_end_game_result(value, root)
                MCTS_READOUTS.labels(outcome="terminal").inc()
                cache_misses += 1
                continue

            if self.inference_cache is not None:
                key = InferenceCache.key(leaf.fmove, leaf.position)
                cached = self.inference_cache.try_get(key)
                if cached is not None:
                    MCTS_READOUTS.labels(outcome="cached").inc()
                    leaf.incorporate_results(
                        self.options.value_init_penalty, cached.policy, cached.value, root
                    )
                    continue

            cache_misses += 1
            leaf.add_virtual_loss(root)
            leaves.append(leaf)
            if len(leaves) == num_leaves:
                break
            if leaf is root:
                # An unexpanded root is the only leaf there is.
                break

        return leaves

    def _choose_symmetries(self, count: int, random_symmetry: bool) -> List[Symmetry]:
        if not random_symmetry:
            return [Symmetry.IDENTITY] * count
        return [Symmetry(int(s)) for s in self.rng.integers(0, NUM_SYMMETRIES, size=count)]

    def process_leaves(self, leaves: Sequence[SearchNode], random_symmetry: bool) -> None:
        """Evaluate a batch of leaves in one predictor call and back up the results."""
        if not leaves:
            return

        symmetries = self._choose_symmetries(len(leaves), random_symmetry)

        features = []
        for leaf, sym in zip(leaves, symmetries):
            if leaf.losses_applied <= 0:
                raise InvalidStateError(
                    "Leaf queued for evaluation without a virtual loss",
                    context={"leaf": repr(leaf)},
                )
            history = leaf.get_move_history(MOVE_HISTORY)
            raw = set_features(history, leaf.position.to_play)
            features.append(apply_symmetry_planes(sym, raw))

        outputs, model_id = self.predictor.evaluate(features)
        if len(outputs) != len(leaves):
            raise InvalidStateError(
                "Predictor returned a misaligned batch",
                context={"leaves": len(leaves), "outputs": len(outputs), "model": model_id},
            )
        MCTS_BATCH_SIZE.observe(len(leaves))
        self._record_inference(model_id, len(leaves))

        for leaf, sym, output in zip(leaves, symmetries, outputs):
            policy = apply_symmetry_policy(inverse(sym), output.policy, self.board_size)
            leaf.incorporate_results(
                self.options.value_init_penalty, policy, output.value, self.root
            )
            if self.inference_cache is not None:
                key = InferenceCache.key(leaf.fmove, leaf.position)
                self.inference_cache.add(key, PredictorOutput(policy=policy, value=output.value))
            leaf.revert_virtual_loss(self.root)
        MCTS_READOUTS.labels(outcome="evaluated").inc(len(leaves))

        if self._tree_search_callback is not None:
            self._tree_search_callback(leaves)

    def _record_inference(self, model_id: str, count: int) -> None:
        if not model_id:
            return
        n = self.root.position.n
        if not self.inferences or self.inferences[-1].model_id != model_id:
            if self.inferences:
                logger.debug(f"Inference model changed to {model_id} at move {n}")
            self.inferences.append(InferenceRecord(model_id, first_move=n, last_move=n))
        record = self.inferences[-1]
        record.last_move = n
        record.total_count += count

    # ------------------------------------------------------------------
    # Move selection
    # ------------------------------------------------------------------

    def pick_move(self) -> int:
        """Choose a move from the root visit counts.

        Before the temperature cutoff the move is sampled in proportion to
        ``N ** policy_softmax_temp`` over board points only, so an immature
        model does not pass early by chance. After it, the most visited move
        is played.
        """
        root = self.root
        if root.position.n >= self.temperature_cutoff:
            return root.most_visited_move()

        points = self.board_size * self.board_size
        cdf = np.cumsum(
            np.power(root.child_N[:points].astype(np.float64), self.options.policy_softmax_temp)
        )
        if cdf[-1] == 0:
            # All visits went to pass.
            logger.warning(
                f"No visits on board points at move {root.position.n}, passing"
            )
            return root.position.pass_move

        e = self.rng.random()
        c = int(np.searchsorted(cdf, e * cdf[-1], side="right"))
        if root.child_N[c] == 0:
            raise InvalidStateError(
                "Sampled a move with no visits",
                context={"move": to_gtp(self.board_size, c)},
            )
        return c

    # ------------------------------------------------------------------
    # Playing moves
    # ------------------------------------------------------------------

    def play_move(self, c: int) -> bool:
        """Commit ``c`` to the game and advance the root.

        Returns False, leaving the tree untouched, if the game is already over
        or the move is illegal.
        """
        if self.root.is_terminal() or self.game.game_over:
            logger.error(f"Can't play move {to_gtp(self.board_size, c)}, game is over")
            MCTS_MOVES.labels(outcome="game_over").inc()
            return False

        if c == RESIGN:
            self.game.mark_over_by_resignation(self.root.position.to_play.other)
            MCTS_MOVES.labels(outcome="resigned").inc()
            return True

        if not self.root.position.legal_move(c):
            logger.error(f"Move {to_gtp(self.board_size, c)} is illegal")
            logger.error(f"MctsPlayer options: {self.options.describe()}")
            logger.error(f"Game options: {self.game.options}")
            for move in self.game.moves:
                logger.error(f"{move.color.name}  {to_gtp(self.board_size, move.c)}")
            MCTS_MOVES.labels(outcome="illegal").inc()
            return False

        self.update_game(c)
        if self._search_is_trainable:
            self.game.mark_last_move_as_trainable()
        self._search_is_trainable = True

        if self.options.tree_reuse:
            self.root = self.root.maybe_add_child(c)
            if self.options.prune_orphaned_nodes:
                self.root.parent.prune_children(c)
                logger.debug(f"Pruned siblings of {to_gtp(self.board_size, c)}")
        else:
            self.root.children.clear()
            self.root = self.root.maybe_add_child(c)

        MCTS_MOVES.labels(outcome="played").inc()

        position = self.root.position
        if self.root.at_move_limit():
            self.game.mark_over_by_move_limit(position.calculate_score(self.game.options.komi))
        elif self.root.is_terminal():
            self.game.mark_over_by_passes(position.calculate_score(self.game.options.komi))

        return True

    def update_game(self, c: int) -> None:
        """Record ``c`` together with the search statistics of the root."""
        root = self.root
        n = root.position.n

        models: List[str] = []
        for record in reversed(self.inferences):
            if record.last_move < n:
                break
            models.append(record.model_id)
        models.reverse()

        comment = root.describe()
        if models:
            comment = f"models:{','.join(models)}\n{comment}"

        if n < self.temperature_cutoff:
            # Squashed like pick_move so the recorded target matches the sampling.
            search_pi = np.power(
                root.child_N.astype(np.float64), self.options.policy_softmax_temp
            )
        else:
            search_pi = root.child_N.astype(np.float64)
        total = search_pi.sum()
        if total > 0:
            search_pi = search_pi / total
        else:
            search_pi = np.zeros_like(search_pi)
            search_pi[c] = 1.0

        self.game.add_move(
            root.position.to_play,
            c,
            root.position.stones(),
            comment,
            root.Q,
            search_pi.astype(np.float32),
            models,
        )

    def undo_move(self) -> bool:
        """Step back one move. Returns False at the start of the game."""
        if self.root is self.game_root or self.root.parent is None:
            return False
        self.root = self.root.parent
        self.game.undo_move()

        if not self.options.tree_reuse:
            # Forget the subtree searched before the move; the edge statistics
            # of the root itself live in its parent and are kept.
            fresh = MctsNode(self.root.position, self.root.fmove, self.root.parent)
            if self.root.parent is not None:
                self.root.parent.children[self.root.fmove] = fresh
            else:
                self.game_root = fresh
            self.root = fresh
        return True
