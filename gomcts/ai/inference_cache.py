"""Bounded inference cache with LRU eviction.

Stores predictor outputs (already de-augmented) keyed by the move that led
to a position together with the position itself, so leaves reached again
by a different path or in a later search skip the predictor. A single cache
may be shared by several players; writes are last-write-wins.

Lookups, evictions and the entry count are exported through the search
metrics, so a cache shared by many players shows up once in telemetry.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Hashable
from typing import Optional

import numpy as np

from ..metrics import (
    MCTS_INFERENCE_CACHE_EVICTIONS,
    MCTS_INFERENCE_CACHE_LOOKUPS,
    MCTS_INFERENCE_CACHE_SIZE,
)
from ..position import Position
from .predictor import PredictorOutput


class InferenceCache:
    """LRU-evicting map from (move, position) keys to predictor outputs."""

    def __init__(self, max_entries: int = 100_000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._outputs: OrderedDict[Hashable, PredictorOutput] = OrderedDict()
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @staticmethod
    def key(move: Optional[int], position: Position) -> Hashable:
        """Build the cache key for the leaf reached by ``move``.

        The full board, side to move and ko point are part of the key, so two
        different positions can never share an entry.
        """
        return (move, int(position.to_play), position.ko, position.board.tobytes())

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def try_get(self, key: Hashable) -> Optional[PredictorOutput]:
        """Look up a leaf evaluation; a hit becomes the most recently used entry."""
        output = self._outputs.get(key)
        if output is None:
            self.misses += 1
            MCTS_INFERENCE_CACHE_LOOKUPS.labels(outcome="miss").inc()
            return None
        self._outputs.move_to_end(key)
        self.hits += 1
        MCTS_INFERENCE_CACHE_LOOKUPS.labels(outcome="hit").inc()
        return output

    def add(self, key: Hashable, output: PredictorOutput) -> None:
        """Store a leaf evaluation, evicting the least recently used when full.

        The policy is kept as a read-only float32 copy, so the entry cannot
        change after the predictor's buffer is reused or edited in place.
        """
        policy = np.array(output.policy, dtype=np.float32)
        policy.setflags(write=False)
        entry = PredictorOutput(policy=policy, value=float(output.value))

        if key in self._outputs:
            self._outputs.move_to_end(key)
        elif len(self._outputs) >= self.max_entries:
            self._outputs.popitem(last=False)
            self.evictions += 1
            MCTS_INFERENCE_CACHE_EVICTIONS.inc()
        self._outputs[key] = entry
        MCTS_INFERENCE_CACHE_SIZE.set(len(self._outputs))

    def __contains__(self, key: Hashable) -> bool:
        return key in self._outputs

    def __len__(self) -> int:
        return len(self._outputs)

    def __repr__(self) -> str:
        return (
            f"InferenceCache(entries={len(self._outputs)}/{self.max_entries}, "
            f"hit_rate={self.hit_rate:.3f}, evictions={self.evictions})"
        )
