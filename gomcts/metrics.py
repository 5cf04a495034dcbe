"""Prometheus metrics for the gomcts search player.

This module centralises counters, gauges and histograms so the player can
record lightweight telemetry without each component having to manage its
own metric instances. Label sets are kept small so that local/dev
Prometheus setups can scrape them cheaply.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Gauge, Histogram


MCTS_READOUTS: Final[Counter] = Counter(
    "gomcts_readouts_total",
    (
        "Total number of leaf readouts backed up into the search tree, "
        "labeled by how the leaf value was obtained."
    ),
    labelnames=("outcome",),
)

MCTS_BATCH_SIZE: Final[Histogram] = Histogram(
    "gomcts_inference_batch_size",
    "Number of leaves sent to the predictor per batched call.",
    buckets=(1, 2, 4, 8, 16, 32, 64, 128),
)

MCTS_INFERENCE_CACHE_LOOKUPS: Final[Counter] = Counter(
    "gomcts_inference_cache_lookups_total",
    "Total inference cache lookups during leaf selection, labeled by outcome.",
    labelnames=("outcome",),
)

MCTS_INFERENCE_CACHE_EVICTIONS: Final[Counter] = Counter(
    "gomcts_inference_cache_evictions_total",
    "Total least-recently-used entries evicted from inference caches.",
)

MCTS_INFERENCE_CACHE_SIZE: Final[Gauge] = Gauge(
    "gomcts_inference_cache_size",
    "Number of entries in the most recently written inference cache.",
)

MCTS_SEARCH_SECONDS: Final[Histogram] = Histogram(
    "gomcts_search_seconds",
    (
        "Wall-clock time spent searching per suggested move, labeled by "
        "whether the search was budgeted by readouts or by time."
    ),
    labelnames=("mode",),
    buckets=(
        0.01,
        0.05,
        0.1,
        0.5,
        1.0,
        2.0,
        5.0,
        10.0,
        30.0,
    ),
)

MCTS_MOVES: Final[Counter] = Counter(
    "gomcts_moves_total",
    "Total play attempts handled by the player, labeled by outcome.",
    labelnames=("outcome",),
)
