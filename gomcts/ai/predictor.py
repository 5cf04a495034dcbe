"""Policy/value predictors used by the search.

A predictor evaluates a batch of feature tensors in one call and reports the
identifier of the model that served the batch. ``TorchPredictor`` adapts any
``torch.nn.Module`` returning ``(policy_logits, value)``; ``RandomPredictor``
needs no model at all and is handy for bring-up and tests.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F

from ..coords import num_moves

logger = logging.getLogger(__name__)


@dataclass
class PredictorOutput:
    """Policy over the full move space (points then pass) and a black-relative value."""

    policy: np.ndarray
    value: float


class Predictor(ABC):
    """Batched policy/value evaluation contract."""

    @abstractmethod
    def evaluate(
        self, features: Sequence[np.ndarray]
    ) -> Tuple[List[PredictorOutput], str]:
        """
        Evaluate a batch of feature tensors.

        Args:
            features: ``(C, N, N)`` tensors, one per leaf.

        Returns:
            Outputs index-aligned with ``features`` and the model identifier.
            An empty batch returns an empty list.
        """


class RandomPredictor(Predictor):
    """Predictor producing random priors and values from a seeded generator."""

    def __init__(
        self,
        board_size: int,
        seed: Optional[int] = None,
        model_id: str = "random",
        policy_alpha: float = 0.3,
    ) -> None:
        self.board_size = board_size
        self.model_id = model_id
        self.policy_alpha = policy_alpha
        self._rng = np.random.default_rng(seed)

    def evaluate(
        self, features: Sequence[np.ndarray]
    ) -> Tuple[List[PredictorOutput], str]:
        size = num_moves(self.board_size)
        outputs = []
        for _ in features:
            policy = self._rng.dirichlet([self.policy_alpha] * size).astype(np.float32)
            value = float(self._rng.uniform(-1.0, 1.0))
            outputs.append(PredictorOutput(policy=policy, value=value))
        return outputs, self.model_id


class TorchPredictor(Predictor):
    """Wrapper running a PyTorch dual-headed network on a batch of leaves."""

    def __init__(
        self,
        model: nn.Module,
        board_size: int,
        model_id: str,
        device: Optional[torch.device] = None,
    ) -> None:
        self.board_size = board_size
        self.model_id = model_id
        self.device = device or torch.device("cpu")
        self.model = model.to(self.device)
        self.model.eval()

    def evaluate(
        self, features: Sequence[np.ndarray]
    ) -> Tuple[List[PredictorOutput], str]:
        if not features:
            return [], self.model_id

        batch = torch.from_numpy(np.stack(features).astype(np.float32)).to(self.device)
        with torch.no_grad():
            policy_logits, value = self.model(batch)
        policy = F.softmax(policy_logits, dim=1).cpu().numpy()
        values = value.reshape(-1).clamp(-1.0, 1.0).cpu().numpy()

        expected = num_moves(self.board_size)
        if policy.shape != (len(features), expected):
            raise ValueError(
                f"Model {self.model_id} returned policy of shape {policy.shape}, "
                f"expected ({len(features)}, {expected})"
            )
        logger.debug(f"{self.model_id} evaluated batch of {len(features)}")
        return [
            PredictorOutput(policy=policy[i], value=float(values[i]))
            for i in range(len(features))
        ], self.model_id
