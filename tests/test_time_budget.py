"""Tests for the per-move time allocation."""

import pytest

from gomcts.ai.time_budget import time_recommendation


class TestTimeRecommendation:
    """Tests for time_recommendation."""

    def test_core_moves_use_full_rate(self) -> None:
        """50s of endgame reserve fits in 100s, leaving 50 core moves."""
        assert time_recommendation(0, 1.0, 100.0, 0.98) == pytest.approx(1.0)
        assert time_recommendation(99, 1.0, 100.0, 0.98) == pytest.approx(1.0)

    def test_decay_after_core_moves(self) -> None:
        # Move 120 is the player's 60th, ten past the core moves.
        assert time_recommendation(120, 1.0, 100.0, 0.98) == pytest.approx(0.98**10)

    def test_only_own_moves_count(self) -> None:
        assert time_recommendation(121, 1.0, 100.0, 0.98) == time_recommendation(
            120, 1.0, 100.0, 0.98
        )

    def test_already_in_endgame(self) -> None:
        """A limit smaller than the reserve spreads the limit geometrically."""
        assert time_recommendation(0, 1.0, 10.0, 0.98) == pytest.approx(0.2)
        assert time_recommendation(20, 1.0, 10.0, 0.98) == pytest.approx(0.2 * 0.98**10)

    def test_core_moves_are_whole(self) -> None:
        # Reserve is 6s, so (10 - 6) / 1.5 rounds down to 2 core moves.
        assert time_recommendation(4, 1.5, 10.0, 0.75) == pytest.approx(1.5)
        assert time_recommendation(6, 1.5, 10.0, 0.75) == pytest.approx(1.5 * 0.75)

    def test_total_time_stays_within_limit(self) -> None:
        total = sum(time_recommendation(n, 1.0, 100.0, 0.98) for n in range(0, 2000, 2))
        assert total <= 100.0 + 1e-6

    def test_no_base_rate(self) -> None:
        assert time_recommendation(10, 0.0, 100.0, 0.98) == 0.0
