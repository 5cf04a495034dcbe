"""Smoke tests for complete self-play games."""

import pytest

from gomcts.ai.mcts_player import MctsPlayer
from gomcts.ai.predictor import RandomPredictor
from gomcts.ai.selfplay import play_selfplay_game
from gomcts.errors import InvalidMoveError
from gomcts.game import Game
from gomcts.models import GameOptions, GameOverReason, PlayerOptions


@pytest.fixture
def small_player() -> MctsPlayer:
    game = Game(GameOptions(board_size=5, resign_enabled=False))
    options = PlayerOptions(num_readouts=8, virtual_losses=4, random_seed=1)
    return MctsPlayer(RandomPredictor(board_size=5, seed=1), game, options)


def test_game_runs_to_completion(small_player) -> None:
    game = play_selfplay_game(small_player)

    assert game.game_over
    assert game.game_over_reason in (GameOverReason.PASSES, GameOverReason.MOVE_LIMIT)
    assert 0 < game.move_count <= 50
    assert game.result_string() != "Void" or game.score == 0
    assert all(move.trainable for move in game.moves)
    assert small_player.models_used_for_inference().startswith("random(0,")


def test_max_moves_stops_early(small_player) -> None:
    game = play_selfplay_game(small_player, max_moves=3)
    assert game.move_count == 3
    assert not game.game_over


def test_starts_a_new_game_each_time(small_player) -> None:
    play_selfplay_game(small_player, max_moves=2)
    game = play_selfplay_game(small_player, max_moves=1)
    assert game.move_count == 1


def test_rejected_suggestion_raises(small_player, monkeypatch) -> None:
    monkeypatch.setattr(small_player, "play_move", lambda c: False)
    with pytest.raises(InvalidMoveError):
        play_selfplay_game(small_player)


def test_seeded_games_repeat() -> None:
    def _play():
        game = Game(GameOptions(board_size=5, resign_enabled=False))
        options = PlayerOptions(num_readouts=8, virtual_losses=4, random_seed=9)
        player = MctsPlayer(RandomPredictor(board_size=5, seed=9), game, options)
        return [m.c for m in play_selfplay_game(player).moves]

    assert _play() == _play()
