"""Drive a single self-play game with one player controlling both colors."""

from __future__ import annotations

import logging
from typing import Optional

from ..coords import to_gtp
from ..errors import InvalidMoveError
from ..game import Game
from .mcts_player import MctsPlayer

logger = logging.getLogger(__name__)


def play_selfplay_game(player: MctsPlayer, max_moves: Optional[int] = None) -> Game:
    """Play from a fresh game until it ends (or ``max_moves`` are played).

    Returns the player's game record. A move the player refuses after
    suggesting it means the search and the rules disagree, which is raised
    as ``InvalidMoveError``.
    """
    player.new_game()
    game = player.game
    num_played = 0

    while not game.game_over:
        if max_moves is not None and num_played >= max_moves:
            logger.info(f"Stopping self-play after {num_played} moves")
            break
        move = player.suggest_move()
        if not player.play_move(move):
            raise InvalidMoveError(
                f"Player rejected its own move {to_gtp(player.board_size, move)}",
                move=move,
                context={"n": player.root.position.n},
            )
        num_played += 1

    logger.info(
        f"Self-play game finished after {game.move_count} moves: "
        f"{game.result_string()} ({player.models_used_for_inference()})"
    )
    return game
