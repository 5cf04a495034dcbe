"""Per-move time allocation for time-budgeted search."""

from __future__ import annotations


def time_recommendation(
    move_num: int,
    seconds_per_move: float,
    time_limit: float,
    decay_factor: float,
) -> float:
    """Seconds to spend on the move with index ``move_num``.

    Time spend is modelled as a geometric series. Playing forever at
    ``seconds_per_move`` with each move taking ``decay_factor`` of the
    previous one costs ``seconds_per_move / (1 - decay_factor)`` in total;
    whatever the limit leaves over that endgame reserve is spent at the full
    base rate ("core" moves) before the decay kicks in. If the reserve alone
    exceeds ``time_limit`` the game is treated as already in its endgame.

    Only the player's own moves count, hence ``move_num // 2``.
    """
    if seconds_per_move <= 0:
        return 0.0

    player_move_num = move_num // 2
    endgame_time = seconds_per_move / (1.0 - decay_factor)

    if endgame_time > time_limit:
        base_time = time_limit * (1.0 - decay_factor)
        core_moves = 0
    else:
        base_time = seconds_per_move
        core_moves = int((time_limit - endgame_time) / seconds_per_move)

    return base_time * decay_factor ** max(player_move_num - core_moves, 0)
