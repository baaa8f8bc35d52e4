"""All Fives (Muggins): score whenever the open ends total a multiple of five."""

from typing import Optional

from constants import FIVES_DOUBLE_BONUS, SCORING_MULTIPLE
from game import Board, GameState, Tile

from .base import GameMode, simulated_board


def end_count(board: Board) -> int:
    """
    Sum of the open ends, counting a double at an end twice.

    A lone tile counts its pips once, so opening [5|5] counts 10.
    """
    if len(board.tiles) == 1:
        return board.tiles[0].tile.get_value()
    return sum(end.value * 2 if end.is_double else end.value for end in board.get_ends())


def fives_points(total: int) -> int:
    """`total` if it is a positive multiple of five, else 0."""
    if total > 0 and total % SCORING_MULTIPLE == 0:
        return total
    return 0


class AllFivesMode(GameMode):
    """Muggins: points during play, rounded pip count at round end."""

    mode_id = "allfives"
    name = "All Fives (Muggins)"
    description = "Score points when the sum of open ends equals a multiple of 5"
    can_draw = True
    max_pips = 6
    tiles_per_player = 7
    default_max_score = 150

    def calculate_score(
        self,
        tile: Tile,
        board: Board,
        state: GameState,
        position: Optional[str] = None,
    ) -> int:
        return fives_points(end_count(board))

    def calculate_round_score(self, state: GameState) -> int:
        pips = self.losers_pips(state)
        # Nearest five, halves rounded up
        return (pips + SCORING_MULTIPLE // 2) // SCORING_MULTIPLE * SCORING_MULTIPLE

    def calculate_potential_score(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> float:
        points = self.calculate_score(tile, simulated_board(tile, position, board), state, position)
        multiplier = points / SCORING_MULTIPLE if points > 0 else 1
        score = tile.get_value() + points * multiplier
        if tile.is_double():
            score += FIVES_DOUBLE_BONUS
        return score
