"""Cross dominoes: four spokes grow from a spinner double."""

from typing import Iterator, Optional

from constants import (
    CROSS_DOMINO_BONUS,
    CROSS_DOUBLE_BONUS,
    CROSS_OPEN_END_WEIGHT,
    SCORING_MULTIPLE,
)
from game import Board, GameState, Player, Tile, CENTER, SPINNER

from .all_fives import fives_points
from .base import GameMode, empties_hand, simulated_board


def spoke_total(board: Board) -> int:
    """Sum of the open spoke ends (the main line's ends on a linear board)."""
    return sum(board.get_end_values())


class CrossMode(GameMode):
    """
    Branching board with multiple-of-five scoring.

    The opening tile must be a double played as the spinner. A player who
    holds no double may open with any tile at "center"; the board then
    stays a single line for the rest of the round.
    """

    mode_id = "cross"
    name = "Cross Dominoes"
    description = "Play extends in four directions from the center double"
    can_draw = False
    max_pips = 6
    tiles_per_player = 7
    allows_branching = True
    default_max_score = 150

    def candidate_moves(
        self,
        player: Player,
        board: Board,
        state: GameState,
    ) -> Iterator[tuple[Tile, str]]:
        if board.is_empty():
            for tile in player.hand:
                yield tile, SPINNER if tile.is_double() else CENTER
            return
        yield from super().candidate_moves(player, board, state)

    def validate_opening(self, tile: Tile, position: str, state: GameState) -> bool:
        holds_double = any(t.is_double() for t in state.current_player.hand)
        if holds_double:
            return position == SPINNER and tile.is_double()
        return position == CENTER

    def calculate_score(
        self,
        tile: Tile,
        board: Board,
        state: GameState,
        position: Optional[str] = None,
    ) -> int:
        if not board.is_branching:
            return 0
        return fives_points(spoke_total(board))

    def calculate_round_score(self, state: GameState) -> int:
        pips = self.losers_pips(state)
        return pips // SCORING_MULTIPLE * SCORING_MULTIPLE

    def calculate_potential_score(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> float:
        score = tile.get_value()
        if empties_hand(state):
            score += CROSS_DOMINO_BONUS

        after = simulated_board(tile, position, board)
        if after.is_branching:
            score += fives_points(spoke_total(after))

        if tile.is_double():
            score += CROSS_DOUBLE_BONUS
        score += len(board.get_ends()) * CROSS_OPEN_END_WEIGHT
        return score

    def get_board_visualization(self, board: Board) -> Optional[dict]:
        """Spinner and spoke ends for renderers, or None before the cross exists."""
        if not board.is_branching:
            return None
        return {
            "center_tile": board.spinner.to_dict(),
            "ends": [
                {
                    "direction": end.side,
                    "value": end.value,
                    "length": len(board.branches[end.branch]),
                    "is_open": True,
                }
                for end in board.get_ends()
            ],
        }
