"""Block dominoes: no drawing, the round winner scores the losers' pips."""

from typing import Optional

from constants import BLOCK_BLOCKING_BONUS, BLOCK_DOMINO_BONUS, BLOCK_DOUBLE_BONUS
from game import Board, GameState, Tile

from .base import GameMode, count_blocked_players, empties_hand


def block_potential_score(tile: Tile, position: str, board: Board, state: GameState) -> float:
    """
    Heuristic shared by the no-draw point games.

    Favors heavy tiles, going out, shedding doubles and moves that leave
    opponents without a playable end.
    """
    score = tile.get_value()
    if empties_hand(state):
        score += BLOCK_DOMINO_BONUS
    if tile.is_double():
        score += BLOCK_DOUBLE_BONUS
    opponents = state.opponents_of(state.current_player)
    score += count_blocked_players(tile, position, board, opponents) * BLOCK_BLOCKING_BONUS
    return score


class BlockMode(GameMode):
    """The classic game: play or pass, first out wins the others' pips."""

    mode_id = "block"
    name = "Block Dominoes"
    description = "Classic dominoes - no drawing, play or pass"
    can_draw = False
    max_pips = 6
    tiles_per_player = 7
    default_max_score = 100

    def calculate_score(
        self,
        tile: Tile,
        board: Board,
        state: GameState,
        position: Optional[str] = None,
    ) -> int:
        return 0

    def calculate_round_score(self, state: GameState) -> int:
        return self.losers_pips(state)

    def calculate_potential_score(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> float:
        return block_potential_score(tile, position, board, state)
