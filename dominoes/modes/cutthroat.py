"""Cutthroat: three players, every player for themselves."""

from typing import Optional

from constants import (
    CUTTHROAT_BLOCKING_BONUS,
    CUTTHROAT_DOMINO_BONUS,
    CUTTHROAT_DOUBLE_BONUS,
)
from game import Board, GameState, Tile

from .base import GameMode, OPENING_POSITIONS, count_blocked_players, empties_hand


def required_opening_double(state: GameState, preferred: Tile) -> Optional[Tile]:
    """
    The double that must open the round.

    `preferred` when someone holds it, otherwise the highest double in any
    hand, otherwise None (any tile may open).
    """
    held = [t for p in state.players for t in p.hand if t.is_double()]
    if preferred in held:
        return preferred
    return max(held, key=lambda t: t.left) if held else None


class CutthroatMode(GameMode):
    """Nine tiles each; the winner scores both opponents' pips."""

    mode_id = "cutthroat"
    name = "Cutthroat Dominoes"
    description = "Three-player game - every player for themselves"
    can_draw = False
    max_pips = 6
    tiles_per_player = 9
    default_max_score = 150
    default_player_count = 3
    fixed_player_count = 3

    opening_double = Tile(6, 6)

    def validate_opening(self, tile: Tile, position: str, state: GameState) -> bool:
        if position not in OPENING_POSITIONS:
            return False
        required = required_opening_double(state, self.opening_double)
        return required is None or tile == required

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
        score = tile.get_value()
        if empties_hand(state):
            score += CUTTHROAT_DOMINO_BONUS
        if tile.is_double():
            score += CUTTHROAT_DOUBLE_BONUS
        opponents = state.opponents_of(state.current_player)
        score += count_blocked_players(tile, position, board, opponents) * CUTTHROAT_BLOCKING_BONUS
        return score
