"""
Draw dominoes: Block legality, but a stuck player draws from the boneyard.

A player with no legal move must draw before passing is allowed. Draws are
counted per player per round so an optional cap (max_draws) can let a
player pass with tiles still left in the boneyard.
"""

from typing import Optional

from constants import (
    DRAW_DOMINO_BONUS,
    DRAW_DOUBLE_BONUS,
    DRAW_HAND_SIZE_WEIGHT,
    DRAW_LOW_BONEYARD,
    DRAW_LOW_BONEYARD_BONUS,
    SCORING_MULTIPLE,
)
from game import Board, GameState, Player, Tile
from models.save_state import DrawStatePayload, parse_mode_state

from .all_fives import fives_points
from .base import GameMode, empties_hand, simulated_board


class DrawMode(GameMode):
    """Boneyard game with multiple-of-five scoring."""

    mode_id = "draw"
    name = "Draw Dominoes"
    description = "Fast-paced variant - draw from boneyard until you can play"
    can_draw = True
    max_pips = 6
    tiles_per_player = 7
    default_max_score = 100

    def __init__(self, rng=None, max_draws: Optional[int] = None) -> None:
        super().__init__(rng)
        self.max_draws = max_draws
        self.draw_history: dict[str, int] = {}

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def draws_this_round(self, player: Player) -> int:
        return self.draw_history.get(player.id, 0)

    def can_player_draw(self, player: Player, state: GameState) -> bool:
        if not super().can_player_draw(player, state):
            return False
        if self.max_draws is not None and self.draws_this_round(player) >= self.max_draws:
            return False
        return True

    def on_player_draw(self, player: Player, state: GameState) -> None:
        self.draw_history[player.id] = self.draws_this_round(player) + 1

    def on_round_start(self, state: GameState) -> None:
        self.draw_history.clear()

    def reset(self) -> None:
        self.draw_history.clear()

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def calculate_score(
        self,
        tile: Tile,
        board: Board,
        state: GameState,
        position: Optional[str] = None,
    ) -> int:
        return fives_points(sum(board.get_end_values()))

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
            score += DRAW_DOMINO_BONUS
        score += fives_points(sum(simulated_board(tile, position, board).get_end_values()))
        if tile.is_double():
            score += DRAW_DOUBLE_BONUS
        score += self._hand_size_advantage(state)
        if len(state.deck) <= DRAW_LOW_BONEYARD:
            score += DRAW_LOW_BONEYARD_BONUS
        return score

    @staticmethod
    def _hand_size_advantage(state: GameState) -> float:
        me = state.current_player
        opponents = state.opponents_of(me)
        if not opponents:
            return 0
        average = sum(len(p.hand) for p in opponents) / len(opponents)
        return (average - len(me.hand)) * DRAW_HAND_SIZE_WEIGHT

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def get_draw_stats(self, state: GameState) -> dict:
        return {
            "boneyard_size": len(state.deck),
            "max_draws": self.max_draws,
            "player_stats": [
                {
                    "player": p.name,
                    "tiles_in_hand": len(p.hand),
                    "draws_this_round": self.draws_this_round(p),
                    "can_draw": self.can_player_draw(p, state),
                    "must_draw": self.must_player_draw(p, state),
                }
                for p in state.players
            ],
        }

    def get_strategy_hints(self, player: Player, state: GameState) -> list[str]:
        hints = []
        if len(state.deck) < 3:
            hints.append("Boneyard almost empty - play conservatively!")

        moves = self.get_valid_moves(player, state.board, state)
        if not moves and state.deck:
            hints.append("Draw from boneyard to find a playable tile")

        if len(player.hand) <= 2:
            hints.append("Almost out! Keep the pressure on!")

        if any(
            self.calculate_score(m.tile, simulated_board(m.tile, m.position, state.board), state) > 0
            for m in moves
        ):
            hints.append("Score available! Look for multiples of 5")

        return hints

    def get_mode_state(self) -> dict:
        return {"draw_history": dict(self.draw_history), "max_draws": self.max_draws}

    def load_mode_state(self, data: dict) -> None:
        saved = parse_mode_state(DrawStatePayload, data)
        self.draw_history = dict(saved.draw_history)
        if "max_draws" in saved.model_fields_set:
            self.max_draws = saved.max_draws
