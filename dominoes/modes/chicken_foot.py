"""
Chicken Foot: every double must sprout a three-tile foot before play moves on.

Sub-state machine layered on the turn loop:

    normal --(double played on a non-empty board)--> awaiting foot
    awaiting foot --(third foot tile)--> normal

While a foot is awaited, the only legal moves are tiles carrying the
double's value, played at "chicken-foot".
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from constants import (
    CHICKEN_DOMINO_BONUS,
    CHICKEN_DOUBLE_BONUS,
    CHICKEN_FOOT_BONUS,
    CHICKEN_FOOT_FINISH_BONUS,
    CHICKEN_FOOT_SIZE,
    CHICKEN_FOOT_TILE_BONUS,
    DOUBLE_BLANK_PENALTY,
)
from game import Board, GameState, Player, Tile, CHICKEN_FOOT, CENTER, FOOT_BRANCH
from models.save_state import ChickenFootStatePayload, MalformedSaveStateError, parse_mode_state

from .base import GameMode, ValidMove, OPENING_POSITIONS, empties_hand

DOUBLE_BLANK = Tile(0, 0)


@dataclass
class ChickenFootState:
    current_double: Optional[Tile] = None
    chicken_foot_complete: bool = True
    tiles_on_double: int = 0

    def to_dict(self) -> dict:
        return {
            "current_double": self.current_double.to_dict() if self.current_double else None,
            "chicken_foot_complete": self.chicken_foot_complete,
            "tiles_on_double": self.tiles_on_double,
        }


def highest_double(tiles: list[Tile]) -> Optional[Tile]:
    doubles = [t for t in tiles if t.is_double()]
    return max(doubles, key=lambda t: t.left) if doubles else None


class ChickenFootMode(GameMode):
    """Double-nine draw game built around chicken feet."""

    mode_id = "chicken"
    name = "Chicken Foot"
    description = 'Must play three tiles on doubles to form a "chicken foot" before continuing'
    can_draw = True
    max_pips = 9
    tiles_per_player = 7
    default_max_score = 100

    def __init__(self, rng=None) -> None:
        super().__init__(rng)
        self.cf_state = ChickenFootState()

    @property
    def awaiting_foot(self) -> bool:
        return not self.cf_state.chicken_foot_complete and self.cf_state.current_double is not None

    # -------------------------------------------------------------------------
    # Legality
    # -------------------------------------------------------------------------

    def candidate_moves(
        self,
        player: Player,
        board: Board,
        state: GameState,
    ) -> Iterator[tuple[Tile, str]]:
        if self.awaiting_foot and not board.is_empty():
            for tile in player.hand:
                yield tile, CHICKEN_FOOT
            return
        yield from super().candidate_moves(player, board, state)

    def get_valid_moves(
        self,
        player: Player,
        board: Board,
        state: GameState,
    ) -> list[ValidMove]:
        # Opening: only the player's highest double in every round, stricter than validate_opening after round 1
        if board.is_empty():
            double = highest_double(player.hand)
            if double is not None:
                if self.validate_move(double, CENTER, board, state):
                    return [ValidMove(double, CENTER)]
                return []
        return super().get_valid_moves(player, board, state)

    def validate_opening(self, tile: Tile, position: str, state: GameState) -> bool:
        if position not in OPENING_POSITIONS:
            return False
        # First round must open with the highest double anyone holds
        if state.round == 1:
            required = highest_double([t for p in state.players for t in p.hand])
            if required is not None:
                return tile == required
        return True

    def validate_move(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> bool:
        if board.is_empty():
            return super().validate_move(tile, position, board, state)

        if self.awaiting_foot:
            return (
                position == CHICKEN_FOOT
                and tile.has_value(self.cf_state.current_double.left)
                and board.can_place(tile, position)
            )

        return self.fits_open_end(tile, position, board)

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
        if position == CHICKEN_FOOT and self.cf_state.tiles_on_double + 1 >= CHICKEN_FOOT_SIZE:
            return CHICKEN_FOOT_BONUS
        return 0

    def calculate_round_score(self, state: GameState) -> int:
        winner = self.determine_round_winner(state)
        total = 0
        for player in state.players:
            if player.id == winner.id:
                continue
            total += player.get_total_pips()
            if player.has_tile(DOUBLE_BLANK):
                total += DOUBLE_BLANK_PENALTY
        return total

    def calculate_potential_score(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> float:
        score = tile.get_value()
        if tile.is_double():
            score += CHICKEN_DOUBLE_BONUS
        if position == CHICKEN_FOOT:
            score += CHICKEN_FOOT_TILE_BONUS
            if self.cf_state.tiles_on_double == CHICKEN_FOOT_SIZE - 1:
                score += CHICKEN_FOOT_FINISH_BONUS
        if empties_hand(state):
            score += CHICKEN_DOMINO_BONUS
        return score

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def on_move_applied(self, tile: Tile, position: str, board: Board, state: GameState) -> None:
        if position == CHICKEN_FOOT:
            self.cf_state.tiles_on_double += 1
            if self.cf_state.tiles_on_double >= CHICKEN_FOOT_SIZE:
                self.cf_state = ChickenFootState()
            return

        if tile.is_double() and len(board.tiles) > 1:
            self.cf_state = ChickenFootState(
                current_double=tile,
                chicken_foot_complete=False,
                tiles_on_double=0,
            )

    def on_round_start(self, state: GameState) -> None:
        self.cf_state = ChickenFootState()

    def reset(self) -> None:
        self.cf_state = ChickenFootState()

    def get_mode_state(self) -> dict:
        return self.cf_state.to_dict()

    def load_mode_state(self, data: dict) -> None:
        saved = parse_mode_state(ChickenFootStatePayload, data)
        double = saved.current_double.to_tile() if saved.current_double else None
        if saved.chicken_foot_complete and (double is not None or saved.tiles_on_double):
            raise MalformedSaveStateError("A completed foot cannot keep a double or foot tiles")
        if not saved.chicken_foot_complete and (double is None or not double.is_double()):
            raise MalformedSaveStateError("An open foot needs a double to grow from")
        self.cf_state = ChickenFootState(
            current_double=double,
            chicken_foot_complete=saved.chicken_foot_complete,
            tiles_on_double=saved.tiles_on_double,
        )

    def check_loaded_state(self, board: Board) -> None:
        if not self.awaiting_foot:
            return
        # The open foot belongs to the latest main-line double, never the opener
        anchor = board.last_main_double()
        if anchor is None or anchor is board.tiles[0] or anchor.tile != self.cf_state.current_double:
            raise MalformedSaveStateError(
                f"Foot double {self.cf_state.current_double} is not the latest double on the board"
            )
        start = next(i for i, placed in enumerate(board.tiles) if placed is anchor)
        foot_tiles = sum(1 for placed in board.tiles[start + 1:] if placed.branch == FOOT_BRANCH)
        if foot_tiles != self.cf_state.tiles_on_double:
            raise MalformedSaveStateError(
                f"Foot holds {foot_tiles} tile(s), save says {self.cf_state.tiles_on_double}"
            )
