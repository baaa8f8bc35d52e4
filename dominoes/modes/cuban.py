"""Cuban dominoes: double-nine partnership game opened by the double nine."""

from typing import Optional

from game import Board, GameState, Tile

from .base import GameMode, OPENING_POSITIONS
from .block import block_potential_score
from .cutthroat import required_opening_double
from .teams import TeamModeMixin, TeamScoring


class CubanMode(TeamModeMixin, GameMode):
    """Ten tiles each from a double-nine set, played in partnerships."""

    mode_id = "cuba"
    name = "Cuban Dominoes"
    description = "Double-nine partnership game - the double nine opens"
    can_draw = False
    max_pips = 9
    tiles_per_player = 10
    team_play = True
    default_max_score = 150
    fixed_player_count = 4

    opening_double = Tile(9, 9)

    def __init__(self, rng=None) -> None:
        super().__init__(rng)
        self.teams = TeamScoring()

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

    def calculate_potential_score(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> float:
        return block_potential_score(tile, position, board, state)
