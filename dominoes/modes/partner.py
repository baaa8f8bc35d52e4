"""Partner dominoes: four players in two fixed partnerships."""

from typing import Optional

from game import Board, GameState, Tile

from .base import GameMode
from .teams import TeamModeMixin, TeamScoring


class PartnerMode(TeamModeMixin, GameMode):
    """
    Block rules played by teams.

    Partners sit opposite each other (seats 0/2 and 1/3). When a round is
    blocked the team with fewer pips wins it and scores the opposing team's
    pips; both partners are credited.
    """

    mode_id = "partner"
    name = "Partner Dominoes"
    description = "Traditional four-player team format - partners sit opposite"
    can_draw = False
    max_pips = 6
    tiles_per_player = 7
    team_play = True
    default_max_score = 150
    fixed_player_count = 4

    def __init__(self, rng=None) -> None:
        super().__init__(rng)
        self.teams = TeamScoring()

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
        return self.teams.potential_score(tile, position, board, state)
