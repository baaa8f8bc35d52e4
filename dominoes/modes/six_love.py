"""
Six-Love: Jamaican partnership rules with a cross-round win streak.

Each team's consecutive round wins are tracked across rounds. Six in a row
is a "six love" (a skunk): the mode announces it once, credits an
achievement to both partners and starts the streak count over.
"""

from dataclasses import dataclass, field
from typing import Optional

from constants import (
    SIX_LOVE_HOT_STREAK,
    SIX_LOVE_STREAK,
    SIX_LOVE_STREAK_BONUS,
    SIX_LOVE_STREAK_BONUS_AT,
    SIX_LOVE_STREAK_WEIGHT,
)
from game import Board, GameState, Player, Tile
from models.save_state import SixLoveStatePayload, parse_mode_state

from .base import GameMode
from .teams import TeamModeMixin, TeamScoring

SIX_LOVE_ACHIEVEMENT = "Six Love Champion"


@dataclass
class SixLoveState:
    consecutive_wins: list[int] = field(default_factory=lambda: [0, 0])
    six_love_achieved: bool = False
    six_love_team: Optional[int] = None


class SixLoveMode(TeamModeMixin, GameMode):
    """Partner scoring plus the six-in-a-row streak."""

    mode_id = "sixlove"
    name = "Six-Love Dominoes"
    description = 'Jamaican rules - win six games straight for a "six love" (skunk)'
    can_draw = False
    max_pips = 6
    tiles_per_player = 7
    team_play = True
    default_max_score = 150
    fixed_player_count = 4

    def __init__(self, rng=None) -> None:
        super().__init__(rng)
        self.teams = TeamScoring()
        self.six_love_state = SixLoveState()

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
        score = self.teams.potential_score(tile, position, board, state)
        streak = self.six_love_state.consecutive_wins[self.teams.team_of(state.current_player_index)]
        score += streak * SIX_LOVE_STREAK_WEIGHT
        if streak >= SIX_LOVE_STREAK_BONUS_AT:
            score += SIX_LOVE_STREAK_BONUS
        return score

    # -------------------------------------------------------------------------
    # Streak tracking
    # -------------------------------------------------------------------------

    def on_round_end(self, state: GameState, winner: Player, points: int) -> None:
        super().on_round_end(state, winner, points)

        winning_team = self.teams.team_of_player(state, winner)
        losing_team = 1 - winning_team
        wins = self.six_love_state.consecutive_wins
        wins[winning_team] += 1
        wins[losing_team] = 0

        if wins[winning_team] >= SIX_LOVE_STREAK:
            self._trigger_six_love(winning_team, state)

        self._emit(
            "six_love_update",
            consecutive_wins=list(self.six_love_state.consecutive_wins),
            team=winning_team,
        )

    def _trigger_six_love(self, team_index: int, state: GameState) -> None:
        members = self.teams.members(state, team_index)
        self._emit(
            "six_love",
            winning_team=team_index,
            players=[p.name for p in members],
            message="6-0 SKUNK! Six Love achieved!",
        )
        for player in members:
            self._emit("achievement", player_id=player.id, player=player.name,
                       achievement=SIX_LOVE_ACHIEVEMENT)

        self.reset_six_love_state()
        self.six_love_state.six_love_achieved = True
        self.six_love_state.six_love_team = team_index

    def reset_six_love_state(self) -> None:
        self.six_love_state = SixLoveState()

    def reset(self) -> None:
        super().reset()
        self.reset_six_love_state()

    def get_streak_info(self) -> list[dict]:
        return [
            {"team": i, "wins": wins}
            for i, wins in enumerate(self.six_love_state.consecutive_wins)
        ]

    def is_on_six_love_streak(self, team_index: int) -> bool:
        return self.six_love_state.consecutive_wins[team_index] >= SIX_LOVE_HOT_STREAK

    def get_six_love_progress(self, team_index: int) -> float:
        return min(self.six_love_state.consecutive_wins[team_index] / SIX_LOVE_STREAK, 1.0)

    def get_game_stats(self) -> dict:
        return {
            "teams": [
                {
                    "team_index": team.index,
                    "score": team.score,
                    "consecutive_wins": self.six_love_state.consecutive_wins[team.index],
                    "six_love_progress": (
                        f"{self.six_love_state.consecutive_wins[team.index]}/{SIX_LOVE_STREAK}"
                    ),
                }
                for team in self.teams.teams
            ],
            "six_love_achieved": self.six_love_state.six_love_achieved,
            "six_love_team": self.six_love_state.six_love_team,
        }

    def get_mode_state(self) -> dict:
        data = super().get_mode_state()
        data["consecutive_wins"] = list(self.six_love_state.consecutive_wins)
        data["six_love_achieved"] = self.six_love_state.six_love_achieved
        data["six_love_team"] = self.six_love_state.six_love_team
        return data

    def load_mode_state(self, data: dict) -> None:
        saved = parse_mode_state(SixLoveStatePayload, data)
        self.teams.load(saved)
        self.six_love_state = SixLoveState(
            consecutive_wins=list(saved.consecutive_wins),
            six_love_achieved=saved.six_love_achieved,
            six_love_team=saved.six_love_team,
        )
