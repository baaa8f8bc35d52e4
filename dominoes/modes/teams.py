"""
Team scoring shared by the partnership variants.

Partner, Six-Love and Cuban each hold a TeamScoring instance instead of
inheriting from one another. Seats 0 and 2 form team 0, seats 1 and 3 form
team 1.
"""

from dataclasses import dataclass
from typing import Optional

from constants import (
    PARTNER_BLOCKING_BONUS,
    PARTNER_DOMINO_BONUS,
    PARTNER_DOUBLE_BONUS,
    PARTNER_SUPPORT_BONUS,
    PARTNER_SUPPORT_HAND_SIZE,
    TEAM_SEATS,
)
from game import Board, GameState, Player, Tile
from models.save_state import MalformedSaveStateError, TeamStatePayload, parse_mode_state

from .base import count_blocked_players, empties_hand


@dataclass
class Team:
    """A fixed partnership and its cumulative score."""
    index: int
    seats: tuple[int, ...]
    score: int = 0

    def to_dict(self) -> dict:
        return {"index": self.index, "seats": list(self.seats), "score": self.score}


class TeamScoring:
    """Team-aggregate pips, round winners and cumulative team scores."""

    def __init__(self, seats: tuple[tuple[int, ...], ...] = TEAM_SEATS) -> None:
        self._seats = seats
        self.teams: list[Team] = [Team(i, s) for i, s in enumerate(seats)]

    def reset(self) -> None:
        self.teams = [Team(i, s) for i, s in enumerate(self._seats)]

    def team_of(self, seat: int) -> int:
        for team in self.teams:
            if seat in team.seats:
                return team.index
        return seat % len(self.teams)

    def team_of_player(self, state: GameState, player: Player) -> int:
        return self.team_of(state.seat_of(player))

    def members(self, state: GameState, team_index: int) -> list[Player]:
        return [
            state.players[seat] for seat in self.teams[team_index].seats
            if seat < len(state.players)
        ]

    def team_pips(self, state: GameState, team_index: int) -> int:
        return sum(p.get_total_pips() for p in self.members(state, team_index))

    def winning_team(self, state: GameState) -> int:
        """
        Team of the empty-handed player, else the team with fewer pips.

        Ties go to team 0.
        """
        for seat, player in enumerate(state.players):
            if player.has_empty_hand():
                return self.team_of(seat)
        return min(
            (team.index for team in self.teams),
            key=lambda index: self.team_pips(state, index),
        )

    def round_winner(self, state: GameState) -> Player:
        """The empty-handed player, else the lowest-pip member of the winning team."""
        for player in state.players:
            if player.has_empty_hand():
                return player
        return min(
            self.members(state, self.winning_team(state)),
            key=lambda p: p.get_total_pips(),
        )

    def opposing_pips(self, state: GameState) -> int:
        winners = self.winning_team(state)
        return sum(
            self.team_pips(state, team.index)
            for team in self.teams if team.index != winners
        )

    def add_points(self, team_index: int, points: int) -> None:
        self.teams[team_index].score += points

    def is_team_game_over(self, max_score: int) -> bool:
        return any(team.score >= max_score for team in self.teams)

    def get_game_winner(self, max_score: int) -> Optional[Team]:
        for team in self.teams:
            if team.score >= max_score:
                return team
        return None

    def potential_score(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> float:
        """Partnership move heuristic for the current player."""
        score = tile.get_value()
        if empties_hand(state):
            score += PARTNER_DOMINO_BONUS

        my_team = self.team_of(state.current_player_index)
        partners = [
            p for p in self.members(state, my_team)
            if p.id != state.current_player.id
        ]
        if any(len(p.hand) <= PARTNER_SUPPORT_HAND_SIZE for p in partners):
            score += PARTNER_SUPPORT_BONUS

        if tile.is_double():
            score += PARTNER_DOUBLE_BONUS

        opponents = [
            p for seat, p in enumerate(state.players)
            if self.team_of(seat) != my_team
        ]
        score += count_blocked_players(tile, position, board, opponents) * PARTNER_BLOCKING_BONUS
        return score

    def to_dict(self) -> dict:
        return {"teams": [team.to_dict() for team in self.teams]}

    def load(self, saved: TeamStatePayload) -> None:
        """
        Restore team scores from a validated save.

        Raises:
            MalformedSaveStateError: If an entry names an unknown team or
                different seats.
        """
        scores = [0] * len(self.teams)
        for entry in saved.teams:
            if entry.index >= len(self.teams):
                raise MalformedSaveStateError(f"Unknown team {entry.index}")
            team = self.teams[entry.index]
            if entry.seats and tuple(entry.seats) != team.seats:
                raise MalformedSaveStateError(f"Team {entry.index} seats do not match {list(team.seats)}")
            scores[entry.index] = entry.score
        for team, score in zip(self.teams, scores):
            team.score = score


class TeamModeMixin:
    """
    Wires a TeamScoring instance into the GameMode hooks.

    Expects the host class to set `self.teams` in __init__.
    """

    teams: TeamScoring

    def determine_round_winner(self, state: GameState) -> Player:
        return self.teams.round_winner(state)

    def score_recipients(self, state: GameState, winner: Player) -> list[Player]:
        return self.teams.members(state, self.teams.team_of_player(state, winner))

    def calculate_round_score(self, state: GameState) -> int:
        return self.teams.opposing_pips(state)

    def on_round_end(self, state: GameState, winner: Player, points: int) -> None:
        self.teams.add_points(self.teams.team_of_player(state, winner), points)

    def get_player_team(self, seat: int) -> int:
        return self.teams.team_of(seat)

    def is_team_game_over(self, state: GameState) -> bool:
        return self.teams.is_team_game_over(state.config.max_score)

    def get_game_winner(self, state: GameState) -> Optional[Team]:
        return self.teams.get_game_winner(state.config.max_score)

    def reset(self) -> None:
        self.teams.reset()

    def get_mode_state(self) -> dict:
        return self.teams.to_dict()

    def load_mode_state(self, data: dict) -> None:
        self.teams.load(parse_mode_state(TeamStatePayload, data))
