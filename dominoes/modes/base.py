"""
The rule-variant contract shared by every dominoes mode.

A GameMode answers legality and scoring questions about a match. It reads
the board, players and GameState it is handed but never writes to them:
the engine performs every mutation (Board.place_tile, Player.remove_tile)
and then notifies the mode through its lifecycle hooks, which are the only
place a mode updates its own sub-state.

Call order for an accepted move:
    1. validate_move(tile, position, board, state)
    2. board.place_tile / player.remove_tile        (engine)
    3. calculate_score(tile, board, state, position)
    4. on_move_applied(tile, position, board, state)

Query methods are total: illegality is reported as False or [] and never
as an exception.
"""

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from constants import TOP_MOVE_WINDOW
from game import (
    Board, GameState, Player, Tile,
    CENTER, LEFT, RIGHT, SPINNER,
)

logger = logging.getLogger(__name__)

OPENING_POSITIONS = (CENTER, LEFT, RIGHT, SPINNER)


@dataclass
class ValidMove:
    """
    A legal placement.

    Attributes:
        tile: Tile to play.
        position: Where to play it ("left", "right", a spoke, "center", ...).
        score: Heuristic desirability, filled in by move selection.
    """

    tile: Tile
    position: str
    score: float = 0

    def to_dict(self) -> dict:
        return {"tile": self.tile.to_dict(), "position": self.position, "score": self.score}


def count_blocked_players(
    tile: Tile,
    position: str,
    board: Board,
    players: list[Player],
) -> int:
    """
    Count players who could play before a move but cannot after it.

    Args:
        tile: Tile being considered.
        position: Where it would be played.
        board: Current board (left untouched).
        players: Players to check, usually the mover's opponents.

    Returns:
        Number of players the move would shut out.
    """
    before = board.get_end_values()
    simulated = board.clone()
    if not simulated.place_tile(tile, position):
        return 0
    after = simulated.get_end_values()

    return sum(
        1 for p in players
        if p.can_play(before) and not p.can_play(after)
    )


def empties_hand(state: GameState) -> bool:
    """Whether the current player's next tile would be their last."""
    return len(state.current_player.hand) - 1 == 0


def simulated_board(tile: Tile, position: str, board: Board) -> Board:
    """Copy of the board with the tile placed (unchanged if it does not fit)."""
    simulated = board.clone()
    simulated.place_tile(tile, position)
    return simulated


class GameMode(ABC):
    """
    Base class for rule variants.

    Subclasses set the metadata attributes and implement scoring. Legality
    defaults to Block rules: any opening tile, then a tile must match the
    open end it is placed on.
    """

    mode_id: str = ""
    name: str = ""
    description: str = ""
    can_draw: bool = False
    max_pips: int = 6
    tiles_per_player: int = 7
    allows_branching: bool = False
    team_play: bool = False
    default_max_score: int = 100
    default_player_count: int = 4
    fixed_player_count: Optional[int] = None

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self._event_emitter: Optional[Callable[..., None]] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mode_id={self.mode_id!r})"

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def set_event_emitter(self, emitter: Callable[..., None]) -> None:
        """
        Route mode-specific events through the engine's event channel.

        Args:
            emitter: Callable taking (event_type, player_id=None, **data).
        """
        self._event_emitter = emitter

    def _emit(self, event_type: str, player_id: Optional[str] = None, **data: Any) -> None:
        if self._event_emitter is None:
            return
        self._event_emitter(event_type, player_id=player_id, **data)

    # -------------------------------------------------------------------------
    # Legality
    # -------------------------------------------------------------------------

    def candidate_moves(
        self,
        player: Player,
        board: Board,
        state: GameState,
    ) -> Iterator[tuple[Tile, str]]:
        """Every (tile, position) pair worth checking for this player."""
        if board.is_empty():
            for tile in player.hand:
                yield tile, CENTER
            return

        for tile in player.hand:
            for end in board.get_ends():
                if tile.has_value(end.value):
                    yield tile, end.side

    def get_valid_moves(
        self,
        player: Player,
        board: Board,
        state: GameState,
    ) -> list[ValidMove]:
        """
        List every legal move for a player.

        Built from validate_move so the two can never disagree.
        """
        moves = []
        seen = set()
        for tile, position in self.candidate_moves(player, board, state):
            if (tile.key, position) in seen:
                continue
            seen.add((tile.key, position))
            if self.validate_move(tile, position, board, state):
                moves.append(ValidMove(tile, position))
        return moves

    def validate_move(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> bool:
        """Authoritative legality gate checked before any mutation."""
        if board.is_empty():
            return self.validate_opening(tile, position, state) and self.fits_board(
                tile, position, board
            )
        return self.fits_open_end(tile, position, board)

    def validate_opening(self, tile: Tile, position: str, state: GameState) -> bool:
        """Opening rule for an empty board. Default: any tile."""
        return position in OPENING_POSITIONS

    @staticmethod
    def fits_board(tile: Tile, position: str, board: Board) -> bool:
        return board.can_place(tile, position)

    @staticmethod
    def fits_open_end(tile: Tile, position: str, board: Board) -> bool:
        """Whether the tile matches the open end named by position."""
        end = board.get_end(position)
        return end is not None and tile.has_value(end.value)

    def can_player_draw(self, player: Player, state: GameState) -> bool:
        """A player may draw only when the mode allows it and they are stuck."""
        if not self.can_draw or not state.deck:
            return False
        return not self.get_valid_moves(player, state.board, state)

    def must_player_draw(self, player: Player, state: GameState) -> bool:
        """Whether passing is refused until the player draws."""
        return self.can_player_draw(player, state)

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    @abstractmethod
    def calculate_score(
        self,
        tile: Tile,
        board: Board,
        state: GameState,
        position: Optional[str] = None,
    ) -> int:
        """Points for a move, computed after the tile is on the board."""

    @abstractmethod
    def calculate_round_score(self, state: GameState) -> int:
        """Points awarded to the round winner once the round ends."""

    def determine_round_winner(self, state: GameState) -> Player:
        """
        The empty-handed player, else the lowest pip count.

        Ties go to the earlier seat.
        """
        for player in state.players:
            if player.has_empty_hand():
                return player
        return min(state.players, key=lambda p: p.get_total_pips())

    def score_recipients(self, state: GameState, winner: Player) -> list[Player]:
        """Players credited with the round score."""
        return [winner]

    def losers_pips(self, state: GameState) -> int:
        winner = self.determine_round_winner(state)
        return sum(p.get_total_pips() for p in state.players if p.id != winner.id)

    # -------------------------------------------------------------------------
    # AI move selection
    # -------------------------------------------------------------------------

    def calculate_potential_score(
        self,
        tile: Tile,
        position: str,
        board: Board,
        state: GameState,
    ) -> float:
        """Heuristic desirability of a move for the current player."""
        return tile.get_value()

    def select_best_move(
        self,
        moves: list[ValidMove],
        board: Board,
        state: GameState,
    ) -> Optional[ValidMove]:
        """
        Pick a strong but unpredictable move.

        Scores each move, then chooses uniformly among the top three.
        """
        if not moves:
            return None

        for move in moves:
            move.score = self.calculate_potential_score(move.tile, move.position, board, state)

        ranked = sorted(moves, key=lambda m: m.score, reverse=True)
        top = ranked[:TOP_MOVE_WINDOW]
        return self.rng.choice(top)

    # -------------------------------------------------------------------------
    # Lifecycle hooks
    # -------------------------------------------------------------------------

    def on_move_applied(self, tile: Tile, position: str, board: Board, state: GameState) -> None:
        pass

    def on_player_draw(self, player: Player, state: GameState) -> None:
        pass

    def on_turn_end(self, player: Player, state: GameState) -> None:
        pass

    def on_round_start(self, state: GameState) -> None:
        pass

    def on_round_end(self, state: GameState, winner: Player, points: int) -> None:
        pass

    def reset(self) -> None:
        """Clear cross-round state for a fresh match."""

    def get_mode_state(self) -> dict:
        """Serializable sub-state for save files."""
        return {}

    def load_mode_state(self, data: dict) -> None:
        """
        Restore sub-state written by get_mode_state.

        Raises:
            MalformedSaveStateError: If the data does not fit the mode.
        """

    def check_loaded_state(self, board: Board) -> None:
        """
        Cross-check restored sub-state against the replayed board.

        Raises:
            MalformedSaveStateError: If the two disagree.
        """

    def get_info(self) -> dict:
        return {
            "id": self.mode_id,
            "name": self.name,
            "description": self.description,
            "can_draw": self.can_draw,
            "max_pips": self.max_pips,
            "tiles_per_player": self.tiles_per_player,
            "allows_branching": self.allows_branching,
            "team_play": self.team_play,
            "max_score": self.default_max_score,
            "player_count": self.fixed_player_count or self.default_player_count,
        }
