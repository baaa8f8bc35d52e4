"""
Core data model for dominoes.

This module implements the pieces every rule variant shares: tiles, the
board they are placed on, players and their hands, and the match state
owned by the engine.

Board Topology:
    A linear board is a single "main" line with a left and a right end.

        [3|5][5|5][5|1]          ends: 3 (left), 1 (right)

    A branching board (Cross) starts from a spinner double and grows four
    spokes, each with a single open end.

                 [6|2]
                 [6|6]           spokes: left, right, top, bottom
          [1|6]        [6|4]

    Chicken Foot tiles hang off the most recent double on the main line in
    a closed "foot" branch that never exposes an open end.
"""

import copy
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional


# Board positions
LEFT = "left"
RIGHT = "right"
TOP = "top"
BOTTOM = "bottom"
SPINNER = "spinner"
CENTER = "center"
CHICKEN_FOOT = "chicken-foot"

MAIN_BRANCH = "main"
FOOT_BRANCH = "foot"
SPOKES = (LEFT, RIGHT, TOP, BOTTOM)


@dataclass(frozen=True, eq=False)
class Tile:
    """
    A domino tile with two pip values.

    Tiles are symmetric: [2|5] and [5|2] are the same tile. The stored
    order only records how the tile is oriented on the board.

    Attributes:
        left: Pip value on the left (or inward) half.
        right: Pip value on the right (or outward) half.
    """

    left: int
    right: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tile):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"[{self.left}|{self.right}]"

    @property
    def key(self) -> tuple[int, int]:
        """Orientation-independent identity (low pip, high pip)."""
        return (min(self.left, self.right), max(self.left, self.right))

    @property
    def id(self) -> str:
        return f"{self.left}-{self.right}"

    def is_double(self) -> bool:
        return self.left == self.right

    def get_value(self) -> int:
        """Total pips on the tile."""
        return self.left + self.right

    def has_value(self, value: int) -> bool:
        return self.left == value or self.right == value

    def can_connect(self, other: "Tile") -> bool:
        """Check whether the two tiles share at least one pip value."""
        return self.has_value(other.left) or self.has_value(other.right)

    def equals(self, other: "Tile") -> bool:
        return self == other

    def flip(self) -> "Tile":
        return Tile(self.right, self.left)

    def other_side(self, value: int) -> int:
        """
        Get the pip value opposite to `value`.

        Args:
            value: A pip value this tile carries.

        Returns:
            The other half's value (the same value for doubles).
        """
        return self.right if self.left == value else self.left

    def facing(self, value: int) -> "Tile":
        """Orient the tile so that `value` is on the left half."""
        return self if self.left == value else self.flip()

    def to_dict(self) -> dict:
        return {"left": self.left, "right": self.right}

    @classmethod
    def from_dict(cls, d: dict) -> "Tile":
        return cls(left=d["left"], right=d["right"])


def generate_tile_set(max_pips: int) -> list[Tile]:
    """
    Build every distinct tile for a set.

    Args:
        max_pips: Highest pip value (6 for double-six, 9 for double-nine).

    Returns:
        All (i, j) tiles with 0 <= i <= j <= max_pips.
    """
    return [Tile(i, j) for i in range(max_pips + 1) for j in range(i, max_pips + 1)]


def tile_set_size(max_pips: int) -> int:
    """Number of tiles in a double-`max_pips` set."""
    return (max_pips + 1) * (max_pips + 2) // 2


def parse_tile(text: str) -> Tile:
    """Parse "a-b", "a|b" or "[a|b]" into a Tile."""
    cleaned = text.strip().strip("[]").replace("|", "-")
    left, right = cleaned.split("-")
    return Tile(int(left), int(right))


# =============================================================================
# Board
# =============================================================================

@dataclass
class BoardEnd:
    """An open end of the board that accepts matching tiles."""
    value: int
    is_double: bool
    branch: str
    side: str


@dataclass
class PlacedTile:
    """
    A tile placed on the board.

    The tile is stored oriented: on the main line `left` faces the left end
    and `right` the right end; on spokes and feet `left` is the inward half.
    Coordinates are grid units for rendering and never affect legality.
    """

    tile: Tile
    x: int = 0
    y: int = 0
    orientation: str = "horizontal"
    branch: str = MAIN_BRANCH
    position: str = RIGHT

    def to_dict(self) -> dict:
        return {
            "tile": self.tile.to_dict(),
            "x": self.x,
            "y": self.y,
            "orientation": self.orientation,
            "branch": self.branch,
            "position": self.position,
        }


# Grid offsets per spoke (x, y)
_SPOKE_STEP = {
    LEFT: (-1, 0),
    RIGHT: (1, 0),
    TOP: (0, -1),
    BOTTOM: (0, 1),
}


class Board:
    """
    The playing surface.

    The board is a defense-in-depth guard: `place_tile` refuses any tile
    that does not match the targeted end, but rule variants decide which
    placements are legal before the engine ever calls it.

    Attributes:
        allow_branching: Whether a spinner opens four spokes.
        tiles: Placement log in play order.
        branches: Placed tiles per branch name.
        spinner: The double that was played as spinner, if any.
        foot_anchor: Pip value of the most recent double on the main line.
    """

    def __init__(self, allow_branching: bool = False) -> None:
        self.allow_branching = allow_branching
        self.tiles: list[PlacedTile] = []
        self.branches: dict[str, list[PlacedTile]] = {MAIN_BRANCH: []}
        self.spinner: Optional[Tile] = None
        self.foot_anchor: Optional[int] = None

    def __len__(self) -> int:
        return len(self.tiles)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.tiles

    @property
    def is_branching(self) -> bool:
        """True once a spinner has opened the four spokes."""
        return LEFT in self.branches and self.spinner is not None and self.allow_branching

    def get_spinner(self) -> Optional[Tile]:
        return self.spinner

    def get_ends(self) -> list[BoardEnd]:
        """
        Get every open end, ordered branch-then-left/right.

        Returns:
            Empty list for an empty board, two ends for a linear board,
            one end per spoke for a branching board.
        """
        if self.is_empty():
            return []

        if self.is_branching:
            ends = []
            for spoke in SPOKES:
                spoke_tiles = self.branches[spoke]
                if spoke_tiles:
                    end_tile = spoke_tiles[-1].tile
                    ends.append(BoardEnd(end_tile.right, end_tile.is_double(), spoke, spoke))
                else:
                    ends.append(BoardEnd(self.spinner.left, True, spoke, spoke))
            return ends

        main = self.branches[MAIN_BRANCH]
        left_tile = main[0].tile
        right_tile = main[-1].tile
        return [
            BoardEnd(left_tile.left, left_tile.is_double(), MAIN_BRANCH, LEFT),
            BoardEnd(right_tile.right, right_tile.is_double(), MAIN_BRANCH, RIGHT),
        ]

    def get_end_values(self) -> list[int]:
        return [end.value for end in self.get_ends()]

    def get_end(self, position: str) -> Optional[BoardEnd]:
        """Look up the open end a position targets."""
        for end in self.get_ends():
            if end.side == position:
                return end
        return None

    def can_place(self, tile: Tile, position: str) -> bool:
        """Check the board-level guard without mutating."""
        if self.is_empty():
            if position == CHICKEN_FOOT:
                return False
            return position != SPINNER or tile.is_double()
        if position == SPINNER:
            return False
        if position == CHICKEN_FOOT:
            return self.foot_anchor is not None and tile.has_value(self.foot_anchor)
        end = self.get_end(position)
        return end is not None and tile.has_value(end.value)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def place_tile(self, tile: Tile, position: str = RIGHT, branch: str = MAIN_BRANCH) -> bool:
        """
        Place a tile on the board.

        Args:
            tile: Tile to place (any orientation).
            position: "left"/"right" on a linear board, a spoke name on a
                branching board, "spinner" or "center" to open, or
                "chicken-foot" to extend the current foot.
            branch: Branch hint; spokes and feet are derived from position.

        Returns:
            True if placed, False (no mutation) if the tile does not fit.
        """
        if not self.can_place(tile, position):
            return False

        if self.is_empty():
            self._place_first(tile, position)
            return True

        if position == CHICKEN_FOOT:
            self._place_foot(tile)
        elif self.is_branching:
            self._place_on_spoke(tile, position)
        else:
            self._place_on_main(tile, position)
        return True

    def _record(self, placed: PlacedTile) -> None:
        self.tiles.append(placed)

    def _place_first(self, tile: Tile, position: str) -> None:
        placed = PlacedTile(
            tile=tile,
            orientation="vertical" if tile.is_double() else "horizontal",
            branch=MAIN_BRANCH,
            position=position,
        )
        self.branches[MAIN_BRANCH].append(placed)
        self._record(placed)

        if tile.is_double():
            self.foot_anchor = tile.left

        if position == SPINNER:
            self.spinner = tile
            if self.allow_branching:
                for spoke in SPOKES:
                    self.branches[spoke] = []

    def _place_on_main(self, tile: Tile, position: str) -> None:
        main = self.branches[MAIN_BRANCH]
        orientation = "vertical" if tile.is_double() else "horizontal"

        if position == LEFT:
            end_value = main[0].tile.left
            anchor = main[0]
            oriented = tile if tile.right == end_value else tile.flip()
            placed = PlacedTile(oriented, anchor.x - 1, anchor.y, orientation, MAIN_BRANCH, LEFT)
            main.insert(0, placed)
        else:
            end_value = main[-1].tile.right
            anchor = main[-1]
            oriented = tile.facing(end_value)
            placed = PlacedTile(oriented, anchor.x + 1, anchor.y, orientation, MAIN_BRANCH, RIGHT)
            main.append(placed)

        self._record(placed)
        if tile.is_double():
            self.foot_anchor = tile.left

    def _place_on_spoke(self, tile: Tile, spoke: str) -> None:
        spoke_tiles = self.branches[spoke]
        if spoke_tiles:
            anchor = spoke_tiles[-1]
            end_value = anchor.tile.right
        else:
            anchor = self.branches[MAIN_BRANCH][0]
            end_value = self.spinner.left

        dx, dy = _SPOKE_STEP[spoke]
        placed = PlacedTile(
            tile.facing(end_value),
            anchor.x + dx,
            anchor.y + dy,
            "horizontal" if dy == 0 else "vertical",
            spoke,
            spoke,
        )
        spoke_tiles.append(placed)
        self._record(placed)

    def _place_foot(self, tile: Tile) -> None:
        foot = self.branches.setdefault(FOOT_BRANCH, [])
        anchor = self.last_main_double()
        placed = PlacedTile(
            tile.facing(self.foot_anchor),
            anchor.x + len(foot) - 1 if anchor else 0,
            (anchor.y if anchor else 0) + 1,
            "vertical",
            FOOT_BRANCH,
            CHICKEN_FOOT,
        )
        foot.append(placed)
        self._record(placed)

    def last_main_double(self) -> Optional[PlacedTile]:
        """The most recent double placed on the main line, if any."""
        for placed in reversed(self.tiles):
            if placed.branch == MAIN_BRANCH and placed.tile.is_double():
                return placed
        return None

    # -------------------------------------------------------------------------
    # Lifecycle / serialization
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Clear all tiles and branches back to an empty main line."""
        self.tiles = []
        self.branches = {MAIN_BRANCH: []}
        self.spinner = None
        self.foot_anchor = None

    def clone(self) -> "Board":
        """Independent copy for move simulation."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return {
            "tiles": [placed.to_dict() for placed in self.tiles],
            "spinner": self.spinner.to_dict() if self.spinner else None,
            "allow_branching": self.allow_branching,
        }

    @classmethod
    def from_dict(cls, d: dict, allow_branching: Optional[bool] = None) -> "Board":
        """
        Rebuild a board by replaying its placement log.

        Raises:
            ValueError: If a recorded placement does not fit the board.
        """
        if allow_branching is None:
            allow_branching = d.get("allow_branching", False)
        board = cls(allow_branching=allow_branching)

        for entry in d.get("tiles", []):
            tile = Tile.from_dict(entry["tile"])
            position = entry.get("position") or entry.get("branch") or RIGHT
            if position == MAIN_BRANCH:
                position = RIGHT
            if not board.place_tile(tile, position):
                raise ValueError(f"Cannot replay {tile} at {position}")
            placed = board.tiles[-1]
            placed.x = entry.get("x", placed.x)
            placed.y = entry.get("y", placed.y)
            placed.orientation = entry.get("orientation", placed.orientation)

        spinner = d.get("spinner")
        if spinner is not None and board.spinner != Tile.from_dict(spinner):
            raise ValueError("Spinner does not match the placement log")
        return board


# =============================================================================
# Players
# =============================================================================

@dataclass
class Player:
    """
    A seat at the table.

    Attributes:
        id: Unique identifier for the player.
        name: Display name.
        hand: Tiles held; never contains the same tile twice.
        score: Cumulative points across rounds.
        is_ai: Whether the engine plays this seat.
        team: Team index for partnership variants.
        avatar: Display avatar (cosmetic).
        profile: AI personality key, if any.
        wins: Games won during this engine's lifetime.
        losses: Games lost during this engine's lifetime.
    """

    id: str
    name: str
    hand: list[Tile] = field(default_factory=list)
    score: int = 0
    is_ai: bool = False
    team: Optional[int] = None
    avatar: str = ""
    profile: Optional[str] = None
    wins: int = 0
    losses: int = 0

    def add_tile(self, tile: Tile) -> bool:
        """Add a tile to the hand. Returns False if it is already held."""
        if self.has_tile(tile):
            return False
        self.hand.append(tile)
        return True

    def remove_tile(self, tile: Tile) -> bool:
        """Remove a tile from the hand. Returns False if it is not held."""
        for i, held in enumerate(self.hand):
            if held == tile:
                del self.hand[i]
                return True
        return False

    def has_tile(self, tile: Tile) -> bool:
        return tile in self.hand

    def sort_hand(self) -> None:
        """Doubles first, then descending pip value."""
        self.hand.sort(key=lambda t: (not t.is_double(), -t.get_value(), -max(t.key)))

    def get_total_pips(self) -> int:
        return sum(tile.get_value() for tile in self.hand)

    def has_empty_hand(self) -> bool:
        return len(self.hand) == 0

    def can_play(self, end_values: list[int]) -> bool:
        return any(tile.has_value(v) for tile in self.hand for v in end_values)

    def highest_double(self) -> Optional[Tile]:
        doubles = [t for t in self.hand if t.is_double()]
        return max(doubles, key=lambda t: t.left) if doubles else None

    def reset_hand(self) -> None:
        """Clear the hand between rounds; the cumulative score is kept."""
        self.hand = []

    def reset(self) -> None:
        """Clear hand and score for a fresh match."""
        self.hand = []
        self.score = 0

    def to_dict(self, reveal: bool = True) -> dict:
        """
        Serialize the player.

        Args:
            reveal: If False, the hand is replaced by its size.
        """
        data = {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "isAI": self.is_ai,
            "avatar": self.avatar,
            "team": self.team,
            "profile": self.profile,
        }
        if reveal:
            data["hand"] = [t.to_dict() for t in self.hand]
        else:
            data["hand_size"] = len(self.hand)
        return data


def new_player_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Moves, configuration and match state
# =============================================================================

@dataclass(frozen=True)
class Move:
    """An entry in the append-only move log."""
    player_id: str
    tile: Tile
    position: str
    score: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "tile": self.tile.to_dict(),
            "position": self.position,
            "score": self.score,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class PlayerSeat:
    """A requested seat when creating a match."""
    name: str
    is_ai: bool = True
    profile: Optional[str] = None
    avatar: str = ""


@dataclass
class GameConfig:
    """
    Match configuration.

    Fields left as None are filled from the mode's metadata and the
    environment defaults when the engine starts.
    """

    mode: str = "block"
    player_count: Optional[int] = None
    max_score: Optional[int] = None
    tiles_per_player: Optional[int] = None
    max_pips: Optional[int] = None
    seed: Optional[int] = None
    ai_delay: Optional[float] = None
    max_draws: Optional[int] = None
    seats: list[PlayerSeat] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "GameConfig":
        """Build a config from loosely-typed client data, clamping ranges."""

        def clamped(key: str, low: int, high: int) -> Optional[int]:
            value = data.get(key)
            if value is None:
                return None
            return max(low, min(high, int(value)))

        seats = [
            PlayerSeat(
                name=s.get("name", f"Player {i + 1}"),
                is_ai=s.get("is_ai", s.get("isAI", True)),
                profile=s.get("profile"),
                avatar=s.get("avatar", ""),
            )
            for i, s in enumerate(data.get("seats", []))
        ]
        ai_delay = data.get("ai_delay")

        return cls(
            mode=str(data.get("mode", "block")),
            player_count=clamped("player_count", 2, 8),
            max_score=clamped("max_score", 1, 10_000),
            tiles_per_player=clamped("tiles_per_player", 1, 20),
            max_pips=clamped("max_pips", 1, 12),
            seed=data.get("seed"),
            ai_delay=max(0.0, float(ai_delay)) if ai_delay is not None else None,
            max_draws=clamped("max_draws", 0, 100),
            seats=seats,
        )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "player_count": self.player_count,
            "max_score": self.max_score,
            "tiles_per_player": self.tiles_per_player,
            "max_pips": self.max_pips,
            "seed": self.seed,
            "ai_delay": self.ai_delay,
            "max_draws": self.max_draws,
            "seats": [
                {"name": s.name, "is_ai": s.is_ai, "profile": s.profile, "avatar": s.avatar}
                for s in self.seats
            ],
        }


@dataclass
class GameState:
    """
    The single mutable match state, owned by the engine.

    Rule variants receive it for read-only queries.
    """

    board: Board
    players: list[Player]
    config: GameConfig
    deck: list[Tile] = field(default_factory=list)
    current_player_index: int = 0
    round: int = 1
    is_game_over: bool = False
    winner: Optional[Player] = None
    move_history: list[Move] = field(default_factory=list)

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def seat_of(self, player: Player) -> int:
        for i, p in enumerate(self.players):
            if p.id == player.id:
                return i
        return -1

    def opponents_of(self, player: Player) -> list[Player]:
        return [p for p in self.players if p.id != player.id]

    def tiles_in_play(self) -> int:
        """Deck + hands + board, which must always equal the set size."""
        return len(self.deck) + sum(len(p.hand) for p in self.players) + len(self.board.tiles)

    def snapshot(self) -> "GameState":
        """Shallow read-only copy of the top-level collections."""
        return replace(
            self,
            players=list(self.players),
            deck=list(self.deck),
            move_history=list(self.move_history),
        )
