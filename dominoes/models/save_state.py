"""
Save-file schema for dominoes matches.

Save files are untrusted input. Parsing goes through pydantic models for
shape and types, then check_consistency() verifies the game invariants a
schema cannot express: pip ranges, tile uniqueness, deck conservation and
a valid turn index. Any failure raises MalformedSaveStateError; a match is
never restored from a payload that fails either stage.

Each mode validates its own sub-state (modeState) against one of the
*StatePayload schemas through parse_mode_state().
"""

from typing import Annotated, Optional, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError

from constants import CHICKEN_FOOT_SIZE, SIX_LOVE_STREAK
from game import Tile, tile_set_size

ModelT = TypeVar("ModelT", bound=BaseModel)


class MalformedSaveStateError(ValueError):
    """Raised when a save payload cannot be restored safely."""
    pass


class TilePayload(BaseModel):
    left: int
    right: int

    def to_tile(self) -> Tile:
        return Tile(self.left, self.right)


class PlacedTilePayload(BaseModel):
    tile: TilePayload
    x: int = 0
    y: int = 0
    orientation: str = "horizontal"
    branch: str = "main"
    position: Optional[str] = None


class BoardPayload(BaseModel):
    tiles: list[PlacedTilePayload] = Field(default_factory=list)
    spinner: Optional[TilePayload] = None
    allow_branching: Optional[bool] = None


class PlayerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    hand: list[TilePayload] = Field(default_factory=list)
    score: int = Field(default=0, ge=0)
    is_ai: bool = Field(default=False, alias="isAI")
    avatar: Optional[str] = ""
    team: Optional[int] = None
    profile: Optional[str] = None


class SeatPayload(BaseModel):
    name: Optional[str] = None
    is_ai: bool = Field(default=True, validation_alias=AliasChoices("is_ai", "isAI"))
    profile: Optional[str] = None
    avatar: str = ""


class ConfigPayload(BaseModel):
    """Match settings as written by GameConfig.to_dict()."""

    mode: Optional[str] = None
    player_count: Optional[int] = None
    max_score: Optional[int] = None
    tiles_per_player: Optional[int] = None
    max_pips: Optional[int] = None
    seed: Optional[int] = None
    ai_delay: Optional[float] = None
    max_draws: Optional[NonNegativeInt] = None
    seats: list[SeatPayload] = Field(default_factory=list)


class SaveStatePayload(BaseModel):
    """Top-level save file."""

    model_config = ConfigDict(populate_by_name=True)

    board: BoardPayload
    players: list[PlayerPayload] = Field(min_length=2)
    current_player_index: int = Field(alias="currentPlayerIndex", ge=0)
    deck: list[TilePayload] = Field(default_factory=list)
    round: int = Field(default=1, ge=1)
    config: ConfigPayload = Field(default_factory=ConfigPayload)
    mode_state: dict = Field(default_factory=dict, alias="modeState")
    game_id: Optional[str] = Field(default=None, alias="gameId")


# =============================================================================
# Mode sub-state
# =============================================================================

class TeamEntryPayload(BaseModel):
    index: NonNegativeInt = 0
    seats: list[NonNegativeInt] = Field(default_factory=list)
    score: NonNegativeInt = 0


class TeamStatePayload(BaseModel):
    teams: list[TeamEntryPayload] = Field(default_factory=list)


StreakCount = Annotated[int, Field(ge=0, lt=SIX_LOVE_STREAK)]


class SixLoveStatePayload(TeamStatePayload):
    consecutive_wins: tuple[StreakCount, StreakCount] = (0, 0)
    six_love_achieved: bool = False
    six_love_team: Optional[int] = Field(default=None, ge=0, le=1)


class DrawStatePayload(BaseModel):
    draw_history: dict[str, NonNegativeInt] = Field(default_factory=dict)
    max_draws: Optional[NonNegativeInt] = None


class ChickenFootStatePayload(BaseModel):
    current_double: Optional[TilePayload] = None
    chicken_foot_complete: bool = True
    tiles_on_double: int = Field(default=0, ge=0, lt=CHICKEN_FOOT_SIZE)


def parse_mode_state(schema: type[ModelT], data: dict) -> ModelT:
    """
    Validate a mode's saved sub-state.

    Raises:
        MalformedSaveStateError: If the data does not match the schema.
    """
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise MalformedSaveStateError(f"Invalid mode state: {e.error_count()} error(s)") from e


def parse_save_state(payload: Union[str, bytes, dict]) -> SaveStatePayload:
    """
    Parse a save file.

    Args:
        payload: JSON text or an already-decoded dict.

    Raises:
        MalformedSaveStateError: If the payload is not valid JSON or does
            not match the schema.
    """
    try:
        if isinstance(payload, dict):
            return SaveStatePayload.model_validate(payload)
        return SaveStatePayload.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedSaveStateError(f"Invalid save state: {e.error_count()} error(s)") from e


def check_consistency(
    save: SaveStatePayload,
    max_pips: int,
    player_count: Optional[int] = None,
) -> None:
    """
    Verify invariants the schema cannot express.

    Args:
        save: Parsed save file.
        max_pips: Highest pip value of the mode's tile set.
        player_count: Required number of seats, if the mode fixes one.

    Raises:
        MalformedSaveStateError: On the first violated invariant.
    """
    if player_count is not None and len(save.players) != player_count:
        raise MalformedSaveStateError(
            f"Expected {player_count} players, found {len(save.players)}"
        )

    if save.current_player_index >= len(save.players):
        raise MalformedSaveStateError(
            f"currentPlayerIndex {save.current_player_index} out of range"
        )

    ids = [p.id for p in save.players]
    if len(set(ids)) != len(ids):
        raise MalformedSaveStateError("Duplicate player ids")

    all_tiles: list[TilePayload] = list(save.deck)
    all_tiles.extend(placed.tile for placed in save.board.tiles)
    for player in save.players:
        all_tiles.extend(player.hand)

    seen: set[Tile] = set()
    for payload in all_tiles:
        if not (0 <= payload.left <= max_pips and 0 <= payload.right <= max_pips):
            raise MalformedSaveStateError(
                f"Tile [{payload.left}|{payload.right}] outside 0..{max_pips}"
            )
        tile = payload.to_tile()
        if tile in seen:
            raise MalformedSaveStateError(f"Tile {tile} appears more than once")
        seen.add(tile)

    expected = tile_set_size(max_pips)
    if len(seen) != expected:
        raise MalformedSaveStateError(
            f"Deck conservation violated: {len(seen)} tiles, expected {expected}"
        )
