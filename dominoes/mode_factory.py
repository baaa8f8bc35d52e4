"""
Registry of dominoes rule variants.

Maps a string identifier (and its common aliases) to a constructed
GameMode, and exposes the metadata a lobby needs before a match exists:
seat counts, whether the variant draws from the boneyard, and the target
score.

Usage:
    from mode_factory import GameModeFactory
    mode = GameModeFactory.create_game_mode("muggins")
    info = GameModeFactory.get_mode_info("allfives")
"""

import logging
import random
from dataclasses import asdict, dataclass
from typing import Optional

from modes import (
    AllFivesMode,
    BlockMode,
    ChickenFootMode,
    CrossMode,
    CubanMode,
    CutthroatMode,
    DrawMode,
    GameMode,
    PartnerMode,
    SixLoveMode,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeInfo:
    """Lobby-facing description of a variant."""
    mode_id: str
    name: str
    description: str
    player_count: str
    difficulty: str
    can_draw: bool
    max_score: int
    min_players: int
    max_players: int
    team_play: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


MODE_CLASSES: dict[str, type[GameMode]] = {
    "block": BlockMode,
    "cutthroat": CutthroatMode,
    "partner": PartnerMode,
    "sixlove": SixLoveMode,
    "cross": CrossMode,
    "draw": DrawMode,
    "cuba": CubanMode,
    "allfives": AllFivesMode,
    "chicken": ChickenFootMode,
}

MODE_ALIASES: dict[str, str] = {
    "cuban": "cuba",
    "all-fives": "allfives",
    "muggins": "allfives",
    "chickenfoot": "chicken",
    "chicken-foot": "chicken",
    "three-hand": "cutthroat",
    "four-hand": "partner",
    "partnership": "partner",
    "six-love": "sixlove",
    "6-love": "sixlove",
    "cross-dominoes": "cross",
    "draw-dominoes": "draw",
}

MODE_INFO: dict[str, ModeInfo] = {
    "block": ModeInfo(
        "block", "Block Dominoes",
        "Classic dominoes - no drawing, pass if you cannot play",
        "2-4 players", "Easy", False, 100, 2, 4,
    ),
    "cutthroat": ModeInfo(
        "cutthroat", "Cutthroat Dominoes",
        "Three-player individual competition - no partnerships",
        "3 players", "Medium", False, 150, 3, 3,
    ),
    "partner": ModeInfo(
        "partner", "Partner Dominoes",
        "Traditional four-player format with two teams of two",
        "4 players (2 teams)", "Medium", False, 150, 4, 4, True,
    ),
    "sixlove": ModeInfo(
        "sixlove", "Six-Love Dominoes",
        'Jamaican rules - win six games straight for a "six love"',
        "4 players (2 teams)", "Hard", False, 150, 4, 4, True,
    ),
    "cross": ModeInfo(
        "cross", "Cross Dominoes",
        "Play extends in four directions from the center double",
        "2-4 players", "Hard", False, 150, 2, 4,
    ),
    "draw": ModeInfo(
        "draw", "Draw Dominoes",
        "Fast-paced variant - draw from boneyard until you can play",
        "2-4 players", "Easy", True, 100, 2, 4,
    ),
    "cuba": ModeInfo(
        "cuba", "Cuban Block Dominoes",
        "Team-based block dominoes with double-nine set",
        "4 players (2 teams)", "Medium", False, 150, 4, 4, True,
    ),
    "allfives": ModeInfo(
        "allfives", "All Fives (Muggins)",
        "Score points when the board ends add up to multiples of 5",
        "2-4 players", "Medium", True, 150, 2, 4,
    ),
    "chicken": ModeInfo(
        "chicken", "Chicken Foot",
        "Create a chicken foot pattern with special double tile rules",
        "2-7 players", "Hard", True, 100, 2, 7,
    ),
}

DEFAULT_MODE = "block"


class GameModeFactory:
    """Create rule variants by identifier."""

    @staticmethod
    def normalize(mode_id: str) -> Optional[str]:
        """
        Resolve an identifier or alias to its canonical mode id.

        Returns:
            Canonical id, or None if the identifier is unknown.
        """
        key = (mode_id or "").strip().lower()
        key = MODE_ALIASES.get(key, key)
        return key if key in MODE_CLASSES else None

    @staticmethod
    def create_game_mode(
        mode_id: str,
        rng: Optional[random.Random] = None,
        max_draws: Optional[int] = None,
    ) -> GameMode:
        """
        Construct a variant.

        Unknown identifiers log a warning and fall back to Block.

        Args:
            mode_id: Mode identifier or alias (case-insensitive).
            rng: Random source shared with the engine.
            max_draws: Per-round draw cap (Draw mode only).
        """
        key = GameModeFactory.normalize(mode_id)
        if key is None:
            logger.warning(f"Unknown game mode: {mode_id}, defaulting to Block Dominoes")
            key = DEFAULT_MODE

        mode_class = MODE_CLASSES[key]
        if mode_class is DrawMode:
            return DrawMode(rng, max_draws=max_draws)
        return mode_class(rng)

    @staticmethod
    def get_available_modes() -> list[str]:
        return list(MODE_CLASSES)

    @staticmethod
    def get_mode_info(mode_id: str) -> ModeInfo:
        key = GameModeFactory.normalize(mode_id) or DEFAULT_MODE
        return MODE_INFO[key]

    @staticmethod
    def get_all_mode_info() -> list[dict]:
        return [MODE_INFO[key].to_dict() for key in MODE_CLASSES]

    @staticmethod
    def get_player_count_for_mode(mode_id: str) -> int:
        key = GameModeFactory.normalize(mode_id) or DEFAULT_MODE
        return MODE_CLASSES[key].fixed_player_count or MODE_CLASSES[key].default_player_count

    @staticmethod
    def is_team_mode(mode_id: str) -> bool:
        key = GameModeFactory.normalize(mode_id)
        return key is not None and MODE_CLASSES[key].team_play
