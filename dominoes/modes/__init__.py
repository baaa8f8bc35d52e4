"""Rule variants for the dominoes engine."""

from .base import GameMode, ValidMove, count_blocked_players
from .teams import Team, TeamScoring
from .block import BlockMode
from .all_fives import AllFivesMode
from .chicken_foot import ChickenFootMode, ChickenFootState
from .partner import PartnerMode
from .six_love import SixLoveMode, SixLoveState
from .cross import CrossMode
from .draw import DrawMode
from .cutthroat import CutthroatMode
from .cuban import CubanMode

__all__ = [
    "GameMode",
    "ValidMove",
    "count_blocked_players",
    "Team",
    "TeamScoring",
    "BlockMode",
    "AllFivesMode",
    "ChickenFootMode",
    "ChickenFootState",
    "PartnerMode",
    "SixLoveMode",
    "SixLoveState",
    "CrossMode",
    "DrawMode",
    "CutthroatMode",
    "CubanMode",
]
