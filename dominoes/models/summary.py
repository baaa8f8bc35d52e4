"""Per-player match summary handed to profile trackers."""

from dataclasses import asdict, dataclass


@dataclass
class GameSummary:
    """
    Outcome of a match from one player's point of view.

    Attributes:
        won: Whether the player (or their team) won the match.
        score: Player's cumulative score.
        mode: Canonical mode id.
        tiles_played: Tiles the player placed across all rounds.
        game_time: Seconds since the match started.
        perfect_game: Won without any opponent scoring a point.
    """

    won: bool
    score: int
    mode: str
    tiles_played: int
    game_time: float
    perfect_game: bool

    def to_dict(self) -> dict:
        return asdict(self)
