"""
Event definitions for the dominoes engine.

Events are the only sanctioned way for collaborators (renderers, profile
trackers, replay recorders) to observe a match. Every state change made by
the engine is announced as an immutable GameEvent carrying a monotonically
increasing sequence number, so a subscriber can detect gaps and keep a
faithful log of the match.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import json


class EventType(str, Enum):
    """All possible event types in a dominoes match."""

    # Lifecycle events
    GAME_START = "game_start"
    ROUND_START = "round_start"
    ROUND_END = "round_end"
    GAME_END = "game_end"
    STATE_LOADED = "state_loaded"

    # Gameplay events
    MOVE = "move"
    SCORE = "score"
    PASS = "pass"
    DRAW = "draw"
    DECK_EMPTY = "deck_empty"
    BLOCKED = "blocked"
    TURN_CHANGE = "turn_change"

    # Control events
    PAUSE = "pause"
    RESUME = "resume"
    RESTART = "restart"
    ERROR = "error"

    # Variant events
    SIX_LOVE = "six_love"
    SIX_LOVE_UPDATE = "six_love_update"
    ACHIEVEMENT = "achievement"


@dataclass
class GameEvent:
    """
    An immutable record of something that happened in a match.

    Attributes:
        event_type: The type of event (from EventType enum).
        game_id: UUID of the match this event belongs to.
        sequence_num: Monotonically increasing sequence number within match.
        timestamp: When the event occurred (UTC).
        player_id: ID of player the event concerns (if applicable).
        data: Event-specific payload data (JSON-serializable).
    """

    event_type: EventType
    game_id: str
    sequence_num: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    player_id: Optional[str] = None
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize event to dictionary for JSON storage."""
        return {
            "event_type": self.event_type.value,
            "game_id": self.game_id,
            "sequence_num": self.sequence_num,
            "timestamp": self.timestamp.isoformat(),
            "player_id": self.player_id,
            "data": self.data,
        }

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict) -> "GameEvent":
        """Deserialize event from dictionary."""
        timestamp = d["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            event_type=EventType(d["event_type"]),
            game_id=d["game_id"],
            sequence_num=d["sequence_num"],
            timestamp=timestamp,
            player_id=d.get("player_id"),
            data=d.get("data", {}),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "GameEvent":
        """Deserialize event from JSON string."""
        return cls.from_dict(json.loads(json_str))
