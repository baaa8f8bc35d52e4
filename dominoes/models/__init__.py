"""Models package for the dominoes engine."""

from .events import EventType, GameEvent
from .save_state import (
    MalformedSaveStateError,
    SaveStatePayload,
    check_consistency,
    parse_save_state,
)
from .summary import GameSummary

__all__ = [
    "EventType",
    "GameEvent",
    "MalformedSaveStateError",
    "SaveStatePayload",
    "check_consistency",
    "parse_save_state",
    "GameSummary",
]
