"""
Tests for GameEvent serialization and the engine's event stream.
"""

from datetime import datetime, timezone

import pytest

from engine import GameEngine
from game import GameConfig, PlayerSeat
from models.events import EventType, GameEvent
from scheduling import ManualScheduler


class TestGameEvent:

    def test_to_dict(self):
        stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        event = GameEvent(
            event_type=EventType.MOVE,
            game_id="g1",
            sequence_num=4,
            timestamp=stamp,
            player_id="p1",
            data={"tile": {"left": 6, "right": 1}, "position": "left"},
        )
        d = event.to_dict()
        assert d["event_type"] == "move"
        assert d["sequence_num"] == 4
        assert d["timestamp"] == stamp.isoformat()
        assert d["data"]["position"] == "left"

    def test_json_round_trip(self):
        event = GameEvent(EventType.ROUND_END, "g1", 9, data={"winner": "p2", "score": 14})
        restored = GameEvent.from_json(event.to_json())
        assert restored.event_type is EventType.ROUND_END
        assert restored.data == {"winner": "p2", "score": 14}
        assert restored.timestamp == event.timestamp

    def test_from_dict_defaults(self):
        event = GameEvent.from_dict({
            "event_type": "pause",
            "game_id": "g1",
            "sequence_num": 1,
            "timestamp": "2024-01-01T00:00:00+00:00",
        })
        assert event.player_id is None
        assert event.data == {}

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            GameEvent.from_dict({
                "event_type": "teleport",
                "game_id": "g1",
                "sequence_num": 1,
                "timestamp": "2024-01-01T00:00:00+00:00",
            })

    def test_event_type_is_string(self):
        assert EventType.SIX_LOVE == "six_love"
        assert EventType("deck_empty") is EventType.DECK_EMPTY


class TestEngineEventStream:

    def setup_method(self):
        config = GameConfig(
            mode="allfives",
            seats=[PlayerSeat("Bot A"), PlayerSeat("Bot B")],
            seed=11,
            ai_delay=0.5,
        )
        self.scheduler = ManualScheduler()
        self.engine = GameEngine(config, scheduler=self.scheduler, game_id="stream-test")
        self.events: list[GameEvent] = []
        self.engine.set_event_emitter(self.events.append)

    def test_sequence_numbers_increase_without_gaps(self):
        self.engine.start()
        self.scheduler.run_until_idle()
        numbers = [e.sequence_num for e in self.events]
        assert numbers == list(range(numbers[0], numbers[0] + len(numbers)))

    def test_events_carry_game_id(self):
        self.engine.start()
        self.scheduler.advance(5.0)
        assert self.events
        assert all(e.game_id == "stream-test" for e in self.events)

    def test_stream_brackets_the_match(self):
        self.engine.start()
        self.scheduler.run_until_idle()
        assert self.events[0].event_type is EventType.GAME_START
        assert self.events[1].event_type is EventType.ROUND_START
        assert self.events[-1].event_type is EventType.GAME_END

    def test_every_event_serializes(self):
        self.engine.start()
        self.scheduler.run_until_idle()
        for event in self.events:
            assert GameEvent.from_json(event.to_json()).sequence_num == event.sequence_num
