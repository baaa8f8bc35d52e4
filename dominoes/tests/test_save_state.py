"""
Tests for save-file validation.

Save files are untrusted; these tests feed broken payloads through the
two validation stages (schema, then game invariants) and check that each
is rejected with MalformedSaveStateError.
"""

import copy
import json

import pytest

from game import generate_tile_set
from models.save_state import (
    MalformedSaveStateError,
    SaveStatePayload,
    check_consistency,
    parse_save_state,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def payload():
    """A consistent double-six save: [6|6] on the board, 7+7 in hand, 13 in the deck."""
    tiles = [t.to_dict() for t in generate_tile_set(6)]
    spinner = {"left": 6, "right": 6}
    tiles.remove(spinner)
    return {
        "gameId": "game-1",
        "board": {
            "tiles": [{"tile": spinner, "position": "center"}],
            "spinner": None,
            "allow_branching": False,
        },
        "players": [
            {"id": "p1", "name": "Ann", "hand": tiles[:7], "score": 5, "isAI": False},
            {"id": "p2", "name": "Bob", "hand": tiles[7:14], "score": 0, "isAI": True},
        ],
        "currentPlayerIndex": 1,
        "deck": tiles[14:],
        "round": 2,
        "config": {"mode": "draw"},
        "modeState": {},
    }


# =============================================================================
# Schema stage
# =============================================================================

class TestParseSaveState:

    def test_parses_dict(self, payload):
        save = parse_save_state(payload)
        assert isinstance(save, SaveStatePayload)
        assert save.current_player_index == 1
        assert save.game_id == "game-1"
        assert save.players[1].is_ai

    def test_parses_json_text(self, payload):
        save = parse_save_state(json.dumps(payload))
        assert save.round == 2
        assert len(save.deck) == 13

    def test_invalid_json(self):
        with pytest.raises(MalformedSaveStateError):
            parse_save_state("{not json")

    def test_missing_board(self, payload):
        del payload["board"]
        with pytest.raises(MalformedSaveStateError):
            parse_save_state(payload)

    def test_single_player_rejected(self, payload):
        payload["players"] = payload["players"][:1]
        with pytest.raises(MalformedSaveStateError):
            parse_save_state(payload)

    def test_negative_score_rejected(self, payload):
        payload["players"][0]["score"] = -3
        with pytest.raises(MalformedSaveStateError):
            parse_save_state(payload)

    def test_wrong_types_rejected(self, payload):
        payload["players"][0]["hand"] = [{"left": "six", "right": 1}]
        with pytest.raises(MalformedSaveStateError):
            parse_save_state(payload)

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_save_state("[]")


# =============================================================================
# Consistency stage
# =============================================================================

class TestCheckConsistency:

    def check(self, data, max_pips=6, player_count=None):
        check_consistency(parse_save_state(data), max_pips, player_count)

    def test_valid_payload_passes(self, payload):
        self.check(payload)
        self.check(payload, player_count=2)

    def test_wrong_player_count(self, payload):
        with pytest.raises(MalformedSaveStateError, match="Expected 4 players"):
            self.check(payload, player_count=4)

    def test_turn_index_out_of_range(self, payload):
        payload["currentPlayerIndex"] = 2
        with pytest.raises(MalformedSaveStateError, match="out of range"):
            self.check(payload)

    def test_duplicate_player_ids(self, payload):
        payload["players"][1]["id"] = "p1"
        with pytest.raises(MalformedSaveStateError, match="Duplicate"):
            self.check(payload)

    def test_pips_outside_set(self, payload):
        payload["deck"][0] = {"left": 7, "right": 0}
        with pytest.raises(MalformedSaveStateError, match="outside"):
            self.check(payload)

    def test_duplicate_tile(self, payload):
        payload["deck"][0] = copy.deepcopy(payload["players"][0]["hand"][0])
        with pytest.raises(MalformedSaveStateError, match="more than once"):
            self.check(payload)

    def test_reversed_duplicate_tile(self, payload):
        tile = next(t for t in payload["players"][0]["hand"] if t["left"] != t["right"])
        payload["deck"][0] = {"left": tile["right"], "right": tile["left"]}
        with pytest.raises(MalformedSaveStateError, match="more than once"):
            self.check(payload)

    def test_missing_tile(self, payload):
        payload["deck"].pop()
        with pytest.raises(MalformedSaveStateError, match="conservation"):
            self.check(payload)

    def test_larger_set_requires_all_tiles(self, payload):
        with pytest.raises(MalformedSaveStateError, match="conservation"):
            self.check(payload, max_pips=9)
