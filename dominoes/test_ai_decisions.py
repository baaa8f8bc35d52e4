"""
Test suite for AI move selection in ai.py.

Covers:
- select_move(): legality, no-move handling, baseline vs personality
- personality_score(): aggression, defensiveness, endgame shedding
- blocking_potential() / is_endgame()
- get_hint(): play / draw / pass suggestions with reasons
- get_thinking_time() and profile lookup

Run with: pytest test_ai_decisions.py -v
"""

import random

import pytest
from ai import AI_PROFILES, AIProfile, DominoAI, get_all_profiles, get_profile, get_thinking_time
from game import Board, GameConfig, GameState, Player, Tile, CENTER
from modes import AllFivesMode, BlockMode, DrawMode


# =============================================================================
# Helpers
# =============================================================================

def make_state(mode, hands, board_tiles=(), deck=()):
    """State with one player per hand; player 0 is to move."""
    players = [
        Player(id=f"p{i}", name=f"Player {i}", hand=[Tile(a, b) for a, b in hand])
        for i, hand in enumerate(hands)
    ]
    board = Board(allow_branching=mode.allows_branching)
    for tile, position in board_tiles:
        board.place_tile(tile, position)
    return GameState(
        board=board,
        players=players,
        config=GameConfig(mode=mode.mode_id),
        deck=list(deck),
    )


def make_profile(**overrides):
    """Create an AIProfile with neutral defaults, overridable."""
    defaults = dict(
        key="test",
        name="TestBot",
        avatar="",
        skill_level=100,
        aggressiveness=0,
        defensiveness=0,
        speed=1000,
        mistake_rate=0,
        thinking_pattern="methodical",
    )
    defaults.update(overrides)
    return AIProfile(**defaults)


# =============================================================================
# select_move
# =============================================================================

class TestSelectMove:

    def setup_method(self):
        self.mode = BlockMode(random.Random(4))
        self.ai = DominoAI(self.mode, random.Random(4))

    def test_returns_none_without_moves(self):
        state = make_state(self.mode, [[(1, 2)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        assert self.ai.select_move(state.players[0], state) is None

    def test_baseline_move_is_legal(self):
        state = make_state(self.mode, [[(6, 1), (6, 2), (0, 0), (6, 3)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        for _ in range(20):
            move = self.ai.select_move(state.players[0], state)
            assert self.mode.validate_move(move.tile, move.position, state.board, state)

    def test_single_move_always_chosen(self):
        state = make_state(self.mode, [[(6, 1), (2, 3)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        profile = make_profile(mistake_rate=100)
        move = self.ai.select_move(state.players[0], state, profile)
        assert move.tile == Tile(6, 1)

    def test_perfect_skill_takes_top_move(self):
        state = make_state(self.mode, [[(6, 5), (6, 0), (1, 1)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        profile = make_profile(skill_level=100, mistake_rate=0)
        for _ in range(10):
            move = self.ai.select_move(state.players[0], state, profile)
            assert move.tile == Tile(6, 5)

    def test_personality_moves_are_legal(self):
        state = make_state(self.mode, [[(6, 5), (6, 0), (1, 1), (2, 6)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        for profile in AI_PROFILES.values():
            move = self.ai.select_move(state.players[0], state, profile)
            assert self.mode.validate_move(move.tile, move.position, state.board, state)


# =============================================================================
# Personality scoring
# =============================================================================

class TestPersonalityScore:

    def setup_method(self):
        self.mode = AllFivesMode(random.Random(1))
        self.ai = DominoAI(self.mode, random.Random(1))

    def test_aggression_inflates_score(self):
        state = make_state(self.mode, [[(2, 7), (2, 1)], [(0, 0)]], [(Tile(3, 2), CENTER)])
        move = self.mode.get_valid_moves(state.players[0], state.board, state)[0]
        calm = self.ai.personality_score(move, state, make_profile(aggressiveness=0))
        fierce = self.ai.personality_score(move, state, make_profile(aggressiveness=100))
        assert fierce > calm

    def test_defensiveness_rewards_blocking(self):
        # [6|4] on the left leaves ends 4 and 1; the opponent only holds [6|5]
        state = make_state(self.mode, [[(6, 4), (0, 0)], [(6, 5)]], [(Tile(6, 1), CENTER)])
        move = next(
            m for m in self.mode.get_valid_moves(state.players[0], state.board, state)
            if m.position == "left"
        )
        timid = self.ai.personality_score(move, state, make_profile(defensiveness=0))
        guarded = self.ai.personality_score(move, state, make_profile(defensiveness=100))
        assert guarded > timid

    def test_blocking_potential_fraction(self):
        blocked = make_state(self.mode, [[(6, 4)], [(6, 5)]], [(Tile(6, 1), CENTER)])
        open_ = make_state(self.mode, [[(6, 4)], [(1, 5)]], [(Tile(6, 1), CENTER)])
        for state, expected in ((blocked, 1.0), (open_, 0.0)):
            move = next(
                m for m in self.mode.get_valid_moves(state.players[0], state.board, state)
                if m.position == "left"
            )
            assert DominoAI.blocking_potential(move, state) == expected

    def test_endgame_detection(self):
        state = make_state(self.mode, [[(1, 2)], [(3, 4)]])
        assert DominoAI.is_endgame(state)
        big = make_state(self.mode, [[(i, 6) for i in range(7)], [(i, 5) for i in range(6)]])
        assert not DominoAI.is_endgame(big)

    def test_endgame_bonus_favors_heavy_tiles(self):
        state = make_state(self.mode, [[(6, 6), (0, 1)], [(3, 4)]], [(Tile(6, 1), CENTER)])
        moves = self.mode.get_valid_moves(state.players[0], state.board, state)
        heavy = next(m for m in moves if m.tile == Tile(6, 6))
        light = next(m for m in moves if m.tile == Tile(0, 1))
        assert DominoAI.endgame_bonus(heavy, state) > DominoAI.endgame_bonus(light, state)


# =============================================================================
# Hints
# =============================================================================

class TestHints:

    def test_hint_play_with_reasons(self):
        mode = AllFivesMode(random.Random(1))
        ai = DominoAI(mode)
        state = make_state(mode, [[(2, 7), (2, 1)], [(0, 0)]], [(Tile(3, 2), CENTER)])
        hint = ai.get_hint(state.players[0], state)
        assert hint["action"] == "play"
        assert hint["tile"] == {"left": 2, "right": 7}
        assert any("10 points" in reason for reason in hint["reasons"])

    def test_hint_is_deterministic(self):
        mode = BlockMode()
        state = make_state(mode, [[(6, 5), (6, 0), (1, 1)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        hints = {
            str(DominoAI(mode, random.Random(seed)).get_hint(state.players[0], state)["tile"])
            for seed in range(5)
        }
        assert len(hints) == 1

    def test_hint_draw(self):
        mode = DrawMode()
        ai = DominoAI(mode)
        state = make_state(mode, [[(1, 2)], [(3, 4)]], [(Tile(6, 6), CENTER)], deck=[Tile(0, 0)])
        assert ai.get_hint(state.players[0], state)["action"] == "draw"

    def test_hint_pass(self):
        mode = BlockMode()
        ai = DominoAI(mode)
        state = make_state(mode, [[(1, 2)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        hint = ai.get_hint(state.players[0], state)
        assert hint["action"] == "pass"
        assert hint["tile"] is None

    def test_last_tile_reason(self):
        mode = BlockMode()
        ai = DominoAI(mode)
        state = make_state(mode, [[(6, 2)], [(3, 4)]], [(Tile(6, 6), CENTER)])
        reasons = ai.get_hint(state.players[0], state)["reasons"]
        assert any("last tile" in reason for reason in reasons)


# =============================================================================
# Profiles and timing
# =============================================================================

class TestProfiles:

    def test_lookup_is_case_insensitive(self):
        assert get_profile("MAYA") is AI_PROFILES["maya"]

    def test_unknown_or_missing_profile(self):
        assert get_profile("nobody") is None
        assert get_profile(None) is None

    def test_all_profiles_listed(self):
        keys = {p["key"] for p in get_all_profiles()}
        assert keys == set(AI_PROFILES)

    def test_traits_in_range(self):
        for profile in AI_PROFILES.values():
            for trait in (profile.skill_level, profile.aggressiveness,
                          profile.defensiveness, profile.mistake_rate):
                assert 0 <= trait <= 100


class TestThinkingTime:

    def test_default_without_profile(self):
        assert get_thinking_time(None, 1.5, random.Random()) == 1.5

    def test_profile_speed(self):
        assert get_thinking_time(AI_PROFILES["carol"], 1.5, random.Random()) == pytest.approx(3.0)

    def test_erratic_within_bounds(self):
        rng = random.Random(9)
        base = AI_PROFILES["alex"].speed / 1000
        for _ in range(50):
            seconds = get_thinking_time(AI_PROFILES["alex"], 1.5, rng)
            assert base * 0.6 <= seconds <= base * 1.4
