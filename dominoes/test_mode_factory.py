"""
Tests for the variant registry.

Run with: pytest test_mode_factory.py -v
"""

import logging
import random

import pytest
from mode_factory import MODE_INFO, GameModeFactory
from modes import (
    AllFivesMode, BlockMode, ChickenFootMode, CubanMode, DrawMode, SixLoveMode,
)


class TestCreateGameMode:

    @pytest.mark.parametrize("mode_id", GameModeFactory.get_available_modes())
    def test_every_listed_mode_constructs(self, mode_id):
        mode = GameModeFactory.create_game_mode(mode_id)
        assert mode.mode_id == mode_id

    @pytest.mark.parametrize("alias,expected", [
        ("muggins", AllFivesMode),
        ("ALL-FIVES", AllFivesMode),
        ("chickenfoot", ChickenFootMode),
        ("cuban", CubanMode),
        ("six-love", SixLoveMode),
    ])
    def test_aliases(self, alias, expected):
        assert isinstance(GameModeFactory.create_game_mode(alias), expected)

    def test_unknown_mode_falls_back_to_block(self, caplog):
        with caplog.at_level(logging.WARNING):
            mode = GameModeFactory.create_game_mode("mahjong")
        assert isinstance(mode, BlockMode)
        assert "Unknown game mode" in caplog.text

    def test_rng_is_shared(self):
        rng = random.Random(5)
        mode = GameModeFactory.create_game_mode("block", rng=rng)
        assert mode.rng is rng

    def test_draw_cap_passed_through(self):
        mode = GameModeFactory.create_game_mode("draw", max_draws=2)
        assert isinstance(mode, DrawMode)
        assert mode.max_draws == 2


class TestModeInfo:

    def test_nine_variants(self):
        assert len(GameModeFactory.get_available_modes()) == 9
        assert len(GameModeFactory.get_all_mode_info()) == 9

    def test_info_matches_mode_classes(self):
        for mode_id in GameModeFactory.get_available_modes():
            info = GameModeFactory.get_mode_info(mode_id)
            mode = GameModeFactory.create_game_mode(mode_id)
            assert info.can_draw == mode.can_draw
            assert info.team_play == mode.team_play

    def test_player_counts(self):
        assert GameModeFactory.get_player_count_for_mode("cutthroat") == 3
        assert GameModeFactory.get_player_count_for_mode("partner") == 4
        assert MODE_INFO["chicken"].max_players == 7

    def test_team_modes(self):
        team_modes = {m for m in GameModeFactory.get_available_modes() if GameModeFactory.is_team_mode(m)}
        assert team_modes == {"partner", "sixlove", "cuba"}
        assert not GameModeFactory.is_team_mode("nonsense")

    def test_normalize(self):
        assert GameModeFactory.normalize(" Muggins ") == "allfives"
        assert GameModeFactory.normalize("bogus") is None
