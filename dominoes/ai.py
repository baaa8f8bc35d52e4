"""AI personalities and move hints for dominoes."""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from config import config
from constants import (
    BLOCKING_WEIGHT,
    ENDGAME_DOMINO_BONUS,
    ENDGAME_PIP_WEIGHT,
    ENDGAME_TILE_THRESHOLD,
)
from game import GameState, Player
from modes import GameMode, ValidMove, count_blocked_players
from modes.base import simulated_board


# Debug logging configuration
# Set AI_DEBUG=1 (or true/yes/on) to enable detailed AI decision logging
AI_DEBUG = config.AI_DEBUG

# Create a dedicated logger for AI decisions
ai_logger = logging.getLogger("dominoes.ai")
if AI_DEBUG:
    ai_logger.setLevel(logging.DEBUG)
    if not ai_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [AI] %(message)s", datefmt="%H:%M:%S"
        ))
        ai_logger.addHandler(handler)


def ai_log(message: str):
    """Log AI decision info when AI_DEBUG is enabled."""
    if AI_DEBUG:
        ai_logger.debug(message)


# =============================================================================
# Personalities
# =============================================================================

@dataclass(frozen=True)
class AIProfile:
    """Pre-defined AI opponent with personality traits (all 0-100)."""
    key: str
    name: str
    avatar: str
    skill_level: int
    aggressiveness: int
    defensiveness: int
    # Thinking time per move, milliseconds
    speed: int
    # Chance (percent) of playing a random legal move
    mistake_rate: int
    thinking_pattern: str  # "quick", "methodical" or "erratic"

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "avatar": self.avatar,
            "skill_level": self.skill_level,
            "thinking_pattern": self.thinking_pattern,
        }


AI_PROFILES: dict[str, AIProfile] = {
    "rookie": AIProfile(
        key="rookie",
        name="Rookie Ron",
        avatar="🤓",
        skill_level=20,
        aggressiveness=30,
        defensiveness=20,
        speed=1500,
        mistake_rate=40,
        thinking_pattern="quick",
    ),
    "carol": AIProfile(
        key="carol",
        name="Careful Carol",
        avatar="🧐",
        skill_level=60,
        aggressiveness=20,
        defensiveness=80,
        speed=3000,
        mistake_rate=15,
        thinking_pattern="methodical",
    ),
    "alex": AIProfile(
        key="alex",
        name="Aggressive Alex",
        avatar="😤",
        skill_level=70,
        aggressiveness=90,
        defensiveness=30,
        speed=1000,
        mistake_rate=20,
        thinking_pattern="erratic",
    ),
    "sam": AIProfile(
        key="sam",
        name="Strategic Sam",
        avatar="🤔",
        skill_level=85,
        aggressiveness=60,
        defensiveness=70,
        speed=2500,
        mistake_rate=8,
        thinking_pattern="methodical",
    ),
    "maya": AIProfile(
        key="maya",
        name="Master Maya",
        avatar="🧠",
        skill_level=95,
        aggressiveness=75,
        defensiveness=85,
        speed=2000,
        mistake_rate=3,
        thinking_pattern="methodical",
    ),
    "joker": AIProfile(
        key="joker",
        name="Joker Jake",
        avatar="🃏",
        skill_level=50,
        aggressiveness=100,
        defensiveness=0,
        speed=500,
        mistake_rate=50,
        thinking_pattern="erratic",
    ),
}


def get_profile(key: Optional[str]) -> Optional[AIProfile]:
    """Look up a personality by key (case-insensitive)."""
    if not key:
        return None
    return AI_PROFILES.get(key.lower())


def get_all_profiles() -> list[dict]:
    """Get all AI profiles for display."""
    return [p.to_dict() for p in AI_PROFILES.values()]


def get_thinking_time(profile: Optional[AIProfile], default: float, rng: random.Random) -> float:
    """
    Seconds an AI player "thinks" before moving.

    Without a profile the engine's configured delay is used. Erratic
    personalities vary their pace between 60% and 140% of it.
    """
    if profile is None:
        return default
    seconds = profile.speed / 1000
    if profile.thinking_pattern == "erratic":
        seconds *= rng.uniform(0.6, 1.4)
    return seconds


# =============================================================================
# Decision Making
# =============================================================================

class DominoAI:
    """
    Move selection for AI seats.

    Without a personality the mode's own heuristic (select_best_move) picks
    the move. With one, mode scores are reweighted by the personality and
    a skill-sized window of top moves is sampled. Every candidate comes
    from mode.get_valid_moves, so the AI can only propose legal moves.
    """

    def __init__(self, mode: GameMode, rng: Optional[random.Random] = None) -> None:
        self.mode = mode
        self.rng = rng or random.Random()

    def select_move(
        self,
        player: Player,
        state: GameState,
        profile: Optional[AIProfile] = None,
    ) -> Optional[ValidMove]:
        """
        Choose a move for the player.

        Returns:
            A legal ValidMove, or None if the player cannot play.
        """
        moves = self.mode.get_valid_moves(player, state.board, state)
        if not moves:
            ai_log(f"{player.name}: no legal moves")
            return None

        if profile is None:
            move = self.mode.select_best_move(moves, state.board, state)
            ai_log(f"{player.name}: baseline picks {move.tile} @ {move.position} ({move.score:.1f})")
            return move

        return self._select_with_personality(player, moves, state, profile)

    def _select_with_personality(
        self,
        player: Player,
        moves: list[ValidMove],
        state: GameState,
        profile: AIProfile,
    ) -> ValidMove:
        if self.rng.random() * 100 < profile.mistake_rate:
            move = self.rng.choice(moves)
            ai_log(f"{player.name} ({profile.name}): mistake, random {move.tile} @ {move.position}")
            return move

        for move in moves:
            move.score = self.personality_score(move, state, profile)

        ranked = sorted(moves, key=lambda m: m.score, reverse=True)
        window = min(len(ranked) * (100 - profile.skill_level) // 100 + 1, len(ranked))
        move = ranked[self.rng.randrange(window)]

        ai_log(
            f"{player.name} ({profile.name}): {len(ranked)} moves, window={window}, "
            f"picks {move.tile} @ {move.position} ({move.score:.1f})"
        )
        return move

    def personality_score(self, move: ValidMove, state: GameState, profile: AIProfile) -> float:
        """
        Mode heuristic reweighted by personality.

        Aggressive players inflate raw points, defensive players reward
        moves that shut opponents out, skilled players shed heavy tiles
        near the end of a round.
        """
        board = state.board
        base = self.mode.calculate_potential_score(move.tile, move.position, board, state)
        score = base + base * profile.aggressiveness / 100

        score += self.blocking_potential(move, state) * profile.defensiveness / 100 * BLOCKING_WEIGHT

        if self.is_endgame(state):
            score += self.endgame_bonus(move, state) * profile.skill_level / 50

        return score

    @staticmethod
    def blocking_potential(move: ValidMove, state: GameState) -> float:
        """Share of opponents (0..1) this move would leave without a play."""
        opponents = state.opponents_of(state.current_player)
        if not opponents:
            return 0.0
        blocked = count_blocked_players(move.tile, move.position, state.board, opponents)
        return blocked / len(opponents)

    @staticmethod
    def is_endgame(state: GameState) -> bool:
        return sum(len(p.hand) for p in state.players) < ENDGAME_TILE_THRESHOLD

    @staticmethod
    def endgame_bonus(move: ValidMove, state: GameState) -> float:
        bonus = move.tile.get_value() * ENDGAME_PIP_WEIGHT
        if len(state.current_player.hand) == 1:
            bonus += ENDGAME_DOMINO_BONUS
        return bonus

    # -------------------------------------------------------------------------
    # Hints
    # -------------------------------------------------------------------------

    def get_hint(self, player: Player, state: GameState) -> dict:
        """
        Suggest the strongest move for a player, with reasons.

        Deterministic: always the top-scored move by the mode heuristic.

        Returns:
            Dict with action ("play", "draw" or "pass"), tile, position,
            score and a list of human-readable reasons.
        """
        board = state.board
        moves = self.mode.get_valid_moves(player, board, state)

        if not moves:
            if self.mode.can_player_draw(player, state):
                return {
                    "action": "draw",
                    "tile": None,
                    "position": None,
                    "score": 0,
                    "reasons": ["No playable tiles. Draw from the boneyard."],
                }
            return {
                "action": "pass",
                "tile": None,
                "position": None,
                "score": 0,
                "reasons": ["No playable tiles. You must pass."],
            }

        for move in moves:
            move.score = self.mode.calculate_potential_score(move.tile, move.position, board, state)
        best = max(moves, key=lambda m: m.score)

        return {
            "action": "play",
            "tile": best.tile.to_dict(),
            "position": best.position,
            "score": best.score,
            "reasons": self._reasons(best, player, state),
        }

    def _reasons(self, move: ValidMove, player: Player, state: GameState) -> list[str]:
        reasons = []
        after = simulated_board(move.tile, move.position, state.board)
        immediate = self.mode.calculate_score(move.tile, after, state, move.position)

        if len(player.hand) == 1:
            reasons.append("This is your last tile - it wins the round!")
        if immediate > 0:
            reasons.append(f"This move scores {immediate} points immediately!")

        blocked = count_blocked_players(
            move.tile, move.position, state.board, state.opponents_of(player)
        )
        if blocked:
            reasons.append(f"This blocks {blocked} opponent(s) from playing")

        if move.tile.is_double():
            reasons.append("Gets rid of a double while you still can")

        remaining = [t for t in player.hand if t != move.tile]
        end_values = after.get_end_values()
        playable_next = sum(1 for t in remaining if any(t.has_value(v) for v in end_values))
        if remaining:
            reasons.append(f"Keeps {playable_next} of your {len(remaining)} tiles playable")

        return reasons
