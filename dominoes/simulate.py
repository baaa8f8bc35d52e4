"""
Dominoes AI Simulation Runner

Plays AI-vs-AI matches headlessly on a virtual clock to compare
personalities and sanity-check variant rules. No event loop or UI needed.

Usage:
    python simulate.py [num_games] [mode]
    python simulate.py detail [mode]

Examples:
    python simulate.py 20             # 20 Block games
    python simulate.py 50 allfives    # 50 All Fives games
    python simulate.py detail chicken # One Chicken Foot game, move by move
"""

import random
import sys
from typing import Optional

from ai import AI_PROFILES
from config import config
from engine import GameEngine
from game import GameConfig, PlayerSeat
from logging_config import game_id_var, setup_logging
from mode_factory import GameModeFactory
from models.events import GameEvent
from scheduling import ManualScheduler

# Stops a match whose AI keeps rescheduling without progress
MAX_CALLBACKS = 20_000


class SimulationStats:
    """Track simulation statistics."""

    def __init__(self):
        self.games_played = 0
        self.total_rounds = 0
        self.total_turns = 0
        self.blocked_rounds = 0
        self.unfinished_games = 0
        self.player_wins: dict[str, int] = {}
        self.player_scores: dict[str, list[int]] = {}
        self.decisions: dict[str, dict[str, int]] = {}  # player -> {action: count}

    def record_event(self, event: GameEvent) -> None:
        action = event.event_type.value
        if action in ("move", "draw", "pass"):
            name = event.data.get("player", "?")
            self.total_turns += 1
            actions = self.decisions.setdefault(name, {})
            actions[action] = actions.get(action, 0) + 1
        elif action == "blocked":
            self.blocked_rounds += 1

    def record_game(self, engine: GameEngine) -> None:
        state = engine.get_state()
        self.games_played += 1
        self.total_rounds += state.round

        if not state.is_game_over or state.winner is None:
            self.unfinished_games += 1
            return

        winner_name = state.winner.name
        self.player_wins[winner_name] = self.player_wins.get(winner_name, 0) + 1
        for player in state.players:
            self.player_scores.setdefault(player.name, []).append(player.score)

    def report(self) -> str:
        lines = [
            "=" * 50,
            "SIMULATION RESULTS",
            "=" * 50,
            f"Games played: {self.games_played}",
            f"Unfinished games: {self.unfinished_games}",
            f"Total rounds: {self.total_rounds}",
            f"Blocked rounds: {self.blocked_rounds}",
            f"Total turns: {self.total_turns}",
            f"Avg turns/game: {self.total_turns / max(1, self.games_played):.1f}",
            "",
            "WIN RATES:",
        ]

        total_wins = sum(self.player_wins.values())
        for name, wins in sorted(self.player_wins.items(), key=lambda x: -x[1]):
            pct = wins / max(1, total_wins) * 100
            lines.append(f"  {name}: {wins} wins ({pct:.1f}%)")

        lines.append("")
        lines.append("AVERAGE FINAL SCORES (higher is better):")
        for name, scores in sorted(
            self.player_scores.items(),
            key=lambda x: -(sum(x[1]) / len(x[1])) if x[1] else 0,
        ):
            avg = sum(scores) / len(scores) if scores else 0
            lines.append(f"  {name}: {avg:.1f}")

        lines.append("")
        lines.append("DECISION BREAKDOWN:")
        for name, actions in sorted(self.decisions.items()):
            total = sum(actions.values())
            lines.append(f"  {name}:")
            for action, count in sorted(actions.items()):
                pct = count / max(1, total) * 100
                lines.append(f"    {action}: {count} ({pct:.1f}%)")

        return "\n".join(lines)


def create_ai_seats(mode_id: str, rng: random.Random) -> list[PlayerSeat]:
    """One AI seat per player, each with a distinct random personality."""
    count = GameModeFactory.get_player_count_for_mode(mode_id)
    keys = list(AI_PROFILES)
    rng.shuffle(keys)

    seats = []
    for i in range(count):
        profile = AI_PROFILES[keys[i % len(keys)]]
        seats.append(PlayerSeat(name=profile.name, is_ai=True, profile=profile.key, avatar=profile.avatar))
    return seats


def run_game(
    mode_id: str,
    stats: SimulationStats,
    seed: Optional[int] = None,
    on_event=None,
) -> GameEngine:
    """Play one AI-only match to completion on a virtual clock."""
    rng = random.Random(seed)
    scheduler = ManualScheduler()
    engine = GameEngine(
        GameConfig(mode=mode_id, seats=create_ai_seats(mode_id, rng), seed=seed),
        scheduler=scheduler,
    )
    engine.subscribe("*", stats.record_event)
    if on_event is not None:
        engine.subscribe("*", on_event)

    token = game_id_var.set(engine.game_id)
    try:
        engine.start()
        scheduler.run_until_idle(max_callbacks=MAX_CALLBACKS)
    finally:
        game_id_var.reset(token)

    stats.record_game(engine)
    return engine


def run_simulation(num_games: int = 10, mode_id: str = "block", verbose: bool = True) -> SimulationStats:
    """Run multiple games and report statistics."""
    mode_id = GameModeFactory.normalize(mode_id) or "block"
    print(f"\nRunning {num_games} {mode_id} games...")
    print("=" * 50)

    stats = SimulationStats()
    for i in range(num_games):
        engine = run_game(mode_id, stats, seed=i)
        if verbose:
            state = engine.get_state()
            winner = state.winner.name if state.winner else "nobody"
            print(f"Game {i + 1}/{num_games}: {winner} after {state.round} round(s)")

    print("\n")
    print(stats.report())
    return stats


def run_detailed_game(mode_id: str = "block", seed: Optional[int] = None) -> None:
    """Run a single game, printing every event."""
    mode_id = GameModeFactory.normalize(mode_id) or "block"
    print(f"\nRunning detailed {mode_id} game...")
    print("=" * 50)

    def show(event: GameEvent) -> None:
        data = event.data
        kind = event.event_type.value
        if kind == "move":
            tile = data["tile"]
            points = f" (+{data['score']})" if data["score"] else ""
            print(f"  {data['player']}: [{tile['left']}|{tile['right']}] -> {data['position']}{points}")
        elif kind in ("draw", "pass"):
            print(f"  {data['player']}: {kind}")
        elif kind == "round_start":
            print(f"\nRound {data['round']} - {data['first_player']} opens")
            print("-" * 50)
        elif kind == "round_end":
            print(f"  >>> {data['winner']} takes the round for {data['score']}")
        elif kind in ("blocked", "six_love", "achievement"):
            print(f"  >>> {kind}: {data}")

    stats = SimulationStats()
    engine = run_game(mode_id, stats, seed=seed, on_event=show)

    print("\n" + "=" * 50)
    print("FINAL SCORES")
    print("=" * 50)
    state = engine.get_state()
    for player in sorted(state.players, key=lambda p: -p.score):
        print(f"  {player.name}: {player.score} points")
    if state.winner:
        print(f"\nWinner: {state.winner.name}!")


def main(argv: Optional[list[str]] = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    setup_logging(config.LOG_LEVEL, config.ENVIRONMENT)

    if argv and argv[0] == "detail":
        mode_id = argv[1] if len(argv) > 1 else config.game_defaults.mode
        run_detailed_game(mode_id, seed=config.game_defaults.seed)
    else:
        num_games = int(argv[0]) if argv else 10
        mode_id = argv[1] if len(argv) > 1 else config.game_defaults.mode
        run_simulation(num_games, mode_id)


if __name__ == "__main__":
    main()
