"""
Match orchestration for dominoes.

GameEngine owns the single mutable GameState of a match. It deals, runs
the turn loop, applies moves, asks the active GameMode for legality and
scores, closes rounds and the game, and schedules AI turns. Collaborators
observe the match only through emitted events and read-only snapshots.

Lifecycle:
    Initializing -> InRound -> RoundEnd -> (next round | GameOver)

A `paused` flag sits beside that state machine: it freezes AI scheduling
and rejects player actions without touching GameState.

Usage:
    engine = GameEngine(GameConfig(mode="allfives", seed=7), scheduler=ManualScheduler())
    engine.subscribe("move", print)
    engine.start()
"""

import json
import logging
import random
import time
import uuid
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Optional, Union

from ai import DominoAI, get_profile, get_thinking_time
from config import config as settings
from game import (
    Board, GameConfig, GameState, Move, Player, PlayerSeat, Tile,
    generate_tile_set, new_player_id, tile_set_size,
)
from logging_config import ContextLogger
from mode_factory import GameModeFactory
from models.events import EventType, GameEvent
from models.save_state import (
    MalformedSaveStateError,
    check_consistency,
    parse_save_state,
)
from models.summary import GameSummary
from modes import GameMode, ValidMove
from scheduling import AsyncioScheduler, ScheduledCall, Scheduler

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"

EventHandler = Callable[[GameEvent], None]


class ErrorKind(str, Enum):
    """Recoverable action errors, reported through `error` events."""

    OUT_OF_TURN = "out_of_turn"
    TILE_NOT_OWNED = "tile_not_owned"
    ILLEGAL_PLACEMENT = "illegal_placement"
    DECK_EXHAUSTED = "deck_exhausted"
    GAME_ALREADY_OVER = "game_already_over"
    GAME_PAUSED = "game_paused"
    ILLEGAL_PASS = "illegal_pass"
    MUST_DRAW = "must_draw"
    DRAW_NOT_ALLOWED = "draw_not_allowed"


class GameEngine:
    """
    Runs one dominoes match.

    Attributes:
        game_id: Unique identifier used in events and logs.
        mode: Active rule variant.
        state: The match state (read it through get_state()).
        rng: Seeded random source shared with the mode and the AI.
        scheduler: Source of cancellable AI timers.
        is_paused: Whether AI scheduling and player actions are suspended.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        scheduler: Optional[Scheduler] = None,
        game_id: Optional[str] = None,
    ) -> None:
        """
        Create a match and deal the first round.

        Args:
            config: Match configuration. Unset fields come from the mode's
                metadata and the environment defaults.
            scheduler: AI timer source. Defaults to the running asyncio loop.
            game_id: Identifier for events; generated if omitted.
        """
        defaults = settings.game_defaults
        self.original_config = config or GameConfig(mode=defaults.mode)
        self.game_id = game_id or str(uuid.uuid4())
        self.log = ContextLogger(logger).with_context(game_id=self.game_id)

        seed = self.original_config.seed if self.original_config.seed is not None else defaults.seed
        self.rng = random.Random(seed)
        self.scheduler: Scheduler = scheduler or AsyncioScheduler()

        self.mode = self._create_mode(self.original_config)
        self.ai = DominoAI(self.mode, self.rng)

        self.is_paused = False
        self.started = False
        self._ai_handle: Optional[ScheduledCall] = None
        self._event_emitter: Optional[EventHandler] = None
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)
        self._sequence_num = 0

        self.start_time = time.monotonic()
        self.tiles_played: dict[str, int] = defaultdict(int)

        resolved = self._resolve_config(self.original_config, self.mode)
        self.state = self._create_state(resolved, self._create_players(resolved))

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def _create_mode(self, config: GameConfig) -> GameMode:
        max_draws = config.max_draws
        if max_draws is None:
            max_draws = settings.game_defaults.max_draws
        mode = GameModeFactory.create_game_mode(config.mode, rng=self.rng, max_draws=max_draws)
        mode.set_event_emitter(self._emit)
        return mode

    @staticmethod
    def _resolve_config(config: GameConfig, mode: GameMode) -> GameConfig:
        """Fill unset fields from mode metadata and environment defaults."""
        defaults = settings.game_defaults
        info = GameModeFactory.get_mode_info(mode.mode_id)

        if mode.fixed_player_count:
            player_count = mode.fixed_player_count
        else:
            requested = config.player_count or len(config.seats) or mode.default_player_count
            player_count = max(info.min_players, min(info.max_players, requested))

        max_pips = config.max_pips or mode.max_pips
        tiles_per_player = config.tiles_per_player or mode.tiles_per_player
        tiles_per_player = max(1, min(tiles_per_player, tile_set_size(max_pips) // player_count))

        seats = list(config.seats[:player_count])
        if not seats:
            seats.append(PlayerSeat(name="You", is_ai=False))
        while len(seats) < player_count:
            seats.append(PlayerSeat(name=f"AI Player {len(seats)}", is_ai=True))

        return GameConfig(
            mode=mode.mode_id,
            player_count=player_count,
            max_score=config.max_score or info.max_score,
            tiles_per_player=tiles_per_player,
            max_pips=max_pips,
            seed=config.seed if config.seed is not None else defaults.seed,
            ai_delay=config.ai_delay if config.ai_delay is not None else defaults.ai_delay,
            max_draws=config.max_draws if config.max_draws is not None else defaults.max_draws,
            seats=seats,
        )

    def _create_players(self, config: GameConfig) -> list[Player]:
        players = []
        for seat_index, seat in enumerate(config.seats):
            players.append(Player(
                id=new_player_id(),
                name=seat.name,
                is_ai=seat.is_ai,
                avatar=seat.avatar,
                profile=seat.profile,
                team=self._team_for_seat(seat_index),
            ))
        return players

    def _team_for_seat(self, seat_index: int) -> Optional[int]:
        if not self.mode.team_play:
            return None
        return self.mode.get_player_team(seat_index)

    def _create_state(self, config: GameConfig, players: list[Player]) -> GameState:
        state = GameState(
            board=Board(allow_branching=self.mode.allows_branching),
            players=players,
            config=config,
        )
        self._deal_round(state)
        return state

    def _new_deck(self, max_pips: int) -> list[Tile]:
        deck = generate_tile_set(max_pips)
        # Fisher-Yates
        for i in range(len(deck) - 1, 0, -1):
            j = self.rng.randint(0, i)
            deck[i], deck[j] = deck[j], deck[i]
        return deck

    def _deal_round(self, state: GameState) -> None:
        """Fresh deck, round-robin deal, sorted hands, opening player."""
        state.deck = self._new_deck(state.config.max_pips)
        for player in state.players:
            player.reset_hand()

        for _ in range(state.config.tiles_per_player):
            for player in state.players:
                if state.deck:
                    player.add_tile(state.deck.pop())

        for player in state.players:
            player.sort_hand()

        state.current_player_index = self._determine_first_player(state.players)
        state.move_history = []
        self.mode.on_round_start(state)

    def _determine_first_player(self, players: list[Player]) -> int:
        """Holder of the highest double, or a random seat if nobody has one."""
        best_seat = None
        best_value = -1
        for seat, player in enumerate(players):
            double = player.highest_double()
            if double is not None and double.left > best_value:
                best_seat = seat
                best_value = double.left
        if best_seat is None:
            return self.rng.randrange(len(players))
        return best_seat

    def start(self) -> None:
        """Announce the match and arm the AI timer if an AI opens."""
        if self.started:
            return
        self.started = True
        self.start_time = time.monotonic()
        self.log.info(f"Game started: mode={self.mode.mode_id}, players={len(self.state.players)}")

        self._emit(
            "game_start",
            mode=self.mode.mode_id,
            players=[p.to_dict(reveal=False) for p in self.state.players],
            config=self.state.config.to_dict(),
        )
        self._emit_round_start()
        self._schedule_ai_if_needed()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def set_event_emitter(self, emitter: Optional[EventHandler]) -> None:
        """
        Set a single sink that receives every event.

        Args:
            emitter: Callback receiving GameEvent objects, or None to clear.
        """
        self._event_emitter = emitter

    def subscribe(self, event_type: Union[str, EventType], handler: EventHandler) -> None:
        """
        Register a handler for one event type, or "*" for all events.
        """
        key = event_type.value if isinstance(event_type, EventType) else event_type
        self._subscribers[key].append(handler)

    def unsubscribe(self, event_type: Union[str, EventType], handler: EventHandler) -> None:
        key = event_type.value if isinstance(event_type, EventType) else event_type
        if handler in self._subscribers.get(key, []):
            self._subscribers[key].remove(handler)

    def _emit(
        self,
        event_type: str,
        player_id: Optional[str] = None,
        **data: Any,
    ) -> None:
        """
        Publish an event to the emitter and subscribers.

        Args:
            event_type: Event type string (from EventType enum).
            player_id: ID of the player the event concerns.
            **data: Event-specific data fields.
        """
        self._sequence_num += 1
        event = GameEvent(
            event_type=EventType(event_type),
            game_id=self.game_id,
            sequence_num=self._sequence_num,
            player_id=player_id,
            data=data,
        )

        if self._event_emitter is not None:
            self._event_emitter(event)
        for handler in list(self._subscribers.get(event.event_type.value, [])):
            handler(event)
        for handler in list(self._subscribers.get(ALL_EVENTS, [])):
            handler(event)

    def _reject(self, kind: ErrorKind, message: str, player_id: Optional[str] = None) -> bool:
        """Report a recoverable error and leave the state unchanged."""
        self.log.info(f"Rejected action ({kind.value}): {message}")
        self._emit("error", player_id=player_id, kind=kind.value, message=message)
        return False

    def _emit_round_start(self) -> None:
        current = self.state.current_player
        self._emit(
            "round_start",
            player_id=current.id,
            round=self.state.round,
            first_player=current.name,
            boneyard=len(self.state.deck),
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self.state.config

    def get_current_player(self) -> Player:
        return self.state.current_player

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.state.get_player(player_id)

    def get_state(self) -> GameState:
        """Shallow read-only snapshot of the match state."""
        return self.state.snapshot()

    def get_valid_moves(self, player_id: Optional[str] = None) -> list[ValidMove]:
        """Legal moves for a player (the current player by default)."""
        player = self.get_player(player_id) if player_id else self.get_current_player()
        if player is None:
            return []
        return self.mode.get_valid_moves(player, self.state.board, self.state)

    def can_any_player_move(self) -> bool:
        return any(
            self.mode.get_valid_moves(p, self.state.board, self.state)
            for p in self.state.players
        )

    def is_blocked(self) -> bool:
        """No player can place a tile and nobody may draw one."""
        if self.can_any_player_move():
            return False
        return not any(self.mode.can_player_draw(p, self.state) for p in self.state.players)

    def get_scores(self) -> dict[str, int]:
        return {p.id: p.score for p in self.state.players}

    def get_hint(self, player_id: Optional[str] = None) -> dict:
        """Suggest a move for a player (the current player by default)."""
        player = self.get_player(player_id) if player_id else self.get_current_player()
        if player is None:
            return {"action": "none", "tile": None, "position": None, "score": 0, "reasons": []}
        return self.ai.get_hint(player, self.state)

    def get_client_state(self, for_player_id: Optional[str] = None) -> dict:
        """
        Get a view of the match safe to send to one player.

        Opponents' hands are reduced to their sizes.

        Args:
            for_player_id: The viewer; None hides every hand.
        """
        state = self.state
        current = state.current_player
        data = {
            "game_id": self.game_id,
            "mode": self.mode.get_info(),
            "round": state.round,
            "board": state.board.to_dict(),
            "ends": state.board.get_end_values(),
            "players": [
                p.to_dict(reveal=(p.id == for_player_id)) for p in state.players
            ],
            "current_player_index": state.current_player_index,
            "current_player_id": current.id,
            "boneyard": len(state.deck),
            "is_game_over": state.is_game_over,
            "winner_id": state.winner.id if state.winner else None,
            "is_paused": self.is_paused,
            "max_score": state.config.max_score,
        }
        if for_player_id == current.id and not state.is_game_over:
            data["valid_moves"] = [m.to_dict() for m in self.get_valid_moves(current.id)]
            data["can_draw"] = self.mode.can_player_draw(current, state)
        return data

    def get_summary(self, player_id: str) -> Optional[GameSummary]:
        """
        Outcome of the match for one player, for profile trackers.

        Returns:
            GameSummary, or None for an unknown player.
        """
        player = self.get_player(player_id)
        if player is None:
            return None

        winner = self.state.winner
        won = self.state.is_game_over and winner is not None and self._same_side(player, winner)
        opponents = [p for p in self.state.players if not self._same_side(player, p)]
        return GameSummary(
            won=won,
            score=player.score,
            mode=self.mode.mode_id,
            tiles_played=self.tiles_played.get(player.id, 0),
            game_time=round(time.monotonic() - self.start_time, 3),
            perfect_game=won and all(p.score == 0 for p in opponents),
        )

    def _same_side(self, a: Player, b: Player) -> bool:
        if a.id == b.id:
            return True
        return self.mode.team_play and a.team is not None and a.team == b.team

    # -------------------------------------------------------------------------
    # Player actions
    # -------------------------------------------------------------------------

    def _check_can_act(self, player_id: Optional[str]) -> Optional[Player]:
        """Common guard for player actions. Returns the acting player or None."""
        if self.state.is_game_over:
            self._reject(ErrorKind.GAME_ALREADY_OVER, "The game is over", player_id)
            return None
        if self.is_paused:
            self._reject(ErrorKind.GAME_PAUSED, "The game is paused", player_id)
            return None
        current = self.state.current_player
        if player_id is not None and player_id != current.id:
            self._reject(ErrorKind.OUT_OF_TURN, f"It is {current.name}'s turn", player_id)
            return None
        return current

    def make_move(self, tile: Tile, position: str, player_id: Optional[str] = None) -> bool:
        """
        Play a tile for the current player.

        Args:
            tile: Tile to play (either orientation).
            position: Target position ("left", "right", a spoke, ...).
            player_id: Acting player; must be the current player if given.

        Returns:
            True if the move was applied, False if it was rejected.
        """
        player = self._check_can_act(player_id)
        if player is None:
            return False

        if not player.has_tile(tile):
            return self._reject(ErrorKind.TILE_NOT_OWNED, f"{tile} is not in your hand", player.id)

        state = self.state
        if not self.mode.validate_move(tile, position, state.board, state):
            return self._reject(
                ErrorKind.ILLEGAL_PLACEMENT, f"{tile} cannot be played at {position}", player.id
            )

        return self._apply_move(player, tile, position)

    def _apply_move(self, player: Player, tile: Tile, position: str) -> bool:
        state = self.state
        if not state.board.place_tile(tile, position):
            self.log.error(f"Board refused validated move {tile} at {position}")
            return self._reject(
                ErrorKind.ILLEGAL_PLACEMENT, f"{tile} cannot be played at {position}", player.id
            )
        player.remove_tile(tile)
        self.tiles_played[player.id] += 1

        score = max(0, self.mode.calculate_score(tile, state.board, state, position))
        if score:
            for recipient in self.mode.score_recipients(state, player):
                recipient.score += score

        state.move_history.append(Move(player.id, tile, position, score))
        self.mode.on_move_applied(tile, position, state.board, state)

        self._emit(
            "move",
            player_id=player.id,
            player=player.name,
            tile=tile.to_dict(),
            position=position,
            score=score,
            ends=state.board.get_end_values(),
        )
        if score:
            self._emit("score", player_id=player.id, player=player.name, score=score, total=player.score)

        self.mode.on_turn_end(player, state)

        if player.has_empty_hand():
            self.end_round()
        elif self.is_blocked():
            self._handle_blocked_game()
        else:
            self.next_turn()
        return True

    def draw_tile(self, player_id: Optional[str] = None) -> Optional[Tile]:
        """
        Draw from the boneyard for the current player.

        Allowed only in drawing variants, when the player has no legal
        move and has not reached the draw cap.

        Returns:
            The drawn tile, or None if the draw was rejected.
        """
        player = self._check_can_act(player_id)
        if player is None:
            return None

        state = self.state
        if not self.mode.can_draw:
            self._reject(ErrorKind.DRAW_NOT_ALLOWED, f"{self.mode.name} has no boneyard draws", player.id)
            return None

        if not state.deck:
            self._emit("deck_empty")
            self._reject(ErrorKind.DECK_EXHAUSTED, "The boneyard is empty", player.id)
            return None

        if not self.mode.can_player_draw(player, state):
            self._reject(ErrorKind.DRAW_NOT_ALLOWED, "You cannot draw right now", player.id)
            return None

        tile = state.deck.pop()
        player.add_tile(tile)
        self.mode.on_player_draw(player, state)

        self._emit(
            "draw",
            player_id=player.id,
            player=player.name,
            tile=tile.to_dict(),
            boneyard=len(state.deck),
        )
        if not state.deck:
            self._emit("deck_empty")

        if player.is_ai:
            self._schedule_ai_if_needed()
        return tile

    def pass_turn(self, player_id: Optional[str] = None) -> bool:
        """
        Pass the current player's turn.

        Refused while the player has a legal move, or while the variant
        requires them to draw first.
        """
        player = self._check_can_act(player_id)
        if player is None:
            return False

        state = self.state
        if self.mode.get_valid_moves(player, state.board, state):
            return self._reject(ErrorKind.ILLEGAL_PASS, "You have a playable tile", player.id)
        if self.mode.must_player_draw(player, state):
            return self._reject(ErrorKind.MUST_DRAW, "Draw from the boneyard before passing", player.id)

        self._emit("pass", player_id=player.id, player=player.name)
        self.mode.on_turn_end(player, state)

        if self.is_blocked():
            self._handle_blocked_game()
        else:
            self.next_turn()
        return True

    # -------------------------------------------------------------------------
    # Turn and round flow
    # -------------------------------------------------------------------------

    def next_turn(self) -> None:
        state = self.state
        state.current_player_index = (state.current_player_index + 1) % len(state.players)
        current = state.current_player
        self._emit("turn_change", player_id=current.id, player=current.name)
        self._schedule_ai_if_needed()

    def _handle_blocked_game(self) -> None:
        pips = {p.name: p.get_total_pips() for p in self.state.players}
        self.log.info(f"Round {self.state.round} blocked: {pips}")
        self._emit("blocked", round=self.state.round, pips=pips)
        self.end_round()

    def end_round(self) -> None:
        """Score the round, then end the game or deal the next round."""
        self._cancel_ai_move()
        state = self.state

        winner = self.mode.determine_round_winner(state)
        points = max(0, self.mode.calculate_round_score(state))
        for recipient in self.mode.score_recipients(state, winner):
            recipient.score += points

        self.log.info(f"Round {state.round} won by {winner.name} for {points} points")
        self._emit(
            "round_end",
            player_id=winner.id,
            winner=winner.name,
            score=points,
            round=state.round,
            blocked=not winner.has_empty_hand(),
            scores={p.name: p.score for p in state.players},
        )
        self.mode.on_round_end(state, winner, points)

        game_winner = self._find_game_winner(winner)
        if game_winner is not None:
            self.end_game(game_winner)
        else:
            self.start_new_round()

    def _find_game_winner(self, round_winner: Player) -> Optional[Player]:
        state = self.state
        if self.mode.team_play:
            return self._find_team_game_winner(round_winner)

        max_score = state.config.max_score
        if round_winner.score >= max_score:
            return round_winner
        leader = max(state.players, key=lambda p: p.score)
        if leader.score >= max_score:
            return leader
        return None

    def _find_team_game_winner(self, round_winner: Player) -> Optional[Player]:
        """The round winner if their team reached max_score, else a member of the team that did."""
        state = self.state
        if not self.mode.is_team_game_over(state):
            return None
        team = self.mode.get_game_winner(state)
        members = [p for seat, p in enumerate(state.players) if self.mode.get_player_team(seat) == team.index]
        for member in members:
            if member.id == round_winner.id:
                return member
        return members[0]

    def end_game(self, winner: Player) -> None:
        self._cancel_ai_move()
        state = self.state
        state.is_game_over = True
        state.winner = winner

        for player in state.players:
            if self._same_side(player, winner):
                player.wins += 1
            else:
                player.losses += 1

        self.log.info(f"Game over: {winner.name} wins with {winner.score}")
        self._emit(
            "game_end",
            player_id=winner.id,
            winner=winner.name,
            scores={p.name: p.score for p in state.players},
            summaries={p.id: self.get_summary(p.id).to_dict() for p in state.players},
        )

    def start_new_round(self) -> None:
        state = self.state
        state.round += 1
        state.board.reset()
        self._deal_round(state)
        self._emit_round_start()
        self._schedule_ai_if_needed()

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------

    def pause(self) -> None:
        """Suspend the match; any pending AI move is cancelled."""
        if self.is_paused:
            return
        self.is_paused = True
        self._cancel_ai_move()
        self._emit("pause")

    def resume(self) -> None:
        """Resume the match, re-arming the AI timer if an AI is to move."""
        if not self.is_paused:
            return
        self.is_paused = False
        self._emit("resume")
        self._schedule_ai_if_needed()

    def restart(self) -> None:
        """Start the match over from its original configuration."""
        self._cancel_ai_move()
        self.is_paused = False

        if self.original_config.seed is not None:
            self.rng.seed(self.original_config.seed)
        self.mode.reset()

        players = self.state.players
        for player in players:
            player.reset()
        self.tiles_played.clear()
        self.start_time = time.monotonic()

        resolved = self._resolve_config(self.original_config, self.mode)
        self.state = self._create_state(resolved, players)

        self.log.info("Game restarted")
        self._emit("restart")
        self._emit_round_start()
        self._schedule_ai_if_needed()

    # -------------------------------------------------------------------------
    # AI turns
    # -------------------------------------------------------------------------

    def _schedule_ai_if_needed(self) -> None:
        """Arm the single AI timer slot if the current player is an AI."""
        self._cancel_ai_move()
        if self.is_paused or self.state.is_game_over:
            return
        player = self.state.current_player
        if not player.is_ai:
            return

        delay = get_thinking_time(get_profile(player.profile), self.state.config.ai_delay, self.rng)
        self._ai_handle = self.scheduler.call_later(delay, self._run_ai_turn)

    def _cancel_ai_move(self) -> None:
        if self._ai_handle is not None:
            self._ai_handle.cancel()
            self._ai_handle = None

    @property
    def has_pending_ai_move(self) -> bool:
        return self._ai_handle is not None and not self._ai_handle.cancelled()

    def _run_ai_turn(self) -> None:
        self._ai_handle = None
        if self.is_paused or self.state.is_game_over:
            return
        player = self.state.current_player
        if player.is_ai:
            self.play_ai_turn(player)

    def play_ai_turn(self, player: Optional[Player] = None) -> str:
        """
        Take one AI action for the current player.

        Returns:
            "play", "draw" or "pass".
        """
        player = player or self.state.current_player
        profile = get_profile(player.profile)

        move = self.ai.select_move(player, self.state, profile)
        if move is not None:
            self.make_move(move.tile, move.position, player.id)
            return "play"

        if self.mode.can_player_draw(player, self.state):
            self.draw_tile(player.id)
            return "draw"

        self.pass_turn(player.id)
        return "pass"

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save_state(self) -> str:
        """Serialize the match to JSON."""
        state = self.state
        payload = {
            "gameId": self.game_id,
            "board": state.board.to_dict(),
            "players": [p.to_dict(reveal=True) for p in state.players],
            "currentPlayerIndex": state.current_player_index,
            "deck": [t.to_dict() for t in state.deck],
            "round": state.round,
            "config": state.config.to_dict(),
            "modeState": self.mode.get_mode_state(),
        }
        return json.dumps(payload)

    def load_state(self, payload: Union[str, bytes, dict]) -> None:
        """
        Restore a match from save_state() output.

        The payload is fully validated before anything is replaced; on
        failure the engine keeps its current match.

        Raises:
            MalformedSaveStateError: If the payload is invalid or
                inconsistent.
        """
        save = parse_save_state(payload)

        mode_id = GameModeFactory.normalize(save.config.mode or self.mode.mode_id)
        if mode_id is None:
            raise MalformedSaveStateError(f"Unknown mode {save.config.mode!r}")

        try:
            config = GameConfig.from_dict({**save.config.model_dump(exclude_none=True), "mode": mode_id})
        except (AttributeError, TypeError, ValueError) as e:
            raise MalformedSaveStateError(f"Invalid config: {e}") from e

        mode = self._create_mode(config)
        config = self._resolve_config(
            GameConfig(
                mode=mode_id,
                player_count=len(save.players),
                max_score=config.max_score,
                tiles_per_player=config.tiles_per_player,
                max_pips=config.max_pips,
                seed=config.seed,
                ai_delay=config.ai_delay,
                max_draws=config.max_draws,
                seats=[
                    PlayerSeat(p.name, p.is_ai, p.profile, p.avatar or "")
                    for p in save.players
                ],
            ),
            mode,
        )
        check_consistency(save, config.max_pips, mode.fixed_player_count)

        try:
            board = Board.from_dict(save.board.model_dump(), allow_branching=mode.allows_branching)
        except (KeyError, ValueError) as e:
            raise MalformedSaveStateError(f"Board cannot be replayed: {e}") from e

        try:
            mode.load_mode_state(save.mode_state)
            mode.check_loaded_state(board)
        except MalformedSaveStateError:
            raise
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            raise MalformedSaveStateError(f"Invalid mode state: {e}") from e

        players = []
        for seat_index, p in enumerate(save.players):
            team = p.team
            if mode.team_play and team is None:
                team = mode.get_player_team(seat_index)
            players.append(Player(
                id=p.id,
                name=p.name,
                hand=[t.to_tile() for t in p.hand],
                score=p.score,
                is_ai=p.is_ai,
                team=team,
                avatar=p.avatar or "",
                profile=p.profile,
            ))

        # Everything validated: commit
        self._cancel_ai_move()
        self.mode = mode
        self.ai = DominoAI(mode, self.rng)
        self.state = GameState(
            board=board,
            players=players,
            config=config,
            deck=[t.to_tile() for t in save.deck],
            current_player_index=save.current_player_index,
            round=save.round,
        )
        if save.game_id:
            self.game_id = save.game_id
            self.log = ContextLogger(logger).with_context(game_id=self.game_id)
        self.is_paused = False
        self.tiles_played.clear()

        current = self.state.current_player
        self.log.info(f"State loaded: round {save.round}, {current.name} to move")
        self._emit("state_loaded", player_id=current.id, round=save.round, current_player=current.name)
        self._schedule_ai_if_needed()
