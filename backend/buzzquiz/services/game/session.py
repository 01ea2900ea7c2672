import logging
import threading
import time
from typing import Callable, Optional, Set

from buzzquiz.errors import StateError, ValidationError
from buzzquiz.models import REJOIN_PHASES, GamePhase, Player, Song
from .matching import is_correct_guess
from .registry import PlayerRegistry
from .scoring import apply_penalty, buzz_points, clamp_rounds, last_place

logger = logging.getLogger(__name__)

DRINK_MESSAGE = 'Take a drink! 🍺'


class GameSession:
    """Authoritative state for the one game this server hosts.

    Every public method takes ``lock`` for its whole transition, and the
    answer-timer callback does the same, so concurrent socket events are
    applied one at a time and exactly one buzz per opening can win.

    Rejected operations raise ``ValidationError``/``StateError`` before
    touching any state.
    """

    def __init__(self, broadcaster, answer_timer, clock: Callable[[], float] = time.monotonic,
                 answer_timeout_sec: float = 15, max_name_length: int = 20,
                 default_total_rounds: int = 10, server_address: str = 'localhost'):
        self.lock = threading.RLock()
        self.broadcaster = broadcaster
        self.answer_timer = answer_timer
        self.clock = clock
        self.answer_timeout_sec = answer_timeout_sec
        self.max_name_length = max_name_length
        self.default_total_rounds = default_total_rounds
        self.server_address = server_address

        self.registry = PlayerRegistry()
        self.phase = GamePhase.LOBBY
        self.host_sid: Optional[str] = None
        self.round_number = 0
        self.total_rounds = default_total_rounds
        self.hard_mode = False
        self.current_song: Optional[Song] = None
        self.round_started_at = 0.0
        self.buzzed_player: Optional[str] = None
        self.buzz_points = 0
        self.locked_out: Set[str] = set()
        # Bumped on every accepted buzz; a timeout only applies to its own buzz
        self._buzz_seq = 0

    # ---- Host ----

    def connect_host(self, sid: str) -> None:
        with self.lock:
            if self.host_sid and self.host_sid != sid:
                logger.info(f"[host] replacing host={self.host_sid} with {sid}")
            self.host_sid = sid
            logger.info(f"[host] connected sid={sid}")
            self.broadcaster.send(sid, 'lobby-update', {'players': self.get_players()})
            self.broadcaster.send(sid, 'server-info', {'address': self.server_address})

    def is_host(self, sid: str) -> bool:
        return self.host_sid is not None and sid == self.host_sid

    def start_game(self, total_rounds=None, hard_mode=False) -> None:
        with self.lock:
            if self.phase != GamePhase.LOBBY:
                raise StateError('Game already started')
            self.total_rounds = clamp_rounds(total_rounds, self.default_total_rounds)
            self.hard_mode = hard_mode is True
            self.round_number = 0
            self.current_song = None
            self.buzzed_player = None
            self.locked_out = set()
            self.registry.reset_scores()
            self.phase = GamePhase.PLAYING
            logger.info(f"[start] rounds={self.total_rounds} hard_mode={self.hard_mode}")
            self.broadcaster.broadcast('game-started', {'totalRounds': self.total_rounds})
            self.broadcaster.broadcast('await-round')

    def start_round(self, song: Song) -> None:
        """Open a new round for the track the host just started playing."""
        with self.lock:
            if not isinstance(song.title, str) or not song.title.strip():
                raise ValidationError('Invalid track')
            self.answer_timer.cancel()
            self.round_number += 1
            self.current_song = song
            self.buzzed_player = None
            self.buzz_points = 0
            self.locked_out = set()
            self.phase = GamePhase.ROUND_ACTIVE
            self.round_started_at = self.clock()
            logger.info(f"[round-start] round={self.round_number} title={song.title!r}")
            self.broadcaster.broadcast('round-started', {'roundNumber': self.round_number})

    def skip_round(self) -> None:
        with self.lock:
            if self.phase not in (GamePhase.ROUND_ACTIVE, GamePhase.GUESSING):
                raise StateError('No round in progress')
            logger.info(f"[skip] round={self.round_number}")
            self._end_round(winner=None)

    def next_round(self) -> None:
        with self.lock:
            if self.phase != GamePhase.ROUND_END:
                raise StateError('Round has not ended')
            if self.round_number >= self.total_rounds:
                self.phase = GamePhase.GAME_OVER
                logger.info(f"[finish] finished at round={self.round_number}")
                self.broadcaster.broadcast('game-over', {'scores': self.get_players()})
            else:
                self.phase = GamePhase.PLAYING
                self.broadcaster.broadcast('await-round')

    def reset(self) -> None:
        with self.lock:
            self.answer_timer.cancel()
            self.registry.reset_scores()
            self.round_number = 0
            self.current_song = None
            self.buzzed_player = None
            self.buzz_points = 0
            self.locked_out = set()
            self.phase = GamePhase.LOBBY
            logger.info("[reset] back to lobby")
            self.broadcaster.broadcast('game-reset')
            self.broadcaster.broadcast('lobby-update', {'players': self.get_players()})

    # ---- Players ----

    def join(self, sid: str, player_id, name) -> Player:
        """Register a new player or reattach a returning one to ``sid``."""
        with self.lock:
            if not isinstance(name, str) or not name.strip():
                raise ValidationError('Invalid name')
            if not isinstance(player_id, str) or not player_id.strip():
                raise ValidationError('Invalid player ID')
            name = name.strip()[:self.max_name_length].strip()

            if player_id not in self.registry and self.phase != GamePhase.LOBBY:
                raise StateError('Game already started')

            # One connection speaks for one player
            other = self.registry.find_by_sid(sid)
            if other and other[0] != player_id:
                self._player_left(sid)

            if player_id in self.registry:
                player = self.registry.reconnect(player_id, name, sid)
                logger.info(f"[rejoin] player={name!r} score={player.score} phase={self.phase.value}")
                self.broadcaster.send(sid, 'rejoin-state', {
                    'phase': REJOIN_PHASES[self.phase],
                    'roundNumber': self.round_number,
                    'totalRounds': self.total_rounds,
                    'scores': self.get_players(),
                    'lockedOut': player_id in self.locked_out,
                })
            else:
                player = self.registry.add(player_id, name, sid)
                logger.info(f"[join] player={name!r}")
            self.broadcaster.broadcast('lobby-update', {'players': self.get_players()})
            return player

    def buzz(self, player_id: str) -> int:
        """Claim the answer. Returns the points locked in for this buzz."""
        with self.lock:
            if self.phase != GamePhase.ROUND_ACTIVE:
                raise StateError('Cannot buzz in right now')
            if player_id in self.locked_out:
                raise StateError('You are locked out this round')
            player = self._require_player(player_id)

            elapsed_ms = (self.clock() - self.round_started_at) * 1000.0
            self.buzz_points = buzz_points(elapsed_ms)
            self.buzzed_player = player_id
            self.phase = GamePhase.GUESSING
            self._buzz_seq += 1
            seq = self._buzz_seq

            logger.info(f"[buzz] player={player.name!r} points={self.buzz_points} elapsed_ms={int(elapsed_ms)}")
            self.broadcaster.broadcast('buzz-accepted', {'playerName': player.name, 'points': self.buzz_points})
            self._send_to_player(player, 'your-turn', {'timeoutMs': int(self.answer_timeout_sec * 1000)})

            self.answer_timer.cancel()
            self.answer_timer.start(self.answer_timeout_sec, lambda: self._answer_expired(player_id, seq))
            return self.buzz_points

    def submit_guess(self, player_id: str, text) -> bool:
        """Resolve the current buzz. Returns True when the guess was right."""
        with self.lock:
            if self.phase != GamePhase.GUESSING or self.buzzed_player != player_id:
                raise StateError('Not your turn to guess')
            if not isinstance(text, str) or not text.strip():
                raise ValidationError('Invalid guess')
            player = self._require_player(player_id)
            self.answer_timer.cancel()

            if is_correct_guess(text, self.current_song.title if self.current_song else ''):
                player.score += self.buzz_points
                logger.info(f"[guess-correct] player={player.name!r} +{self.buzz_points}")
                self._end_round(winner=player.name)
                return True

            logger.info(f"[guess-wrong] player={player.name!r} guess={text!r}")
            self._resolve_wrong(player_id, player)
            return False

    def pass_round(self, player_id: str) -> None:
        with self.lock:
            if self.phase != GamePhase.ROUND_ACTIVE:
                raise StateError('Cannot pass right now')
            if player_id in self.locked_out:
                raise StateError('You are locked out this round')
            player = self._require_player(player_id)
            self.locked_out.add(player_id)
            logger.info(f"[pass] player={player.name!r}")
            self._end_round_if_exhausted()

    def disconnect(self, sid: str) -> None:
        with self.lock:
            if self.is_host(sid):
                # Host role is not handed off; the host screen must re-announce itself
                self.host_sid = None
                logger.info(f"[host] disconnected sid={sid}")
            self._player_left(sid)

    # ---- Queries ----

    def get_players(self):
        return self.registry.snapshot()

    def player_for_sid(self, sid: str) -> Optional[str]:
        entry = self.registry.find_by_sid(sid)
        return entry[0] if entry else None

    def to_dict(self):
        with self.lock:
            return {
                'phase': self.phase.value,
                'roundNumber': self.round_number,
                'totalRounds': self.total_rounds,
                'hardMode': self.hard_mode,
                'hostConnected': self.host_sid is not None,
                'buzzedPlayer': self._name_of(self.buzzed_player),
                'players': self.get_players(),
            }

    # ---- Internals (lock held) ----

    def _require_player(self, player_id: str) -> Player:
        player = self.registry.get(player_id)
        if player is None:
            raise ValidationError('Unknown player')
        return player

    def _name_of(self, player_id: Optional[str]) -> Optional[str]:
        player = self.registry.get(player_id) if player_id else None
        return player.name if player else None

    def _send_to_player(self, player: Player, event: str, payload=None) -> None:
        if player.sid:
            self.broadcaster.send(player.sid, event, payload)

    def _player_left(self, sid: str) -> None:
        entry = self.registry.mark_disconnected(sid)
        if not entry:
            return
        player_id, player = entry
        logger.info(f"[leave] player={player.name!r} kept score={player.score}")
        if self.phase == GamePhase.LOBBY:
            self.broadcaster.broadcast('lobby-update', {'players': self.get_players()})
        if self.phase == GamePhase.GUESSING and self.buzzed_player == player_id:
            self._resolve_wrong(player_id, player)
        elif self.phase == GamePhase.ROUND_ACTIVE:
            self._end_round_if_exhausted()

    def _answer_expired(self, player_id: str, seq: int) -> None:
        with self.lock:
            if seq != self._buzz_seq or self.phase != GamePhase.GUESSING or self.buzzed_player != player_id:
                logger.debug(f"[timeout-stale] seq={seq} current={self._buzz_seq}")
                return
            player = self.registry.get(player_id)
            logger.info(f"[timeout] player={player.name!r}")
            self._resolve_wrong(player_id, player)

    def _resolve_wrong(self, player_id: str, player: Player) -> None:
        """Wrong guess, timeout and buzzer disconnect all end the turn this way."""
        self.answer_timer.cancel()
        if self.hard_mode:
            removed = apply_penalty(player)
            logger.info(f"[penalty] player={player.name!r} -{removed}")
        self.locked_out.add(player_id)
        self.buzzed_player = None
        self.buzz_points = 0
        self.phase = GamePhase.ROUND_ACTIVE
        self.broadcaster.broadcast('wrong-guess', {'playerName': player.name})
        self._send_to_player(player, 'drink-prompt', {'message': DRINK_MESSAGE})
        self._end_round_if_exhausted()

    def _end_round_if_exhausted(self) -> None:
        if self.phase != GamePhase.ROUND_ACTIVE or not self.locked_out:
            return
        if all(pid in self.locked_out for pid in self.registry.connected_ids()):
            logger.info(f"[auto-skip] round={self.round_number} no eligible players left")
            self._end_round(winner=None)

    def _end_round(self, winner: Optional[str]) -> None:
        self.answer_timer.cancel()
        self.phase = GamePhase.ROUND_END
        self.buzzed_player = None
        self.buzz_points = 0
        scores = self.get_players()
        logger.info(f"[round-end] round={self.round_number} winner={winner!r}")
        self.broadcaster.broadcast('round-over', {
            'song': self.current_song.to_dict() if self.current_song else None,
            'scores': scores,
            'lastPlace': last_place(scores),
            'winner': winner,
        })
