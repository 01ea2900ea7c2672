from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from flask import current_app, request
from flask_socketio import emit

from buzzquiz import socketio
from buzzquiz.errors import AuthorityError, GameError
from buzzquiz.models import Song
from buzzquiz.services.game.session import GameSession


class Role(str, Enum):
    ANY = 'any'
    HOST = 'host'
    PLAYER = 'player'


class MessageKind(str, Enum):
    HOST_CONNECT = 'host-connect'
    PLAYER_JOIN = 'player-join'
    START_GAME = 'start-game'
    ROUND_STARTED = 'round-started'
    BUZZ_IN = 'buzz-in'
    SUBMIT_GUESS = 'submit-guess'
    PASS_ROUND = 'pass-round'
    SKIP_ROUND = 'skip-round'
    NEXT_ROUND = 'next-round'
    RESET_GAME = 'reset-game'


# handler(session, sid, player_id, payload); player_id is only set for Role.PLAYER
Handler = Callable[[GameSession, str, Optional[str], Dict[str, Any]], None]


def _host_connect(session, sid, _player_id, _data):
    session.connect_host(sid)


def _player_join(session, sid, _player_id, data):
    session.join(sid, data.get('playerId'), data.get('name'))


def _start_game(session, _sid, _player_id, data):
    session.start_game(data.get('totalRounds'), data.get('hardMode'))


def _round_started(session, _sid, _player_id, data):
    session.start_round(Song.from_payload(data))


def _buzz_in(session, _sid, player_id, _data):
    session.buzz(player_id)


def _submit_guess(session, _sid, player_id, data):
    session.submit_guess(player_id, data.get('text'))


def _pass_round(session, _sid, player_id, _data):
    session.pass_round(player_id)


def _skip_round(session, _sid, _player_id, _data):
    session.skip_round()


def _next_round(session, _sid, _player_id, _data):
    session.next_round()


def _reset_game(session, _sid, _player_id, _data):
    session.reset()


HANDLERS: Dict[MessageKind, Tuple[Role, Handler]] = {
    MessageKind.HOST_CONNECT: (Role.ANY, _host_connect),
    MessageKind.PLAYER_JOIN: (Role.ANY, _player_join),
    MessageKind.START_GAME: (Role.HOST, _start_game),
    MessageKind.ROUND_STARTED: (Role.HOST, _round_started),
    MessageKind.BUZZ_IN: (Role.PLAYER, _buzz_in),
    MessageKind.SUBMIT_GUESS: (Role.PLAYER, _submit_guess),
    MessageKind.PASS_ROUND: (Role.PLAYER, _pass_round),
    MessageKind.SKIP_ROUND: (Role.HOST, _skip_round),
    MessageKind.NEXT_ROUND: (Role.HOST, _next_round),
    MessageKind.RESET_GAME: (Role.HOST, _reset_game),
}

_missing = set(MessageKind) - set(HANDLERS)
if _missing:
    raise RuntimeError(f"no handler for message kinds: {sorted(k.value for k in _missing)}")


def get_session() -> GameSession:
    return current_app.extensions['game_session']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _authorize(session: GameSession, role: Role, sid: str) -> Optional[str]:
    if role is Role.HOST:
        if not session.is_host(sid):
            raise AuthorityError('host only')
        return None
    if role is Role.PLAYER:
        player_id = session.player_for_sid(sid)
        if player_id is None:
            raise AuthorityError('player only')
        return player_id
    return None


def dispatch(kind: MessageKind, data=None) -> None:
    """Check sender authority, apply the message, report rejections to the sender."""
    session = get_session()
    sid = _get_sid()
    payload = data if isinstance(data, dict) else {}
    role, handler = HANDLERS[kind]
    with session.lock:
        try:
            player_id = _authorize(session, role, sid)
            handler(session, sid, player_id, payload)
        except AuthorityError as exc:
            current_app.logger.debug(f"[authority] dropped {kind.value} from sid={sid}: {exc.message}")
        except GameError as exc:
            current_app.logger.info(f"[rejected] {kind.value} from sid={sid}: {exc.message}")
            emit('error', {'message': exc.message})


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    get_session().disconnect(sid)


def handle_error(exc):
    current_app.logger.exception(f"[handler-error] {exc}")


def _make_handler(kind: MessageKind):
    def _handler(data=None):
        dispatch(kind, data)
    _handler.__name__ = f"handle_{kind.name.lower()}"
    return _handler


def register_socketio_handlers(namespace: str = '/') -> None:
    """Bind connect/disconnect and one handler per MessageKind on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for kind in MessageKind:
        socketio.on_event(kind.value, _make_handler(kind), namespace=namespace)
    socketio.on_error(namespace)(handle_error)
