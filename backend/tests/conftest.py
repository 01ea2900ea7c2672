import os
import sys
import pytest

# Ensure the backend root (containing the `buzzquiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from buzzquiz import create_app, socketio
from buzzquiz.services.game.session import GameSession


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    ANSWER_TIMEOUT_SEC = 15
    MAX_NAME_LENGTH = 20
    DEFAULT_TOTAL_ROUNDS = 10
    SERVER_ADDRESS = '192.168.1.50'
    PORT = 3000


class ManualTimer:
    """Stand-in for AnswerTimer whose expiry is triggered by the test."""

    def __init__(self):
        self.callback = None
        self.delay = None
        self.starts = 0
        self.cancels = 0

    @property
    def pending(self):
        return self.callback is not None

    def start(self, delay_sec, callback):
        assert self.callback is None, 'timer re-armed while pending'
        self.delay = delay_sec
        self.callback = callback
        self.starts += 1

    def cancel(self):
        if self.callback is not None:
            self.cancels += 1
        self.callback = None

    def expire(self):
        callback, self.callback = self.callback, None
        assert callback is not None, 'no pending timer'
        callback()


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingBroadcaster:
    def __init__(self):
        self.events = []

    def broadcast(self, event, payload=None):
        self.events.append((None, event, payload))

    def send(self, sid, event, payload=None):
        self.events.append((sid, event, payload))

    def named(self, event, to='any'):
        return [p for sid, e, p in self.events if e == event and (to == 'any' or sid == to)]

    def last(self, event, to='any'):
        found = self.named(event, to)
        return found[-1] if found else None

    def clear(self):
        self.events = []


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def timer():
    return ManualTimer()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def session(broadcaster, timer, clock):
    return GameSession(broadcaster=broadcaster, answer_timer=timer, clock=clock,
                       server_address='192.168.1.50')


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def game_session(flask_app, timer, clock):
    live = flask_app.extensions['game_session']
    live.answer_timer = timer
    live.clock = clock
    return live


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app, game_session):
    """Factory for Socket.IO test clients; all are disconnected at teardown."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
