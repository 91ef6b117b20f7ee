import os
import random
import sys
import pytest

# Ensure the backend root (containing the `pong_server` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from pong_server import create_app, socketio
from pong_server.services.pong import Arena


class TestConfig:
    __test__ = False
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    TICK_INTERVAL_MS = 1000 / 30
    IS_PRODUCTION = False
    ALLOWED_ORIGINS = []
    LOG_LEVEL = 'DEBUG'
    HOST = '127.0.0.1'
    PORT = 3000


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class Recorder:
    """Stands in for the Socket.IO broadcast primitive."""

    def __init__(self):
        self.sent = []

    def __call__(self, handle, event, payload=None):
        self.sent.append((handle, event, payload))

    def events_for(self, handle, event=None):
        return [p for h, e, p in self.sent if h == handle and (event is None or e == event)]

    def names_for(self, handle):
        return [e for h, e, _ in self.sent if h == handle]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['pong'].shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def arena(recorder, clock):
    # No background loops: tests drive ticks through arena.scheduler.tick
    return Arena(recorder, rng=random.Random(7), clock=clock, autostart=False)
