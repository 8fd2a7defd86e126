import fnmatch
import os
import sys
import pytest

# Ensure the backend root (containing the `qrgames` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from redis.exceptions import ConnectionError as RedisConnectionError

from qrgames import create_app, socketio
from qrgames.store import MemorySessionStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    STORAGE_TYPE = 'memory'
    STORE_LOCK_TIMEOUT_SEC = 1
    PUBLIC_BASE_URL = 'http://games.test'
    QR_CODE_ENABLED = True
    QUESTION_BANK_PATH = None
    SESSION_MAX_AGE_SEC = 0
    CORS_ORIGINS = ['*']
    LOG_LEVEL = 'DEBUG'


class FakeLock:
    def __init__(self, client, name):
        self.client = client
        self.name = name

    def acquire(self):
        if self.client.down:
            raise RedisConnectionError('redis is down')
        self.client.locks_taken.append(self.name)
        return True

    def release(self):
        pass


class FakeRedis:
    """Dict-backed stand-in for the subset of redis.Redis the store uses."""

    def __init__(self):
        self.data = {}
        self.down = False
        self.locks_taken = []

    def _check(self):
        if self.down:
            raise RedisConnectionError('redis is down')

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value
        return True

    def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    def exists(self, key):
        self._check()
        return 1 if key in self.data else 0

    def scan_iter(self, match='*'):
        self._check()
        return [k for k in list(self.data) if fnmatch.fnmatchcase(k, match)]

    def lock(self, name, timeout=None, blocking_timeout=None):
        return FakeLock(self, name)

    def close(self):
        pass


@pytest.fixture()
def store():
    return MemorySessionStore(lock_timeout=1)


@pytest.fixture()
def fake_redis():
    return FakeRedis()


@pytest.fixture()
def flask_app(store):
    application = create_app(TestConfig, store=store)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def manager(flask_app):
    return flask_app.extensions['lobby_manager']


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except RuntimeError:
            pass


def payloads(packets, name):
    """Payloads of every received packet called ``name``."""
    return [pkt['args'][0] if pkt['args'] else None for pkt in packets if pkt['name'] == name]
