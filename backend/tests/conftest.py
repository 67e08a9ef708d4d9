import os
import sys
import pytest

# Ensure the backend root (containing the `wordmatch` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from wordmatch import create_app, get_session, socketio

NS = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = NS
    NAME_MAX_LENGTH = 24
    AFFIX_MIN_LENGTH = 4
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def session(flask_app):
    return get_session()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace=NS
    )
    yield test_client
    try:
        test_client.disconnect(namespace=NS)
    except Exception:
        pass


@pytest.fixture()
def connect(flask_app):
    """Factory: open a socket, say hello with the given role, return the client."""
    opened = []

    def _connect(role=None, **hello):
        c = socketio.test_client(flask_app, namespace=NS)
        payload = dict(hello)
        if role:
            payload['role'] = role
        c.emit('hello', payload, namespace=NS)
        opened.append(c)
        return c

    yield _connect
    for c in opened:
        if c.is_connected(NS):
            c.disconnect(namespace=NS)


def received(test_client):
    """Drain a test client's queue as (event, payload) pairs."""
    return [(pkt['name'], pkt['args'][0] if pkt['args'] else None)
            for pkt in test_client.get_received(NS)]
