import os
import sys
import pytest

# Ensure the backend root (containing the `blockgame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from blockgame import create_app, db, socketio
from blockgame.services.grid import BroadcastHub, ClaimCoordinator, InMemoryGridStore, get_grid


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    GRID_STORE = 'sql'
    GRID_ROWS = 10
    GRID_COLS = 10
    ROUND_DURATION_MS = 30000
    ROUND_CHECK_INTERVAL_SEC = 1.0
    BROADCAST_QUEUE_SIZE = 100
    CORS_ORIGINS = ['http://localhost:3000']
    USER_COLORS = ['#6C63FF', '#4CAF50', '#2196F3', '#FF5252', '#FFB300', '#00BCD4']


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import blockgame.models  # noqa: F401
        db.create_all()
        get_grid().store.initialize(TestConfig.GRID_ROWS, TestConfig.GRID_COLS)
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def grid(flask_app):
    return get_grid()


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
def memory_store():
    store = InMemoryGridStore()
    store.initialize(10, 10)
    return store


@pytest.fixture()
def hub():
    return BroadcastHub()


@pytest.fixture()
def coordinator(memory_store, hub):
    return ClaimCoordinator(memory_store, hub)
