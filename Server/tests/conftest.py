import os
import sys
import pytest

# Ensure the server root (containing the `shiritori` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
SERVER_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if SERVER_ROOT not in sys.path:
    sys.path.insert(0, SERVER_ROOT)

from shiritori import create_app
from shiritori.config import TestingConfig
from shiritori.services.lexicon_service import LexiconValidator
from shiritori.services.registry_service import SessionRegistry, get_session_registry
from shiritori.services.session_service import GameSession


@pytest.fixture()
def app_bundle(tmp_path):
    class TestConfig(TestingConfig):
        LOG_DIR = str(tmp_path / 'logs')

    application, socketio = create_app(TestConfig)
    yield application, socketio

    registry = get_session_registry()
    for summary in registry.list(include_all=True):
        registry.remove(summary.session_id)


@pytest.fixture()
def flask_app(app_bundle):
    return app_bundle[0]


@pytest.fixture()
def socketio(app_bundle):
    return app_bundle[1]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(app_bundle):
    return get_session_registry()


@pytest.fixture()
def sio_factory(flask_app, socketio):
    clients = []

    def make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield make

    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def connected_client(sio_factory):
    """Socket clients paired with the connection id announced on connect."""
    def make():
        test_client = sio_factory()
        announced = [m for m in test_client.get_received() if m["name"] == "connected"]
        return test_client, announced[0]["args"][0]["connectionId"]

    return make


@pytest.fixture()
def session_factory():
    """Standalone sessions with a recording listener; clocks are stopped afterwards."""
    created = []

    def make(turn_duration=30, min_word_length=4, words=None):
        published = []
        session = GameSession(
            f"test-{len(created)}",
            validator=LexiconValidator(words),
            min_word_length=min_word_length,
            turn_duration=turn_duration,
            listener=published.append
        )
        session.published = published
        created.append(session)
        return session

    yield make

    for session in created:
        session.terminate()


@pytest.fixture()
def standalone_registry():
    reg = SessionRegistry(turn_duration=30)
    yield reg
    for summary in reg.list(include_all=True):
        reg.remove(summary.session_id)
