import os
import sys
import random
import pytest

# Ensure the backend root (containing the `potus` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from potus import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['http://localhost:5173']
    PLACEHOLDER_AVATAR_URL = 'https://avatars.test/?name={name}'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import potus.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def file_app(tmp_path):
    """App on a SQLite file so several threads can share one database."""
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'potus.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'check_same_thread': False, 'timeout': 30}}

    application = create_app(FileConfig)
    with application.app_context():
        import potus.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def engine(flask_app):
    """Coordinator with a seeded random source for repeatable tie-breaks."""
    from potus.services.games.engine import GameCoordinator
    return GameCoordinator(rng=random.Random(1234))


@pytest.fixture()
def admin_game(client):
    """Create a game over HTTP and log the test client in as its admin."""
    game = client.post('/api/games').get_json()
    res = client.post('/api/admin/login', json={'admin_secret_word': game['admin_secret_word']})
    assert res.status_code == 200
    return game
