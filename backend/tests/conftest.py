import os
import sys
from datetime import datetime, timedelta
import pytest

# Ensure the backend root (containing the `hvz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from hvz import create_app, db, socketio


T0 = datetime(2026, 5, 1, 12, 0, 0)


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    MIN_PLAYERS = 1
    BITE_CODE_BYTES = 16
    POI_MIN_RADIUS = 1
    POI_MAX_RADIUS = 50


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import hvz.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def api_app():
    """App for HTTP tests: every request gets its own app context and session."""
    application = create_app(TestConfig)
    with application.app_context():
        import hvz.models  # noqa: F401
        db.create_all()
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(api_app):
    return api_app.test_client()


@pytest.fixture()
def make_client(api_app):
    """Return a logged-in test client for a fresh user."""
    def _make(username):
        c = api_app.test_client()
        res = c.post('/register', json={'username': username, 'password': 'password'})
        assert res.status_code == 201
        c.user = res.get_json()['user']
        return c
    return _make


@pytest.fixture()
def make_user(flask_app):
    from hvz.models import User

    def _make(username):
        user = User(username=username)
        user.set_password('password')
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture()
def sio_client(api_app):
    test_client = socketio.test_client(
        api_app,
        flask_test_client=api_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


def window_around_now(before=timedelta(hours=1), after=timedelta(hours=1)):
    """ISO begin/end strings around the current UTC time."""
    from hvz.services.games.scheduler import utcnow
    now = utcnow()
    return (now - before).isoformat(), (now + after).isoformat()
