import os
import sys
import pytest

# Ensure the backend root (containing the `partygames` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from partygames import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DEFAULT_LOCALE = 'de'
    LEADERBOARD_LIMIT = 10
    MAX_CONTENT_LENGTH = 1024 * 1024
    CORS_ORIGINS = []


@pytest.fixture()
def make_app(tmp_path):
    """Build an app with fresh tables, optionally with injected storage."""
    class _Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    def _make(storage=None):
        application = create_app(_Config, storage=storage)
        with application.app_context():
            db.create_all()
        return application

    return _make


@pytest.fixture()
def flask_app(make_app):
    application = make_app()
    # No app context is held across requests: Flask-Login caches the user on
    # `g`, which would leak between test clients sharing one context.
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


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
def make_user(flask_app):
    from partygames.models import User

    def _make(username, password='password', is_admin=False):
        """Create a user and return its id."""
        with flask_app.app_context():
            user = User(username=username, email=f'{username}@example.com', is_admin=is_admin)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture()
def admin_client(flask_app, make_user):
    make_user('admin', is_admin=True)
    c = flask_app.test_client()
    res = c.post('/api/login', json={'username': 'admin', 'password': 'password'})
    assert res.status_code == 200
    return c
