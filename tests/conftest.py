import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'intune' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories

ADMIN_EMAIL = "admin@intune.test"
ADMIN_PASSWORD = "admin-password"
OLD_BASE_URL = "http://old.example.com"
NEW_BASE_URL = "http://new.example.com"


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def app_overrides(tmp_path, upload_dir):
    """Per-test configuration: private SQLite file and upload directory."""
    return {
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{(tmp_path / 'test.sqlite').as_posix()}",
        "UPLOAD_DIR": str(upload_dir),
        "ENABLE_RATE_LIMITING": False,
        "OLD_BASE_URL": OLD_BASE_URL,
        "NEW_BASE_URL": NEW_BASE_URL,
    }


@pytest.fixture
def app(app_overrides):
    import app as app_module

    application = app_module.create_app(app_overrides)
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from intune.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def music_service(app):
    return app.extensions["music_service"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_user(factories):
    return factories.UserFactory(email=ADMIN_EMAIL, password=ADMIN_PASSWORD, is_admin=True)


@pytest.fixture
def admin_client(client, admin_user):
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client


@pytest.fixture
def category(factories):
    """A category with two types ("Morning", "Evening")."""
    cat = factories.CategoryFactory(name="Meditation")
    factories.CategoryTypeFactory(category=cat, name="Morning")
    factories.CategoryTypeFactory(category=cat, name="Evening")
    return cat
