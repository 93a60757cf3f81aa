# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from backend.app.auth import AuthService, hash_password
from backend.app.config import Settings
from backend.app.main import create_app
from backend.app.models.transaction_model import Transaction
from backend.app.models.user_model import Role, User

PASSWORD = "password123"


@pytest.fixture
def app():
    """
    A fresh application on an in-memory SQLite database. The tables are
    created by the lifespan hook, so use it through the ``client`` fixture.
    """
    settings = Settings(database_url="sqlite://", bcrypt_rounds=4, log_level="WARNING")
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def add_user(app, name, email, role=Role.USER, password=PASSWORD, user_id=None):
    db = app.state.session_factory()
    try:
        user = User(name=name, email=email, role=role,
                    password_hash=hash_password(password, rounds=4) if password else None)
        if user_id:
            user.id = user_id
        db.add(user)
        db.commit()
        return user
    finally:
        db.close()


def open_session(app, user) -> str:
    db = app.state.session_factory()
    try:
        return AuthService(db).open_session(db.get(User, user.id)).token
    finally:
        db.close()


def count_transactions(app) -> int:
    db = app.state.session_factory()
    try:
        return db.query(Transaction).count()
    finally:
        db.close()


def fetch_user(app, user_id) -> User:
    db = app.state.session_factory()
    try:
        return db.get(User, user_id)
    finally:
        db.close()


@pytest.fixture
def admin(app, client):
    return add_user(app, "Admin User", "admin@example.com", Role.ADMIN)


@pytest.fixture
def member(app, client):
    return add_user(app, "User 1", "user1@example.com", Role.USER)


@pytest.fixture
def admin_headers(app, admin):
    return {"Authorization": f"Bearer {open_session(app, admin)}"}


@pytest.fixture
def member_headers(app, member):
    return {"Authorization": f"Bearer {open_session(app, member)}"}
