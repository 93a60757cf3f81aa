from fastapi import Depends
from sqlalchemy.exc import OperationalError

from backend.app.api.deps import get_store
from backend.app.db import get_db
from backend.app.models.user_model import Role
from backend.app.store import Store

from tests.conftest import add_user, fetch_user


def test_users_require_session(client):
    assert client.get("/api/users").status_code == 401
    assert client.put("/api/users", json={"id": "u1", "name": "John", "role": "user"}).status_code == 401


def test_member_cannot_list_or_update(app, client, member, member_headers):
    target = add_user(app, "John Doe", "john@example.com", user_id="u1")

    assert client.get("/api/users", headers=member_headers).status_code == 403
    res = client.put("/api/users", json={"id": "u1", "name": "Hacked", "role": "admin"}, headers=member_headers)
    assert res.status_code == 403

    unchanged = fetch_user(app, target.id)
    assert unchanged.name == "John Doe"
    assert unchanged.role == Role.USER


def test_list_is_ordered_by_name_without_secrets(app, client, admin_headers):
    add_user(app, "Zoe", "zoe@example.com")
    add_user(app, "Bruno", "bruno@example.com")

    res = client.get("/api/users", headers=admin_headers)
    assert res.status_code == 200
    users = res.json()
    assert [u["name"] for u in users] == ["Admin User", "Bruno", "Zoe"]
    for user in users:
        assert set(user) == {"id", "name", "email", "role"}


def test_admin_updates_user(app, client, admin_headers):
    add_user(app, "John Doe", "john@example.com", user_id="u1")

    res = client.put("/api/users", json={"id": "u1", "name": "John Updated", "role": "admin"},
                     headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == {"id": "u1", "name": "John Updated", "email": "john@example.com", "role": "admin"}

    listed = {u["id"]: u for u in client.get("/api/users", headers=admin_headers).json()}
    assert listed["u1"]["name"] == "John Updated"
    assert listed["u1"]["role"] == "admin"


def test_repeated_update_is_idempotent(app, client, admin_headers):
    add_user(app, "John Doe", "john@example.com", user_id="u1")
    body = {"id": "u1", "name": "John Updated", "role": "admin"}

    first = client.put("/api/users", json=body, headers=admin_headers).json()
    second = client.put("/api/users", json=body, headers=admin_headers).json()
    assert first == second


def test_update_missing_fields(client, admin_headers):
    res = client.put("/api/users", json={"id": "u1", "name": "John"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json() == {"message": "Missing required fields"}


def test_update_rejects_unknown_role(app, client, admin_headers):
    add_user(app, "John Doe", "john@example.com", user_id="u1")
    res = client.put("/api/users", json={"id": "u1", "name": "John", "role": "administrador"},
                     headers=admin_headers)
    assert res.status_code == 400
    assert fetch_user(app, "u1").role == Role.USER


def test_update_short_name(app, client, admin_headers):
    res = client.put("/api/users", json={"id": "u1", "name": "J", "role": "user"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "El nombre debe tener al menos 2 caracteres"


def test_update_unknown_user(client, admin_headers):
    res = client.put("/api/users", json={"id": "missing", "name": "Nobody", "role": "user"},
                     headers=admin_headers)
    assert res.status_code == 404
    assert res.json() == {"message": "User not found"}


def test_users_method_not_allowed(client, admin_headers):
    assert client.post("/api/users", json={}, headers=admin_headers).status_code == 405


def test_malformed_body_without_session_is_unauthorized(client):
    res = client.put("/api/users", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 401


class ExplodingStore(Store):
    def list_users(self):
        raise OperationalError("SELECT users", {}, Exception("database is locked"))

    def update_user(self, payload):
        raise OperationalError("UPDATE users", {}, Exception("database is locked"))


def test_store_failure_is_a_generic_500(app, client, admin_headers):
    add_user(app, "John Doe", "john@example.com", user_id="u1")

    def exploding_store(db=Depends(get_db)):
        return ExplodingStore(db)

    app.dependency_overrides[get_store] = exploding_store
    try:
        listed = client.get("/api/users", headers=admin_headers)
        updated = client.put("/api/users", json={"id": "u1", "name": "Changed", "role": "admin"},
                             headers=admin_headers)
    finally:
        app.dependency_overrides.clear()

    for res in (listed, updated):
        assert res.status_code == 500
        assert res.json() == {"message": "Internal server error"}
    unchanged = fetch_user(app, "u1")
    assert unchanged.name == "John Doe"
    assert unchanged.role == Role.USER
