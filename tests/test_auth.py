from datetime import datetime, timedelta

from backend.app.auth import AuthService
from backend.app.models.session_model import AuthSession

from tests.conftest import PASSWORD

SIGN_UP = {
    "name": "Ana Pérez",
    "email": "ana@example.com",
    "password": "supersecreta",
    "confirmPassword": "supersecreta",
}


def test_sign_up_creates_regular_user_and_session(client):
    res = client.post("/api/auth/sign-up/email", json=SIGN_UP)
    assert res.status_code == 201
    body = res.json()
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["role"] == "user"
    assert body["token"]
    assert "finanzas_session" in res.cookies

    session = client.get("/api/auth/session", headers={"Authorization": f"Bearer {body['token']}"})
    assert session.status_code == 200
    assert session.json()["user"]["name"] == "Ana Pérez"


def test_sign_up_rejects_duplicate_email(client, member):
    res = client.post("/api/auth/sign-up/email", json={**SIGN_UP, "email": "USER1@example.com"})
    assert res.status_code == 400
    assert res.json() == {"message": "El correo electrónico ya está registrado"}


def test_sign_up_password_mismatch(client):
    res = client.post("/api/auth/sign-up/email", json={**SIGN_UP, "confirmPassword": "otracosa1"})
    assert res.status_code == 400
    assert res.json() == {"message": "Las contraseñas no coinciden"}


def test_sign_up_short_password(client):
    res = client.post("/api/auth/sign-up/email",
                      json={**SIGN_UP, "password": "corta", "confirmPassword": "corta"})
    assert res.status_code == 400
    assert res.json() == {"message": "La contraseña debe tener al menos 8 caracteres"}


def test_sign_in_with_bad_password(client, member):
    res = client.post("/api/auth/sign-in/email", json={"email": "user1@example.com", "password": "wrong-one"})
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid email or password"}


def test_sign_in_cookie_authenticates_requests(client, member):
    res = client.post("/api/auth/sign-in/email", json={"email": "user1@example.com", "password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["user"]["role"] == "user"

    # the TestClient keeps the session cookie
    assert client.get("/api/transactions").status_code == 200

    assert client.post("/api/auth/sign-out").json() == {"success": True}
    client.cookies.clear()
    assert client.get("/api/transactions", headers={"Authorization": f"Bearer {res.json()['token']}"}).status_code == 401


def test_expired_session_is_rejected_and_removed(app, client, member):
    db = app.state.session_factory()
    try:
        db.add(AuthSession(token="stale-token", user_id=member.id,
                           expires_at=datetime.utcnow() - timedelta(minutes=1)))
        db.commit()
    finally:
        db.close()

    res = client.get("/api/profile", headers={"Authorization": "Bearer stale-token"})
    assert res.status_code == 401

    db = app.state.session_factory()
    try:
        assert db.get(AuthSession, "stale-token") is None
    finally:
        db.close()


def test_token_from_headers():
    auth = AuthService(db=None, cookie_name="finanzas_session")
    assert auth.token_from_headers({"authorization": "Bearer abc"}) == "abc"
    assert auth.token_from_headers({"cookie": "theme=dark; finanzas_session=xyz"}) == "xyz"
    assert auth.token_from_headers({"authorization": "Basic abc"}) is None
    assert auth.token_from_headers({"cookie": "theme=dark"}) is None
    assert auth.token_from_headers({}) is None


def test_foreign_cookies_do_not_hide_the_session(app, client, member):
    token = client.post("/api/auth/sign-in/email", json={"email": "user1@example.com", "password": PASSWORD}).json()["token"]
    client.cookies.clear()

    cookie = f'prefs={{"theme":"dark"}}; finanzas_session={token}'
    res = client.get("/api/profile", headers={"Cookie": cookie})
    assert res.status_code == 200
    assert res.json()["email"] == "user1@example.com"

    auth = AuthService(db=None, cookie_name="finanzas_session")
    assert auth.token_from_headers({"cookie": 'prefs={"theme":"dark"}; finanzas_session=xyz'}) == "xyz"
