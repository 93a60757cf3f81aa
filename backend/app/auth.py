# backend/app/auth.py
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Mapping, Optional

import bcrypt
from sqlalchemy import func
from sqlalchemy.orm import Session
from starlette.requests import cookie_parser

from backend.app.models import transaction_model  # noqa: F401  mapper registry needs every model
from backend.app.models.session_model import AuthSession
from backend.app.models.user_model import Role, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionInfo:
    token: str
    user_id: str
    name: str
    email: str
    role: Role


class AuthError(Exception):
    pass


class EmailTaken(AuthError):
    pass


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class AuthService:
    """
    Email/password authentication backed by the sessions table.

    Handlers only use get_session(); the sign_* methods back the auth
    endpoints and the login/signup pages.
    """

    def __init__(self, db: Session, cookie_name: str = "finanzas_session",
                 ttl_hours: int = 168, bcrypt_rounds: int = 12):
        self.db = db
        self.cookie_name = cookie_name
        self.ttl = timedelta(hours=ttl_hours)
        self.bcrypt_rounds = bcrypt_rounds

    def token_from_headers(self, headers: Mapping[str, str]) -> Optional[str]:
        authorization = headers.get("authorization") or ""
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

        raw_cookie = headers.get("cookie")
        if not raw_cookie:
            return None
        return cookie_parser(raw_cookie).get(self.cookie_name) or None

    def get_session(self, headers: Mapping[str, str]) -> Optional[SessionInfo]:
        token = self.token_from_headers(headers)
        if token is None:
            return None

        record = self.db.get(AuthSession, token)
        if record is None:
            return None
        if record.expires_at <= datetime.utcnow():
            self.db.delete(record)
            self.db.commit()
            logger.info("Session for user %s expired", record.user_id)
            return None

        user = record.user
        return SessionInfo(token=record.token, user_id=user.id, name=user.name,
                           email=user.email, role=Role(user.role))

    def open_session(self, user: User) -> AuthSession:
        now = datetime.utcnow()
        record = AuthSession(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            created_at=now,
            expires_at=now + self.ttl,
        )
        self.db.add(record)
        self.db.commit()
        return record

    def sign_up(self, name: str, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        exists = self.db.query(User.id).filter(func.lower(User.email) == email).first()
        if exists:
            raise EmailTaken("El correo electrónico ya está registrado")

        user = User(name=name, email=email, role=Role.USER,
                    password_hash=hash_password(password, self.bcrypt_rounds))
        self.db.add(user)
        self.db.flush()
        record = self.open_session(user)
        logger.info("New account %s (%s)", user.id, email)
        return record

    def sign_in(self, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        user = self.db.query(User).filter(func.lower(User.email) == email).first()
        if user is None or not check_password(password, user.password_hash):
            logger.info("Failed sign-in for %s", email)
            raise AuthError("Invalid email or password")
        record = self.open_session(user)
        logger.info("User %s signed in", user.id)
        return record

    def sign_out(self, token: str) -> bool:
        record = self.db.get(AuthSession, token)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        logger.info("User %s signed out", record.user_id)
        return True
