# backend/app/api/deps.py
import logging
from typing import Type

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from backend.app import policy
from backend.app.auth import AuthService, SessionInfo
from backend.app.db import get_db
from backend.app.errors import Forbidden, Unauthenticated, ValidationFailed
from backend.app.store import Store

logger = logging.getLogger(__name__)


def get_store(db: Session = Depends(get_db)) -> Store:
    return Store(db)


def get_auth(request: Request, db: Session = Depends(get_db)) -> AuthService:
    settings = request.app.state.settings
    return AuthService(
        db,
        cookie_name=settings.session_cookie_name,
        ttl_hours=settings.session_ttl_hours,
        bcrypt_rounds=settings.bcrypt_rounds,
    )


def current_session(request: Request, auth: AuthService = Depends(get_auth)) -> SessionInfo:
    session = auth.get_session(request.headers)
    if session is None:
        raise Unauthenticated()
    return session


def require(resource: str, action: str):
    """Dependency that lets the request through only if the policy allows it."""

    def guard(session: SessionInfo = Depends(current_session)) -> SessionInfo:
        if not policy.is_allowed(session.role, resource, action):
            logger.warning("User %s (%s) denied %s:%s", session.user_id, session.role.value, resource, action)
            raise Forbidden()
        return session

    return guard


def json_body(model: Type[BaseModel]):
    """
    Dependency that parses the request body into ``model``. Handlers list it
    after the session guard, so 401 and 403 come before any body error.
    """

    async def parse(request: Request) -> BaseModel:
        if not (await request.body()).strip():
            raise ValidationFailed()
        try:
            data = await request.json()
        except ValueError:
            raise ValidationFailed("Invalid JSON body")
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RequestValidationError(exc.errors())

    return parse


def json_body_schema(model: Type[BaseModel]) -> dict:
    """``openapi_extra`` documenting a body read through ``json_body``."""
    schema = model.model_json_schema(ref_template="#/components/schemas/{model}")
    return {"requestBody": {"required": True, "content": {"application/json": {"schema": schema}}}}
