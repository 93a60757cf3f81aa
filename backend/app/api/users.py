# backend/app/api/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.deps import get_store, json_body, json_body_schema, require
from backend.app.auth import SessionInfo
from backend.app.errors import InternalError, NotFound
from backend.app.schemas import UserOut, UserUpdate
from backend.app.store import Store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[UserOut])
def list_users(
    session: SessionInfo = Depends(require("users", "list")),
    store: Store = Depends(get_store),
):
    try:
        return store.list_users()
    except SQLAlchemyError:
        logger.exception("Could not list users")
        raise InternalError()


@router.put("", response_model=UserOut, openapi_extra=json_body_schema(UserUpdate))
def update_user(
    session: SessionInfo = Depends(require("users", "update")),
    store: Store = Depends(get_store),
    payload: UserUpdate = Depends(json_body(UserUpdate)),
):
    try:
        updated = store.update_user(payload)
    except SQLAlchemyError:
        logger.exception("Could not update user %s", payload.id)
        raise InternalError()
    if updated is None:
        raise NotFound("User not found")
    logger.info("User %s set %s to name=%r role=%s", session.user_id, payload.id, payload.name, payload.role.value)
    return updated
