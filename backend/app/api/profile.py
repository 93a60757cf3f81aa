# backend/app/api/profile.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.deps import get_store, json_body, json_body_schema, require
from backend.app.auth import SessionInfo
from backend.app.errors import InternalError, NotFound
from backend.app.schemas import ProfileOut, ProfileUpdate, UserOut
from backend.app.store import Store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProfileOut)
def read_profile(
    session: SessionInfo = Depends(require("profile", "read")),
    store: Store = Depends(get_store),
):
    """
    The caller's own user record plus the count and sum of the
    transactions they own.
    """
    try:
        profile = store.get_profile(session.user_id)
    except SQLAlchemyError:
        logger.exception("Profile lookup failed for %s", session.user_id)
        raise InternalError()
    if profile is None:
        raise NotFound("User not found")
    return profile


@router.put("", response_model=UserOut, openapi_extra=json_body_schema(ProfileUpdate))
def update_profile(
    session: SessionInfo = Depends(require("profile", "update")),
    store: Store = Depends(get_store),
    payload: ProfileUpdate = Depends(json_body(ProfileUpdate)),
):
    try:
        updated = store.update_profile(session.user_id, payload)
    except SQLAlchemyError:
        logger.exception("Profile update failed for %s", session.user_id)
        raise InternalError()
    if updated is None:
        raise NotFound("User not found")
    return updated
