# backend/app/api/transactions.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.deps import get_store, json_body, json_body_schema, require
from backend.app.auth import SessionInfo
from backend.app.errors import InternalError
from backend.app.schemas import TransactionIn, TransactionOut
from backend.app.store import Store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[TransactionOut])
def list_transactions(
    session: SessionInfo = Depends(require("transactions", "list")),
    store: Store = Depends(get_store),
):
    """All transactions, newest first, each with its owner's name and email."""
    try:
        return store.list_transactions()
    except SQLAlchemyError:
        logger.exception("Could not list transactions")
        raise InternalError()


@router.post("", response_model=TransactionOut, status_code=201, openapi_extra=json_body_schema(TransactionIn))
def create_transaction(
    session: SessionInfo = Depends(require("transactions", "create")),
    store: Store = Depends(get_store),
    payload: TransactionIn = Depends(json_body(TransactionIn)),
):
    """Create a transaction owned by the caller (admin only)."""
    try:
        created = store.create_transaction(payload, owner_id=session.user_id)
    except SQLAlchemyError:
        logger.exception("Could not create transaction for user %s", session.user_id)
        raise InternalError()
    logger.info("User %s created transaction %s", session.user_id, created.id)
    return created
