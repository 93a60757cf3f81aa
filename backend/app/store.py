# backend/app/store.py
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from backend.app.models.session_model import AuthSession  # noqa: F401
from backend.app.models.transaction_model import Transaction
from backend.app.models.user_model import User
from backend.app.schemas import (
    ProfileOut,
    ProfileUpdate,
    Statistics,
    TransactionIn,
    TransactionOut,
    UserOut,
    UserUpdate,
)


class Store:
    """
    Typed CRUD over the SQLAlchemy session of the current request.

    Every mutation is a single commit; on a database error the session is
    rolled back and the SQLAlchemyError propagates to the handler.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    # ---------- transactions ----------
    def _transactions_query(self):
        return self.db.query(Transaction).options(joinedload(Transaction.user))

    def list_transactions(self) -> List[TransactionOut]:
        rows = self._transactions_query().order_by(Transaction.fecha.desc(), Transaction.id.desc()).all()
        return [TransactionOut.model_validate(row) for row in rows]

    def create_transaction(self, payload: TransactionIn, owner_id: str) -> TransactionOut:
        txn = Transaction(
            concepto=payload.concepto,
            monto=float(payload.monto),
            fecha=payload.fecha,
            user_id=owner_id,
        )
        self.db.add(txn)
        self._commit()
        created = self._transactions_query().filter(Transaction.id == txn.id).one()
        return TransactionOut.model_validate(created)

    # ---------- users ----------
    def list_users(self) -> List[UserOut]:
        users = self.db.query(User).order_by(User.name.asc()).all()
        return [UserOut.model_validate(u) for u in users]

    def get_user(self, user_id: str) -> Optional[UserOut]:
        user = self.db.get(User, user_id)
        return UserOut.model_validate(user) if user is not None else None

    def update_user(self, payload: UserUpdate) -> Optional[UserOut]:
        user = self.db.get(User, payload.id)
        if user is None:
            return None
        user.name = payload.name
        user.role = payload.role
        self._commit()
        return UserOut.model_validate(user)

    # ---------- profile ----------
    def statistics(self, user_id: str) -> Statistics:
        count, total = (
            self.db.query(func.count(Transaction.id), func.coalesce(func.sum(Transaction.monto), 0.0))
            .filter(Transaction.user_id == user_id)
            .one()
        )
        return Statistics(transaction_count=int(count or 0), total_amount=float(total or 0))

    def get_profile(self, user_id: str) -> Optional[ProfileOut]:
        user = self.get_user(user_id)
        if user is None:
            return None
        return ProfileOut(**user.model_dump(), statistics=self.statistics(user_id))

    def update_profile(self, user_id: str, payload: ProfileUpdate) -> Optional[UserOut]:
        user = self.db.get(User, user_id)
        if user is None:
            return None
        user.name = payload.name
        user.email = str(payload.email).lower()
        self._commit()
        return UserOut.model_validate(user)
