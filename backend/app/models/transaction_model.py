# backend/app/models/transaction_model.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from backend.app.db import Base


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (CheckConstraint("monto <> 0", name="ck_transactions_monto_not_zero"),)

    id = Column(Integer, primary_key=True, index=True)
    concepto = Column(String(100), nullable=False)
    monto = Column(Float, nullable=False)
    fecha = Column(Date, nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="transactions")
