# backend/app/schemas.py
import math
from datetime import date, datetime
from typing import List

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from backend.app.models.user_model import Role


class Owner(BaseModel):
    name: str
    email: str

    class Config:
        from_attributes = True


# Pydantic schema for incoming transaction objects (used for validation)
class TransactionIn(BaseModel):
    concepto: str
    monto: float
    fecha: date

    @field_validator("concepto")
    @classmethod
    def concepto_length(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("El concepto es requerido")
        if len(value) < 3:
            raise ValueError("El concepto debe tener al menos 3 caracteres")
        if len(value) > 100:
            raise ValueError("El concepto no puede tener más de 100 caracteres")
        return value

    @field_validator("monto")
    @classmethod
    def monto_not_zero(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("El monto debe ser un número válido")
        if value == 0:
            raise ValueError("El monto no puede ser cero")
        return value


class TransactionOut(BaseModel):
    id: int
    concepto: str
    monto: float
    fecha: date
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    user_id: str = Field(alias="userId")
    user: Owner

    class Config:
        from_attributes = True
        populate_by_name = True


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: Role

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    id: str
    name: str
    role: Role

    @field_validator("id")
    @classmethod
    def id_present(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("El usuario es requerido")
        return value

    @field_validator("name")
    @classmethod
    def name_length(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("El nombre es requerido")
        if len(value) < 2:
            raise ValueError("El nombre debe tener al menos 2 caracteres")
        return value


class ProfileUpdate(BaseModel):
    name: str
    email: EmailStr

    @field_validator("name")
    @classmethod
    def name_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("El nombre es requerido")
        return value


class Statistics(BaseModel):
    transaction_count: int = Field(alias="transactionCount")
    total_amount: float = Field(alias="totalAmount")

    class Config:
        populate_by_name = True


class ProfileOut(UserOut):
    statistics: Statistics


class SignUpIn(BaseModel):
    name: str
    email: EmailStr
    password: str
    confirm_password: str = Field(alias="confirmPassword")

    @field_validator("name")
    @classmethod
    def name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("El nombre debe tener al menos 2 caracteres")
        return value

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("La contraseña debe tener al menos 8 caracteres")
        return value

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Las contraseñas no coinciden")
        return self


class SignInIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SessionOut(BaseModel):
    token: str
    user: UserOut


class DailyMovement(BaseModel):
    date: date
    total: float


class IncomeExpenseSplit(BaseModel):
    income: float
    expenses: float


class ReportOut(BaseModel):
    desde: date
    hasta: date
    balance: float
    daily: List[DailyMovement]
    split: IncomeExpenseSplit
