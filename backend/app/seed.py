# backend/app/seed.py
"""
Reset the database and load demo data.

    python -m backend.app.seed

Creates one admin and three regular users plus ten transactions. Only the
admin and user1 get a password (``password123``); the other two mirror
accounts that sign in through an external provider.
"""
import logging
from datetime import date

from backend.app.auth import hash_password
from backend.app.config import configure_logging, get_settings
from backend.app.db import Base, build_engine, build_session_factory, create_tables
from backend.app.models.transaction_model import Transaction
from backend.app.models.user_model import Role, User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

USERS = [
    ("Admin User", "admin@example.com", Role.ADMIN, True),
    ("User 1", "user1@example.com", Role.USER, True),
    ("User 2", "user2@example.com", Role.USER, False),
    ("User 3", "user3@example.com", Role.USER, False),
]

# (concepto, monto, fecha, index into USERS)
TRANSACTIONS = [
    ("Salary", 3000.0, date(2024, 10, 1), 0),
    ("Groceries", -200.0, date(2024, 10, 2), 0),
    ("Freelance", 500.0, date(2024, 10, 3), 1),
    ("Rent", -800.0, date(2024, 10, 4), 1),
    ("Sale", 1500.0, date(2024, 10, 5), 2),
    ("Utilities", -100.0, date(2024, 10, 6), 2),
    ("Bonus", 1000.0, date(2024, 10, 7), 3),
    ("Dining", -50.0, date(2024, 10, 8), 3),
    ("Investment", -500.0, date(2024, 10, 9), 0),
    ("Gift", 200.0, date(2024, 10, 10), 1),
]


def seed(session_factory, bcrypt_rounds: int = 12):
    password_hash = hash_password(DEMO_PASSWORD, bcrypt_rounds)
    db = session_factory()
    try:
        users = [
            User(name=name, email=email, role=role, password_hash=password_hash if has_password else None)
            for name, email, role, has_password in USERS
        ]
        db.add_all(users)
        db.flush()
        db.add_all(
            Transaction(concepto=concepto, monto=monto, fecha=fecha, user_id=users[owner].id)
            for concepto, monto, fecha, owner in TRANSACTIONS
        )
        db.commit()
        return users
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    engine = build_engine(settings.database_url)

    logger.info("Seeding database...")
    Base.metadata.drop_all(bind=engine)
    create_tables(engine)
    seed(build_session_factory(engine), settings.bcrypt_rounds)
    logger.info("Database seeded successfully!")


if __name__ == "__main__":
    main()
