# backend/app/config.py
import logging
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    database_url: str = "sqlite:///data/finanzas.db"
    session_ttl_hours: int = 168
    session_cookie_name: str = "finanzas_session"
    session_cookie_secure: bool = False
    bcrypt_rounds: int = 12
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def get_settings() -> Settings:
    """
    Build settings from the environment (a local .env file is loaded first).
    """
    load_dotenv()
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/finanzas.db"),
        session_ttl_hours=int(os.getenv("SESSION_TTL_HOURS", "168")),
        session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "finanzas_session"),
        session_cookie_secure=_env_bool("SESSION_COOKIE_SECURE", False),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        cors_origins=_env_list("CORS_ORIGINS", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
