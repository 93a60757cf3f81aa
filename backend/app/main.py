# backend/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api import auth, profile, reports, transactions, users
from backend.app.config import Settings, configure_logging, get_settings
from backend.app.db import build_engine, build_session_factory, create_tables
from backend.app.errors import install_error_handlers
from backend.app.web import pages

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = build_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_tables(engine)
        logger.info("Finanzas started, database at %s", engine.url.render_as_string(hide_password=True))
        yield
        engine.dispose()

    app = FastAPI(title="Finanzas", lifespan=lifespan, openapi_url="/api/docs", docs_url="/docs")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(transactions.router, prefix="/api/transactions", tags=["transactions"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
    app.include_router(reports.router, prefix="/api/reports", tags=["reports"])
    app.include_router(pages.router, include_in_schema=False)

    @app.get("/api/health", tags=["health"])
    def health():
        return {"message": "Finanzas API is running"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.app.main:create_app", factory=True, host="127.0.0.1", port=8000)
