# domainstore/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from domainstore.app.api.router import api_router
from domainstore.app.core.config import Settings, get_settings
from domainstore.app.core.exception_handlers import setup_exception_handlers
from domainstore.app.db.init_db import init_models, seed_defaults
from domainstore.app.db.session import Database
from domainstore.app.security.hashing import configure_hashing

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the ASGI application.

    The database is opened in the lifespan hook and closed on shutdown, so
    each app instance owns its own engine.
    """
    if settings is None:
        settings = get_settings()

    configure_hashing(settings.PASSWORD_HASH_ROUNDS)
    database = Database(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.connect()
        await init_models(database)
        await seed_defaults(database, settings)
        logger.info("%s %s started", settings.PROJECT_NAME, settings.PROJECT_VERSION)
        yield
        await database.disconnect()
        logger.info("%s stopped", settings.PROJECT_NAME)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    # Reflect whatever origin asked, credentials included
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.CORS_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    setup_exception_handlers(app)

    @app.get("/healthz")
    def health():
        return {"status": "healthy"}

    app.include_router(api_router)
    return app
