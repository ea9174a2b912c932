# listing_sync/main.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import async_sessionmaker

from listing_sync.core.config import Settings, get_settings
from listing_sync.core.logging_config import configure_logging
from listing_sync.database import create_engine, create_session_factory
from listing_sync.routes.ebay import router as ebay_router


def create_app(settings: Optional[Settings] = None, session_factory: Optional[async_sessionmaker] = None) -> FastAPI:
    """
    Build the API application.

    Without an explicit session factory the lifespan opens an engine on
    DATABASE_URL and disposes of it on shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        if session_factory is not None:
            app.state.session_factory = session_factory
        else:
            engine = create_engine(settings.DATABASE_URL)
            app.state.session_factory = create_session_factory(engine)
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(title="Listing Sync", lifespan=lifespan)
    app.include_router(ebay_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
