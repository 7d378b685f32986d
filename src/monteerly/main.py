import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlmodel import SQLModel

from monteerly.api.middlewares import setup_middlewares
from monteerly.api.v1.router import api_router
from monteerly.core.config import get_settings
from monteerly.core.db import dispose_engine, get_engine, run_migrations_sync
from monteerly.core.exceptions import setup_exception_handlers
from monteerly.core.health import setup_health_endpoint
from monteerly.core.logging import get_logger, setup_logging
from monteerly.core.rate_limit import limiter
from monteerly.core.redis import close_redis
from monteerly.store import ChangeFeed, SqlDocumentStore

logger = get_logger(__name__)


async def prepare_database() -> None:
    """Bring the schema up to date.

    AUTO_MIGRATE runs Alembic; otherwise a SQLite database gets its tables
    created directly so local runs need no setup.
    """
    settings = get_settings()
    if settings.auto_migrate:
        logger.info("Running database migrations")
        await asyncio.to_thread(run_migrations_sync)
    elif settings.is_sqlite:
        async with get_engine().begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}")

    await prepare_database()
    feed: ChangeFeed = app.state.feed
    await feed.start_relay()

    yield

    logger.info("Closing connections...")
    await feed.stop_relay()
    await close_redis()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "auth", "description": "Sign-up, sign-in and sessions"},
    {"name": "projects", "description": "Projects owned by the signed-in user"},
    {"name": "briefs", "description": "Client briefs owned by the signed-in user"},
    {"name": "dashboard", "description": "Project figures and recent activity"},
    {"name": "live", "description": "Live record views over WebSocket"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Freelance project studio API with live record views",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
        lifespan=lifespan,
    )

    app.state.feed = ChangeFeed(settings.change_channel_prefix)
    app.state.store = SqlDocumentStore(feed=app.state.feed)

    setup_exception_handlers(app)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    setup_middlewares(app, settings)
    app.include_router(api_router)
    setup_health_endpoint(app)

    return app


app = create_app()
