"""
FastAPI server for the soutu media proxy.

This is the main entry point for the API server. It sets up the FastAPI application,
builds the media proxy on startup, and includes the routers.
"""

import logging
import traceback
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from soutu.api import config
from soutu.api.routers import media_router
from soutu.settings.constants import IMAGE_PROXY_UPSTREAM_TIMEOUT_SEC
from soutu.utils import database
from soutu.utils.media_proxy import MediaDeliveryHandler
from soutu.utils.telegram_files import TelegramFileFetcher, TelegramFileResolver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the media proxy once per process and tear it down on shutdown."""
    # Configuration errors abort startup here rather than failing per request
    key = config.build_signing_key()
    settings = config.build_proxy_settings()
    bot = config.create_bot_instance()

    database.initialize_database(
        config.DB_POOL_SIZE,
        config.DB_TIMEOUT_SECONDS,
        config.DB_BUSY_TIMEOUT_MS,
        config.DATABASE_URL,
    )
    database.run_migrations()

    # Entering the bot initializes it; leaving shuts down its HTTP connections
    async with bot, httpx.AsyncClient(follow_redirects=False) as client:
        app.state.delivery_handler = MediaDeliveryHandler(
            key=key,
            settings=settings,
            resolver=TelegramFileResolver(bot),
            fetcher=TelegramFileFetcher(client, bot.base_file_url, IMAGE_PROXY_UPSTREAM_TIMEOUT_SEC),
        )
        logger.info(
            "Media proxy ready at %s%s (link_ttl=%ds, cache_ttl=%ds, rate=%d/%ds)",
            settings.base_url,
            settings.prefix,
            settings.link_ttl,
            settings.cache_ttl,
            settings.rate_limit,
            settings.rate_window,
        )
        yield
        app.state.delivery_handler = None


# Create FastAPI application
app = FastAPI(
    title="Soutu Bot API",
    description="Signed media proxy for the reverse image search bot",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log full tracebacks for unhandled exceptions."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}:\n" f"{traceback.format_exc()}"
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


# Include all routers
app.include_router(media_router)


def run_server():
    """Run the FastAPI server."""
    if config.DEBUG_MODE:
        logger.info("🧪 Running API server in DEBUG mode with test environment endpoints")
    else:
        logger.info("🚀 Running API server in PRODUCTION mode")

    logger.info("🌐 Starting FastAPI server on http://%s:%d", config.API_HOST, config.API_PORT)
    uvicorn.run("soutu.api.server:app", host=config.API_HOST, port=config.API_PORT, reload=False)


if __name__ == "__main__":
    run_server()
