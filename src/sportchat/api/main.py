"""
sportchat FastAPI application.

Run with:
    sportchat-api

Or:
    uvicorn sportchat.api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import config
from ..database.connection import redis_manager
from ..webhook import webhook_client
from .errors import register_exception_handlers
from .routers import (
    catalog_router,
    days_router,
    goals_router,
    messages_router,
    users_router,
    workouts_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the Redis and webhook clients for the lifetime of the app."""
    await redis_manager.initialize()
    await webhook_client.initialize()
    if not await redis_manager.health_check():
        logger.warning("Redis is not reachable at startup: %s", config.redis.url)
    if not webhook_client.url:
        logger.warning("WEBHOOK__URL is not set; chat messages will fail")

    yield

    logger.info("Shutting down...")
    await webhook_client.close()
    await redis_manager.close()


app = FastAPI(
    title="sportchat API",
    description="Workout chat backend: days, chat, workouts, goals and achievements.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

for router in (
    users_router,
    days_router,
    messages_router,
    workouts_router,
    goals_router,
    catalog_router,
):
    app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    if await redis_manager.health_check():
        return {"status": "healthy", "redis": "connected"}
    return {"status": "unhealthy", "redis": "disconnected"}


def main() -> None:
    logging.basicConfig(
        level=config.logging.level,
        format=config.logging.format,
    )
    uvicorn.run(
        app,
        host=config.api.host,
        port=config.api.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
