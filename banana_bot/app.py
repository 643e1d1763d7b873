"""FastAPI application, wiring, and startup."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request

from banana_bot.adapters.gemini.client import GeminiImageClient
from banana_bot.adapters.slack.client import SlackClient
from banana_bot.adapters.storage.memory_store import MemoryDedupStore
from banana_bot.adapters.storage.redis_store import RedisDedupStore
from banana_bot.adapters.web.slack_routes import (
    bad_request,
    build_slack_router,
    read_verified_body,
    unauthorized,
)
from banana_bot.config import AppConfig
from banana_bot.domain.dedup import Deduplicator
from banana_bot.domain.pipeline import EventProcessor
from banana_bot.log import configure_logging, uvicorn_level
from banana_bot.ports.outbound import DedupStorePort

logger = logging.getLogger(__name__)

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def build_dedup_store(config: AppConfig) -> DedupStorePort:
    if config.dedup.redis_url:
        return RedisDedupStore.from_url(config.dedup.redis_url)
    return MemoryDedupStore()


def build_processor(config: AppConfig, store: Optional[DedupStorePort] = None) -> EventProcessor:
    return EventProcessor(
        slack=SlackClient(config.slack.bot_token),
        generator=GeminiImageClient(config.gemini.api_key, model=config.gemini.model),
        dedup=Deduplicator(
            store if store is not None else build_dedup_store(config),
            ttl=config.dedup.ttl_seconds,
        ),
        reaction_name=config.slack.reaction_name,
        debug_uploads=config.gemini.debug,
    )


def create_app(config: AppConfig, processor: Optional[EventProcessor] = None) -> FastAPI:
    """Build the webhook app. ``processor`` defaults to the real adapters."""
    store: Optional[DedupStorePort] = None
    if processor is None:
        store = build_dedup_store(config)
        processor = build_processor(config, store=store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if isinstance(store, RedisDedupStore):
            await store.close()
            logger.info("dedup:redis:closed")

    app = FastAPI(title="Nano Banana Slack Bot", lifespan=lifespan)
    app.state.config = config
    app.state.processor = processor
    app.state.dedup_store = store

    app.include_router(build_slack_router(config, processor))

    # Registered last so the Slack routes match first
    @app.api_route("/{path:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def fallback(path: str, request: Request):
        if request.method != "POST":
            return bad_request("POST only")
        if await read_verified_body(request, config) is None:
            return unauthorized()
        return bad_request("unknown endpoint")

    return app


def main() -> None:
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    logger.info("server:start", extra={"data": {"env": config.env, "port": config.port}})
    uvicorn.run(
        create_app(config),
        host="0.0.0.0",
        port=config.port,
        log_level=uvicorn_level(config.log_level),
    )


if __name__ == "__main__":
    main()
