#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: one uvicorn process serves many connections via async I/O
(FastAPI + asyncpg connection pool + redis.asyncio). Cache write-backs and
click recording run on a bounded in-process worker pool so redirects never
wait on them.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL, or memory:// for in-process stores
    DB_CREATE_TABLES - Set to true to create tables on startup
    REDIS_URL - Redis connection URL (optional)
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    LOG_LEVEL - Logging level
"""

import logging
import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortener.background import BackgroundTaskPool
from shortener.common.logging_config import setup_logging
from shortener.database.cache import RedisCache
from shortener.database.memory import InMemoryAnalyticsStore, InMemoryURLStore
from shortener.database.postgres import PostgresAnalyticsStore, URLShortenerPostgres
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from web_app import create_app


async def build_service(config: Config, logger: logging.Logger) -> URLShortenerService:
    """Wire stores, cache and background pool into a service."""
    if config.use_memory_store:
        logger.info("Using in-memory stores")
        store = InMemoryURLStore(logger=logger)
        analytics = InMemoryAnalyticsStore(
            store, top_referrers=config.analytics_top_referrers, logger=logger
        )
    else:
        logger.info("Using PostgreSQL store")
        store = URLShortenerPostgres(
            db_config=config.database_url,
            pool_min_size=config.db_pool_min_size,
            pool_max_size=config.db_pool_max_size,
            command_timeout_seconds=config.db_command_timeout_seconds,
            create_tables=config.db_create_tables,
            logger=logger,
        )
        analytics = PostgresAnalyticsStore(
            store, top_referrers=config.analytics_top_referrers, logger=logger
        )

    cache = None
    if config.redis_url:
        logger.info("Connecting to Redis")
        cache = RedisCache(redis_url=config.redis_url, logger=logger)
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    background = BackgroundTaskPool(
        workers=config.background_workers,
        queue_size=config.background_queue_size,
        task_timeout_seconds=config.background_task_timeout_seconds,
        logger=logger,
    )
    background.start()

    return URLShortenerService(
        store=store,
        analytics=analytics,
        cache=cache,
        short_code_generator=ShortCodeGenerator(length=config.short_code_length),
        background=background,
        logger=logger,
        enable_custom_aliases=config.enable_custom_aliases,
        max_collision_retries=config.max_collision_retries,
        cache_default_ttl=config.cache_default_ttl,
        cache_timeout_seconds=config.cache_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service on startup and drain it on shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")
    service = await build_service(config, logger)
    app.state.service = service
    logger.info("Service started successfully")

    try:
        yield
    finally:
        logger.info("Shutting down URL shortener service...")
        await service.close(timeout=config.shutdown_timeout_seconds)
        logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
        max_bytes=config.log_max_bytes,
        backup_count=config.log_backup_count,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'database_url', 'redis_url'})}")

    app = create_app(config=config, logger=logger, lifespan=lifespan)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
