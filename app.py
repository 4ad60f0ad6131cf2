#!/usr/bin/env python3
"""
Main entry point for the short link service.

Concurrency: requests are served concurrently via async I/O (FastAPI +
asyncpg connection pool). Uniqueness of short codes across concurrent
writers is guaranteed by the store's unique constraint, so WORKERS > 1 is
safe as long as every worker points at the same database.

Usage:
    python app.py [--mode test|production] [--reset] [--localhost] [--host H] [--port P]

Environment variables:
    MODE - test or production
    DATABASE_URL - Link store used in production mode
    TEST_DATABASE_URL - Link store used in test mode (default memory://)
    RESET_DATABASE - Drop and recreate the links table at startup
    CREATE_TABLES - Create the links table if it is missing
    REDIS_URL - Redis connection URL (optional)
    BASE_URL - Base URL for short links
    PATH_PREFIX - Path prefix for short links (default /go)
    PORT - Port to listen on
    LOG_LEVEL - Logging level
"""

import argparse
import signal
import sys
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from config import Config, load_config
from shortlink.database import create_repository, RedisCache
from shortlink.exceptions import StorageError
from shortlink.service import LinkService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from shortlink.common.network import default_base_url
from web_app import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line flags.

    Flags left unset fall through to the environment configuration.
    """
    parser = argparse.ArgumentParser(description="Url shortener service")
    parser.add_argument(
        "--mode",
        choices=["test", "production"],
        default=None,
        help="Use the 'production' or 'test' database (default: production)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        default=None,
        help="Drop and recreate the links table on startup",
    )
    parser.add_argument(
        "--localhost",
        action="store_true",
        default=None,
        help="Listen on localhost instead of all interfaces",
    )
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> Config:
    """Merge parsed flags over the environment configuration."""
    return load_config(
        mode=args.mode,
        reset_database=args.reset,
        localhost_only=args.localhost,
        host=args.host,
        port=args.port,
    )


def short_link_base_url(config: Config) -> str:
    """Base URL short links are issued under, fixed for the process lifetime."""
    if config.base_url:
        return config.base_url.rstrip("/")
    return default_base_url(config.listen_host, config.port)


async def connect_cache(config: Config, logger) -> Optional[RedisCache]:
    """Connect the Redis cache when one is configured."""
    if not config.redis_url:
        logger.info("Redis caching disabled")
        return None

    logger.info("Connecting to Redis cache")
    cache = RedisCache(
        redis_url=config.redis_url,
        ttl_seconds=config.cache_ttl_seconds,
        logger=logger,
    )
    await cache.connect()
    return cache


async def reset_link_store(repository, cache: Optional[RedisCache], logger) -> None:
    """Drop every link and every cached resolution of the old links.

    Short codes are reissued after a reset, so cached entries would point
    new links at old URLs.

    Raises:
        StorageError: If the store or the cache could not be cleared
    """
    await repository.reset_schema()

    if cache is not None and not await cache.clear():
        raise StorageError("Links were reset but the resolution cache could not be cleared")


async def build_service(config: Config, logger) -> LinkService:
    """Connect the store and cache and build the link service.

    Raises:
        StorageError: If the store is unreachable or its schema is wrong
    """
    logger.info(f"Starting in {config.mode} mode")

    repository = create_repository(
        config.active_database_url,
        timeout_seconds=config.storage_timeout_seconds,
        pool_max_size=config.pool_max_size,
        logger=logger,
    )
    await repository.connect()

    cache = await connect_cache(config, logger)

    if config.reset_database:
        await reset_link_store(repository, cache, logger)
    await repository.ensure_schema(create=config.create_tables)

    generator = ShortCodeGenerator(
        alphabet=config.short_code_alphabet,
        length=config.short_code_length,
        secure=config.secure_random,
    )
    logger.info(
        f"Short codes: length={generator.length}, alphabet size={len(generator.alphabet)}, "
        f"code space={generator.code_space}"
    )

    base_url = short_link_base_url(config)
    logger.info(f"Short links issued under {base_url}{config.path_prefix}/")

    return LinkService(
        repository=repository,
        base_url=base_url,
        path_prefix=config.path_prefix,
        short_code_generator=generator,
        cache=cache,
        logger=logger,
        max_attempts=config.max_allocation_attempts,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting url shortener service...")

    try:
        service = await build_service(config, logger)
    except StorageError as e:
        # Never serve traffic without a reachable, correctly shaped store
        logger.error(f"Link store unavailable at startup: {e.description}")
        raise

    app.state.service = service
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down url shortener service...")
    await service.close()
    logger.info("Service stopped")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = config_from_args(args)
    except ValidationError as e:
        print(f"App startup failed - invalid configuration:\n{e}", file=sys.stderr)
        return 1

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Url Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'database_url', 'redis_url'})}")

    app = create_app(config=config, lifespan=lifespan, logger=logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.listen_host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
        lifespan="on",
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(f"Starting server on {config.listen_host}:{config.port}")
    server.run()

    # uvicorn reports a failed lifespan startup by leaving started unset
    if not server.started:
        logger.error("Server did not start")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
