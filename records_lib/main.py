"""Application factory for the site-records FastAPI app.

This module exposes `create_app(config: Config) -> FastAPI` which performs
all setup (store and service composition, router registration and
exception handlers). Nothing happens at import time so tests can construct
isolated apps:

    from records_lib.main import create_app, Config
    app = create_app(Config(data_dir='data', admin_token='secret'))
"""
import json
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from records_lib.config import Config
from records_lib.storage import RecordStoreError, create_record_store

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and return a configured FastAPI application.

    Logging is configured by the caller (see `records.py`).
    """
    config = config or Config()

    store_options = {
        'data_dir': config.data_dir,
        'backup_dir': config.backup_dir,
        'keep_backups': config.keep_backups,
        'serialized': config.serialized_stores,
    }
    articles_store = create_record_store(config.articles_store, **store_options)
    subscribers_store = create_record_store(config.subscribers_store, **store_options)

    # Compose services
    from records_lib.articles import ArticleService
    from records_lib.newsletter import SubscriberService
    article_service = ArticleService(articles_store)
    subscriber_service = SubscriberService(subscribers_store)

    from records_lib.services import ServiceContainer

    container = ServiceContainer()
    container.register_singleton("config", config)
    container.register_singleton("article_service", article_service)
    container.register_singleton("subscriber_service", subscriber_service)

    app = FastAPI(title="Site Records Server")
    app.state.container = container

    if not config.admin_token:
        logger.warning("No admin_token configured; admin routes will reject all requests")

    # Store failures surface as 500 with a stable payload; details stay in the log.
    @app.exception_handler(RecordStoreError)
    async def record_store_error_handler(request: Request, exc: RecordStoreError):
        logger.error("Record store error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={'error': 'storage_error', 'message': str(exc)})

    @app.exception_handler(json.JSONDecodeError)
    async def corrupt_store_handler(request: Request, exc: json.JSONDecodeError):
        logger.error("Corrupt store file while serving %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={'error': 'storage_error', 'message': 'Stored data is unreadable.'})

    # Router registration: import routers here to avoid import-time side-effects
    from records_lib.articles.api import router as articles_router
    from records_lib.newsletter.api import router as newsletter_router
    from records_lib.server.api import router as server_router

    app.include_router(articles_router, prefix='/api')
    app.include_router(newsletter_router, prefix='/api')
    app.include_router(server_router, prefix='/api')

    return app


__all__ = ["create_app", "Config"]
