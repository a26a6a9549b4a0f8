"""
FastAPI application factory.

Usage::

    uvicorn blog_cms.api.app:create_app --factory

The store is created once in the lifespan (or injected, as tests do) and
shared by every request through ``app.state``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_cms.api import auth, feed, posts, upload
from blog_cms.config import Settings, get_settings, validate_env
from blog_cms.exceptions import AuthenticationError, DatabaseError, ValidationError
from blog_cms.scheduling import PublishingScheduler
from blog_cms.storage import PostStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.store is None:
        validate_env()
        store = await PostStore.from_settings(app.state.settings)
        app.state.store = store
        app.state.scheduler = PublishingScheduler(store)
    logger.info("[API] Serving posts from %s tier", app.state.store.tier)
    yield


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": str(exc) or "Unauthorized"})


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Database operation failed"})


def create_app(
    store: Optional[PostStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the API.

    Args:
        store: Pre-built store.  When ``None`` one is selected from settings
            at startup.
        settings: Optional settings; defaults to :func:`get_settings`.
    """
    app = FastAPI(title="Blog CMS", lifespan=lifespan)
    app.state.settings = settings or get_settings()
    app.state.store = store
    app.state.scheduler = PublishingScheduler(store) if store is not None else None

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(feed.router, prefix="/api/feed", tags=["feed"])
    app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    app.include_router(upload.router, prefix="/api/upload", tags=["upload"])

    return app


__all__ = [
    "create_app",
]
