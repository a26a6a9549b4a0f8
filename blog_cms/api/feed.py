"""Public feed consumed by the main website."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from blog_cms.api.deps import get_scheduler, get_settings_dep, get_store
from blog_cms.config import Settings
from blog_cms.scheduling import PublishingScheduler
from blog_cms.storage import PostStore

router = APIRouter()
logger = logging.getLogger(__name__)

FEED_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
}


@router.get("")
async def get_feed(
    store: PostStore = Depends(get_store),
    scheduler: PublishingScheduler = Depends(get_scheduler),
    settings: Settings = Depends(get_settings_dep),
) -> Any:
    """
    Published posts, newest first, in the public shape.

    Does not sweep unless ``SWEEP_ON_FEED`` is enabled: a freshly due post
    shows up here only after something has read it individually.
    """
    if settings.sweep_on_feed:
        await scheduler.run_sweep()

    posts = await store.list_published()
    logger.debug("[API] Feed returning %d published posts", len(posts))
    return JSONResponse(
        content=[post.public_dict() for post in posts],
        headers=FEED_HEADERS,
    )
