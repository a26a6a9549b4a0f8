"""Post CRUD endpoints.  Reads are public, writes need an editor token."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from blog_cms.api.deps import get_current_user, get_optional_user, get_scheduler, get_store
from blog_cms.api.schemas import PostPayload
from blog_cms.models import AuthUser
from blog_cms.scheduling import PublishingScheduler
from blog_cms.storage import PostStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def list_posts(
    store: PostStore = Depends(get_store),
    user: Optional[AuthUser] = Depends(get_optional_user),
) -> Any:
    """
    All posts for the dashboard, or only published posts for anonymous callers.
    """
    if user is not None:
        return [post.to_dict() for post in await store.list_posts()]
    return [post.public_dict() for post in await store.list_published()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostPayload,
    store: PostStore = Depends(get_store),
    user: AuthUser = Depends(get_current_user),
) -> Any:
    post = await store.create(payload.to_fields())
    logger.info("[API] %s created post %s", user.email, post.id)
    return post.to_dict()


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    store: PostStore = Depends(get_store),
    scheduler: PublishingScheduler = Depends(get_scheduler),
    user: Optional[AuthUser] = Depends(get_optional_user),
) -> Any:
    """
    Get a single post.

    Due posts are promoted first so a reader right after the scheduled time
    already sees the post as published.
    """
    await scheduler.run_sweep()

    post = await store.get_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")

    # Drafts do not exist for anonymous callers
    if user is None and not post.published:
        raise HTTPException(status_code=404, detail="Post not found")

    return post.to_dict()


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    payload: PostPayload,
    store: PostStore = Depends(get_store),
    user: AuthUser = Depends(get_current_user),
) -> Any:
    updated = await store.update(post_id, payload.to_fields())
    if updated is None:
        raise HTTPException(status_code=404, detail="Post not found")
    logger.info("[API] %s updated post %s", user.email, post_id)
    return updated.to_dict()


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    store: PostStore = Depends(get_store),
    user: AuthUser = Depends(get_current_user),
) -> Any:
    if not await store.delete(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    logger.info("[API] %s deleted post %s", user.email, post_id)
    return JSONResponse(content={"success": True})
