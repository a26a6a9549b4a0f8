"""Image upload for cover and inline images."""

import base64
import logging
import re
import time
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from blog_cms.api.deps import get_current_user, get_settings_dep, get_store
from blog_cms.config import Settings
from blog_cms.models import AuthUser
from blog_cms.storage import PostStore, SupabaseBackend

router = APIRouter()
logger = logging.getLogger(__name__)


def safe_filename(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9.-]", "_", name or "image")


def to_data_url(data: bytes, content_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


@router.post("")
async def upload_image(
    image: UploadFile = File(...),
    store: PostStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
    user: AuthUser = Depends(get_current_user),
) -> Any:
    """
    Store an image and return a URL usable as ``coverImage``.

    On the database tier the file goes to Supabase Storage; otherwise (or if
    that upload fails) the image is inlined as a base64 data URL.
    """
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be an image")

    data = await image.read()
    if len(data) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size must be less than {limit_mb}MB",
        )

    if isinstance(store.backend, SupabaseBackend):
        filename = f"{int(time.time() * 1000)}-{safe_filename(image.filename)}"
        path = f"{settings.upload_bucket}/{filename}"
        try:
            url = await store.backend.db.upload_image(
                settings.upload_bucket, path, data, content_type
            )
            logger.info("[API] %s uploaded %s", user.email, path)
            return {"url": url}
        except Exception as exc:
            logger.exception("[API] Supabase upload failed, inlining image: %s", exc)

    return {"url": to_data_url(data, content_type)}
