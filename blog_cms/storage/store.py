"""
Post Store: the single source of truth for post and user records.

``PostStore`` wraps exactly one backend chosen once at startup by
:meth:`PostStore.from_settings`:

- Supabase configured -> :class:`SupabaseBackend` (tier ``"database"``)
- otherwise           -> :class:`FileBackend` (tier ``"file"``, reported as
  ``"memory"`` while degraded)
- ``STORAGE_BACKEND=memory`` -> :class:`MemoryBackend`

The store is an explicit instance handed to request handlers; there is no
module-level singleton.  Validation happens here, before any backend sees a
mutation.
"""

import dataclasses
import logging
from typing import Any, List, Mapping, Optional

from blog_cms.config import Settings, get_settings
from blog_cms.database import SupabaseConfig, SupabaseDB
from blog_cms.exceptions import ValidationError
from blog_cms.models import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_USER,
    Post,
    User,
    validate_post_fields,
)
from blog_cms.storage.base import PostBackend
from blog_cms.storage.file import FileBackend
from blog_cms.storage.memory import MemoryBackend
from blog_cms.storage.remote import SupabaseBackend
from blog_cms.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


class PostStore:
    """Tier-agnostic CRUD over posts plus editor account lookup.

    Args:
        backend: The storage tier serving this process.
        admin_email: Address that resolves to the bootstrap identity while
            no users are persisted.
    """

    def __init__(
        self,
        backend: PostBackend,
        admin_email: str = DEFAULT_ADMIN_EMAIL,
    ) -> None:
        self.backend = backend
        self.admin_email = admin_email

    @classmethod
    async def from_settings(cls, settings: Optional[Settings] = None) -> "PostStore":
        """Select the storage tier for the lifetime of the process.

        Args:
            settings: Optional settings; defaults to :func:`get_settings`.

        Returns:
            A ready-to-use store.
        """
        settings = settings or get_settings()

        backend: PostBackend
        if settings.database_configured:
            db = await SupabaseDB.create(
                SupabaseConfig(url=settings.supabase_url, key=settings.supabase_key)
            )
            backend = SupabaseBackend(db)
        elif settings.storage_backend == "memory":
            backend = MemoryBackend()
        else:
            backend = FileBackend(settings.data_dir)

        logger.info("[STORE] Using %s storage tier", backend.tier)
        return cls(backend, admin_email=settings.default_admin_email)

    @property
    def tier(self) -> str:
        return self.backend.tier

    # ================================================================
    # POSTS
    # ================================================================

    async def list_posts(self) -> List[Post]:
        """Return all posts in no particular order."""
        return await self.backend.list_posts()

    async def list_published(self) -> List[Post]:
        """Return live posts, newest ``published_date`` first."""
        posts = [post for post in await self.backend.list_posts() if post.published]
        posts.sort(key=lambda post: post.published_date, reverse=True)
        return posts

    async def get_by_id(self, post_id: str) -> Optional[Post]:
        if not post_id:
            return None
        return await self.backend.get_post(post_id)

    async def get_by_slug(self, slug: str) -> Optional[Post]:
        if not slug:
            return None
        return await self.backend.get_post_by_slug(slug)

    async def create(self, fields: Mapping[str, Any]) -> Post:
        """Validate *fields*, assign ``id`` and ``created_at``, persist.

        Slugs are not checked for uniqueness.

        Raises:
            ValidationError: When required fields are missing or malformed.
            DatabaseError: When the database tier rejects the insert.
        """
        cleaned = validate_post_fields(fields)
        post = Post(id=generate_id(), created_at=utc_now(), **cleaned)
        stored = await self.backend.insert_post(post)
        logger.info("[STORE] Created post %s (%s) in %s tier", stored.id, stored.slug, self.tier)
        return stored

    async def update(self, post_id: str, fields: Mapping[str, Any]) -> Optional[Post]:
        """Merge only the given *fields* into the post and stamp ``updated_at``.

        Returns:
            The updated post, or ``None`` when *post_id* is unknown.

        Raises:
            ValidationError: When a field is unknown or malformed.
            DatabaseError: When the database tier rejects the update.
        """
        cleaned = validate_post_fields(fields, partial=True)
        if not post_id:
            return None
        updated = await self.backend.update_post(post_id, cleaned, utc_now())
        if updated is None:
            logger.debug("[STORE] Update of unknown post %s ignored", post_id)
            return None
        logger.info("[STORE] Updated post %s fields=%s", post_id, sorted(cleaned))
        return updated

    async def delete(self, post_id: str) -> bool:
        """Remove the post; ``False`` when there was nothing to remove."""
        if not post_id:
            return False
        removed = await self.backend.delete_post(post_id)
        if removed:
            logger.info("[STORE] Deleted post %s", post_id)
        return removed

    # ================================================================
    # USERS
    # ================================================================

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up the editor account.

        While no users are persisted, the well-known admin address resolves
        to the bootstrap identity so a fresh deployment can log in.
        """
        if not email:
            return None
        user = await self.backend.get_user_by_email(email)
        if user is not None:
            return user
        if email == self.admin_email and await self.backend.count_users() == 0:
            logger.info("[STORE] No users persisted, serving bootstrap identity")
            return dataclasses.replace(DEFAULT_ADMIN_USER, email=self.admin_email)
        return None

    async def create_user(self, email: str, password_hash: str, name: str) -> User:
        """Persist a new editor account.

        Raises:
            ValidationError: On a blank email/hash or a duplicate email.
        """
        if not email or not email.strip():
            raise ValidationError("email cannot be empty string")
        if not password_hash:
            raise ValidationError("password hash cannot be empty")
        if await self.backend.get_user_by_email(email) is not None:
            raise ValidationError(f"User {email} already exists")

        user = await self.backend.insert_user(
            User(id=generate_id(), email=email, password=password_hash, name=name)
        )
        logger.info("[STORE] Created user %s in %s tier", user.email, self.tier)
        return user


__all__ = [
    "PostStore",
]
