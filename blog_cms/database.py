"""
Async Supabase client for the remote database tier.

ALL Supabase calls go through the SupabaseDB class defined here.  It speaks
in raw rows (snake_case dicts); mapping rows to ``Post`` / ``User`` happens
in :mod:`blog_cms.storage.remote`.

Usage::

    from blog_cms.database import SupabaseDB, SupabaseConfig

    # In async context:
    db = await SupabaseDB.create(SupabaseConfig.from_env())
    rows = await db.get_posts()
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from supabase import AsyncClient, create_async_client

from blog_cms.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"
USERS_TABLE = "users"


# =============================================================================
# VALIDATION HELPERS
# =============================================================================


def validate_not_empty(value: Any, name: str) -> None:
    """Validate that *value* is not ``None`` or an empty string.

    Args:
        value: The value to check.
        name: Human-readable field name used in error messages.

    Raises:
        ValidationError: If *value* is ``None`` or a blank string.
    """
    if value is None:
        raise ValidationError(f"{name} cannot be None")
    if isinstance(value, str) and not value.strip():
        raise ValidationError(f"{name} cannot be empty string")


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass
class SupabaseConfig:
    """Supabase configuration.

    Attributes:
        url: The Supabase project URL (``SUPABASE_URL``).
        key: The API key used by the server (``SUPABASE_KEY``).
    """

    url: str
    key: str

    @classmethod
    def from_env(cls) -> "SupabaseConfig":
        """Create a config instance from environment variables.

        Reads ``SUPABASE_URL`` and ``SUPABASE_KEY``.

        Raises:
            ValueError: If either variable is missing or empty.
        """
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_KEY")

        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")

        return cls(url=url, key=key)


# =============================================================================
# SUPABASE DATABASE CLIENT
# =============================================================================


class SupabaseDB:
    """Async database client for posts, users and uploaded images.

    **Important:** Use the :meth:`create` factory method instead of
    ``__init__`` directly -- the underlying async client requires an
    ``await`` during initialisation.

    Client errors (``postgrest.APIError``, network errors) propagate
    unchanged; callers decide how to surface them.
    """

    def __init__(self, client: AsyncClient) -> None:
        """Private constructor.  Use :meth:`create` factory method."""
        self.client = client

    @classmethod
    async def create(
        cls, config: Optional[SupabaseConfig] = None
    ) -> "SupabaseDB":
        """Factory method to create an async :class:`SupabaseDB` instance.

        Args:
            config: Optional configuration.  When ``None``,
                :meth:`SupabaseConfig.from_env` is used.

        Returns:
            A fully initialised :class:`SupabaseDB` instance.
        """
        config = config or SupabaseConfig.from_env()
        client = await create_async_client(config.url, config.key)
        logger.info("[DB] Connected to Supabase project %s", config.url)
        return cls(client)

    # -----------------------------------------------------------------
    # POSTS
    # -----------------------------------------------------------------

    async def get_posts(self) -> List[Dict[str, Any]]:
        """Get every post row, newest ``published_date`` first."""
        result = await (
            self.client.table(POSTS_TABLE)
            .select("*")
            .order("published_date", desc=True)
            .execute()
        )
        return result.data or []

    async def get_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Get a post row by ID.

        Args:
            post_id: Primary key of the post.

        Returns:
            Row dict or ``None`` if not found.
        """
        validate_not_empty(post_id, "post_id")

        result = await (
            self.client.table(POSTS_TABLE)
            .select("*")
            .eq("id", post_id)
            .execute()
        )
        return result.data[0] if result.data else None

    async def get_post_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        """Get the first post row with the given slug, or ``None``."""
        validate_not_empty(slug, "slug")

        result = await (
            self.client.table(POSTS_TABLE)
            .select("*")
            .eq("slug", slug)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    async def insert_post(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a post row.

        Args:
            row: Column values.  ``id`` and ``created_at`` are assigned by
                the database.

        Returns:
            The inserted row as stored.

        Raises:
            ValidationError: When *row* is empty.
            DatabaseError: When the insert returns no data.
        """
        if not row:
            raise ValidationError("row cannot be None or empty")

        result = await self.client.table(POSTS_TABLE).insert(row).execute()
        if not result.data:
            raise DatabaseError("Insert succeeded but returned no data", "insert_post")
        return result.data[0]

    async def update_post(
        self, post_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Update a post row.

        Args:
            post_id: Primary key of the post.
            changes: Column values to set.

        Returns:
            The updated row, or ``None`` when no row matched *post_id*.
        """
        validate_not_empty(post_id, "post_id")

        result = await (
            self.client.table(POSTS_TABLE)
            .update(changes)
            .eq("id", post_id)
            .execute()
        )
        return result.data[0] if result.data else None

    async def delete_post(self, post_id: str) -> bool:
        """Delete a post row.

        Returns:
            ``True`` when a row was deleted, ``False`` when none matched.
        """
        validate_not_empty(post_id, "post_id")

        result = await (
            self.client.table(POSTS_TABLE)
            .delete()
            .eq("id", post_id)
            .execute()
        )
        return bool(result.data)

    # -----------------------------------------------------------------
    # USERS
    # -----------------------------------------------------------------

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get a user row by email, or ``None``."""
        validate_not_empty(email, "email")

        result = await (
            self.client.table(USERS_TABLE)
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    async def count_users(self) -> int:
        """Get the number of persisted users."""
        result = await (
            self.client.table(USERS_TABLE)
            .select("id", count="exact")
            .execute()
        )
        return result.count or 0

    async def insert_user(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a user row (``email``, ``password``, ``name``).

        Raises:
            ValidationError: On a missing email or password hash.
            DatabaseError: When the insert returns no data.
        """
        validate_not_empty(row.get("email"), "email")
        validate_not_empty(row.get("password"), "password")

        result = await self.client.table(USERS_TABLE).insert(row).execute()
        if not result.data:
            raise DatabaseError("Insert succeeded but returned no data", "insert_user")
        return result.data[0]

    # -----------------------------------------------------------------
    # STORAGE (cover / inline images)
    # -----------------------------------------------------------------

    async def upload_image(
        self, bucket: str, path: str, data: bytes, content_type: str
    ) -> str:
        """Upload an image to Supabase Storage and return its public URL.

        Args:
            bucket: Storage bucket name.
            path: Object path inside the bucket.
            data: Raw file bytes.
            content_type: MIME type stored with the object.

        Returns:
            The public URL of the uploaded object.
        """
        validate_not_empty(path, "path")

        storage = self.client.storage.from_(bucket)
        await storage.upload(
            path,
            data,
            {"content-type": content_type, "upsert": "false"},
        )
        return await storage.get_public_url(path)


# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    "POSTS_TABLE",
    "USERS_TABLE",
    "validate_not_empty",
    "SupabaseConfig",
    "SupabaseDB",
]
