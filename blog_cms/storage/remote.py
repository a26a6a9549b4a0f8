"""
Remote database storage tier backed by :class:`~blog_cms.database.SupabaseDB`.

This tier is assumed durable: any failure is wrapped in ``DatabaseError`` and
propagated to the caller.  There is no retry and no fallback to the local
tiers.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from blog_cms.database import SupabaseDB
from blog_cms.exceptions import DatabaseError, ValidationError
from blog_cms.models import Post, User, fields_to_row
from blog_cms.utils import to_iso

logger = logging.getLogger(__name__)


@contextmanager
def tier_failure(operation: str) -> Iterator[None]:
    """Re-raise anything but caller-input validation errors as ``DatabaseError``."""
    try:
        yield
    except (DatabaseError, ValidationError):
        raise
    except Exception as exc:
        logger.error("[DB] %s failed: %s", operation, exc)
        raise DatabaseError(str(exc), operation) from exc


def _post_from_row(row: Dict[str, Any], operation: str) -> Post:
    """Map a stored row; a row that cannot be mapped is a tier failure."""
    try:
        return Post.from_row(row)
    except (ValidationError, AttributeError, KeyError, TypeError) as exc:
        logger.error("[DB] %s returned an unreadable post row: %s", operation, exc)
        raise DatabaseError(f"unreadable post row: {exc}", operation) from exc


def _user_from_row(row: Dict[str, Any], operation: str) -> User:
    try:
        return User.from_dict(row)
    except (AttributeError, KeyError, TypeError) as exc:
        logger.error("[DB] %s returned an unreadable user row: %s", operation, exc)
        raise DatabaseError(f"unreadable user row: {exc}", operation) from exc


class SupabaseBackend:
    """Maps between ``Post`` / ``User`` and Supabase rows.

    Args:
        db: Connected database client.
    """

    def __init__(self, db: SupabaseDB) -> None:
        self.db = db

    @property
    def tier(self) -> str:
        return "database"

    # -----------------------------------------------------------------
    # POSTS
    # -----------------------------------------------------------------

    async def list_posts(self) -> List[Post]:
        with tier_failure("list_posts"):
            rows = await self.db.get_posts()
            return [_post_from_row(row, "list_posts") for row in rows]

    async def get_post(self, post_id: str) -> Optional[Post]:
        with tier_failure("get_post"):
            row = await self.db.get_post(post_id)
            return _post_from_row(row, "get_post") if row else None

    async def get_post_by_slug(self, slug: str) -> Optional[Post]:
        with tier_failure("get_post_by_slug"):
            row = await self.db.get_post_by_slug(slug)
            return _post_from_row(row, "get_post_by_slug") if row else None

    async def insert_post(self, post: Post) -> Post:
        """Insert *post*; the database assigns the stored ``id``/``created_at``."""
        row = post.to_row()
        row["updated_at"] = to_iso(post.updated_at or post.created_at)
        with tier_failure("insert_post"):
            stored = await self.db.insert_post(row)
            return _post_from_row(stored, "insert_post")

    async def update_post(
        self, post_id: str, fields: Dict[str, Any], now: datetime
    ) -> Optional[Post]:
        changes = fields_to_row(fields)
        changes["updated_at"] = to_iso(now)
        with tier_failure("update_post"):
            row = await self.db.update_post(post_id, changes)
            return _post_from_row(row, "update_post") if row else None

    async def delete_post(self, post_id: str) -> bool:
        with tier_failure("delete_post"):
            return await self.db.delete_post(post_id)

    # -----------------------------------------------------------------
    # USERS
    # -----------------------------------------------------------------

    async def get_user_by_email(self, email: str) -> Optional[User]:
        with tier_failure("get_user_by_email"):
            row = await self.db.get_user_by_email(email)
            return _user_from_row(row, "get_user_by_email") if row else None

    async def count_users(self) -> int:
        with tier_failure("count_users"):
            return await self.db.count_users()

    async def insert_user(self, user: User) -> User:
        with tier_failure("insert_user"):
            row = await self.db.insert_user({
                "email": user.email,
                "password": user.password,
                "name": user.name,
            })
            return _user_from_row(row, "insert_user")
