"""
Storage backend protocol.

Every tier (remote database, local file, in-process memory) implements the
same capability contract so that :class:`~blog_cms.storage.store.PostStore`
never needs to know which one is active.

Backends receive already-validated, normalised fields and fully built
``Post`` / ``User`` objects; validation and id assignment live in the store.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from blog_cms.models import Post, User


class PostBackend(Protocol):
    """Protocol for post and user persistence.

    Implementations:
    - ``MemoryBackend``: dict held by the process
    - ``FileBackend``: ``posts.json`` / ``users.json`` with memory degrade
    - ``SupabaseBackend``: remote ``posts`` / ``users`` tables

    Not-found is ``None`` (lookups) or ``False`` (delete), never an exception.
    """

    @property
    def tier(self) -> str:
        """Name of the tier currently serving requests."""
        ...

    async def list_posts(self) -> List[Post]:
        """Return every post, in no guaranteed order."""
        ...

    async def get_post(self, post_id: str) -> Optional[Post]:
        ...

    async def get_post_by_slug(self, slug: str) -> Optional[Post]:
        ...

    async def insert_post(self, post: Post) -> Post:
        """Persist a new post and return it as stored."""
        ...

    async def update_post(
        self, post_id: str, fields: Dict[str, Any], now: datetime
    ) -> Optional[Post]:
        """Merge *fields* into the post, stamp ``updated_at`` with *now*."""
        ...

    async def delete_post(self, post_id: str) -> bool:
        ...

    async def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    async def count_users(self) -> int:
        ...

    async def insert_user(self, user: User) -> User:
        ...
