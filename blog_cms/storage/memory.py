"""In-process storage tier: a mapping from id to record, owned by one backend instance."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from blog_cms.models import Post, User


class MemoryBackend:
    """Keeps posts and users in insertion-ordered dicts.

    Used directly when ``STORAGE_BACKEND=memory`` and as the mirror behind
    :class:`~blog_cms.storage.file.FileBackend`.  Nothing survives the
    process.
    """

    def __init__(
        self,
        posts: Optional[Iterable[Post]] = None,
        users: Optional[Iterable[User]] = None,
    ) -> None:
        self._posts: Dict[str, Post] = {}
        self._users: Dict[str, User] = {}
        self.replace_posts(posts or [])
        self.replace_users(users or [])

    @property
    def tier(self) -> str:
        return "memory"

    # -----------------------------------------------------------------
    # Bulk access (file mirror sync)
    # -----------------------------------------------------------------

    def replace_posts(self, posts: Iterable[Post]) -> None:
        self._posts = {post.id: post for post in posts}

    def replace_users(self, users: Iterable[User]) -> None:
        self._users = {user.id: user for user in users}

    def snapshot_posts(self) -> List[Post]:
        return list(self._posts.values())

    def snapshot_users(self) -> List[User]:
        return list(self._users.values())

    # -----------------------------------------------------------------
    # POSTS
    # -----------------------------------------------------------------

    async def list_posts(self) -> List[Post]:
        return self.snapshot_posts()

    async def get_post(self, post_id: str) -> Optional[Post]:
        return self._posts.get(post_id)

    async def get_post_by_slug(self, slug: str) -> Optional[Post]:
        for post in self._posts.values():
            if post.slug == slug:
                return post
        return None

    async def insert_post(self, post: Post) -> Post:
        self._posts[post.id] = post
        return post

    async def update_post(
        self, post_id: str, fields: Dict[str, Any], now: datetime
    ) -> Optional[Post]:
        existing = self._posts.get(post_id)
        if existing is None:
            return None
        updated = existing.apply(fields, now)
        self._posts[post_id] = updated
        return updated

    async def delete_post(self, post_id: str) -> bool:
        return self._posts.pop(post_id, None) is not None

    # -----------------------------------------------------------------
    # USERS
    # -----------------------------------------------------------------

    async def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def count_users(self) -> int:
        return len(self._users)

    async def insert_user(self, user: User) -> User:
        self._users[user.id] = user
        return user
