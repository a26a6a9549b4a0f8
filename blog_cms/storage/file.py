"""
Local file storage tier with transparent degrade to process memory.

Posts live in ``<data_dir>/posts.json`` and users in ``<data_dir>/users.json``,
each a JSON array rewritten wholesale on every mutation (no append log, no
partial writes).  Files and the directory are created lazily on first use.

Every successful read refreshes an in-process mirror.  When a read fails the
mirror is served instead; when a write fails the mutation is applied to the
mirror only and the collection is marked degraded.  A degraded collection is
served from the mirror (never re-read from disk, which would lose the
unpersisted mutation) until a later wholesale write succeeds.  None of this
is ever reported to callers beyond a log line.

Each collection has an ``asyncio.Lock`` held across every load (and the
whole load-mutate-save of a mutation), so interleaved requests in one
process never rewrite a file from a stale list.  Individual malformed
documents are skipped on read and written back verbatim on the next save.
"""

import asyncio
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles

from blog_cms.exceptions import PersistenceError, ValidationError
from blog_cms.models import Post, User
from blog_cms.storage.memory import MemoryBackend

logger = logging.getLogger(__name__)

POSTS_FILENAME = "posts.json"
USERS_FILENAME = "users.json"


class FileBackend:
    """JSON-file backend that degrades to a :class:`MemoryBackend` mirror.

    Args:
        data_dir: Directory holding ``posts.json`` and ``users.json``.
    """

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir)
        self.posts_file = self.data_dir / POSTS_FILENAME
        self.users_file = self.data_dir / USERS_FILENAME
        self.mirror = MemoryBackend()
        self._degraded: Dict[Path, bool] = {
            self.posts_file: False,
            self.users_file: False,
        }
        self._unreadable_posts: List[Any] = []
        # Held across each whole load-mutate-save sequence
        self._posts_lock = asyncio.Lock()
        self._users_lock = asyncio.Lock()

    @property
    def tier(self) -> str:
        return "memory" if self.degraded else "file"

    @property
    def degraded(self) -> bool:
        """True while the posts mirror is authoritative over ``posts.json``."""
        return self._degraded[self.posts_file]

    # ================================================================
    # RAW FILE ACCESS
    # ================================================================

    async def _ensure_file(self, path: Path) -> None:
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            if not path.exists():
                async with aiofiles.open(path, "w", encoding="utf-8") as fh:
                    await fh.write(json.dumps([], indent=2))
        except OSError as exc:
            raise PersistenceError(str(path), exc) from exc

    async def _read_documents(self, path: Path) -> List[Dict[str, Any]]:
        await self._ensure_file(path)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as fh:
                raw = await fh.read()
            documents = json.loads(raw) if raw.strip() else []
        except (OSError, ValueError) as exc:
            raise PersistenceError(str(path), exc) from exc
        if not isinstance(documents, list):
            raise PersistenceError(str(path), ValueError("expected a JSON array"))
        return documents

    async def _write_documents(self, path: Path, documents: List[Dict[str, Any]]) -> None:
        await self._ensure_file(path)
        try:
            async with aiofiles.open(path, "w", encoding="utf-8") as fh:
                await fh.write(json.dumps(documents, indent=2))
        except (OSError, TypeError) as exc:
            raise PersistenceError(str(path), exc) from exc

    # ================================================================
    # MIRROR SYNC
    # ================================================================

    async def _load_posts(self) -> List[Post]:
        if self._degraded[self.posts_file]:
            return self.mirror.snapshot_posts()
        try:
            documents = await self._read_documents(self.posts_file)
        except PersistenceError as exc:
            logger.warning("[STORE] Reading %s failed, serving memory: %s", self.posts_file, exc)
            return self.mirror.snapshot_posts()

        posts: List[Post] = []
        unreadable: List[Any] = []
        for doc in documents:
            try:
                posts.append(Post.from_dict(doc))
            except (AttributeError, KeyError, TypeError, ValidationError) as exc:
                logger.warning("[STORE] Skipping malformed post in %s: %s", self.posts_file, exc)
                unreadable.append(doc)
        self._unreadable_posts = unreadable
        self.mirror.replace_posts(posts)
        return posts

    async def _save_posts(self, posts: List[Post]) -> None:
        self.mirror.replace_posts(posts)
        # Malformed documents are written back untouched so a rewrite never drops them
        documents = [post.to_dict() for post in posts] + self._unreadable_posts
        try:
            await self._write_documents(self.posts_file, documents)
        except PersistenceError as exc:
            if not self._degraded[self.posts_file]:
                logger.warning(
                    "[STORE] Writing %s failed, degrading to memory: %s",
                    self.posts_file,
                    exc,
                )
            self._degraded[self.posts_file] = True
            return
        if self._degraded[self.posts_file]:
            logger.info("[STORE] %s writable again, leaving memory mode", self.posts_file)
        self._degraded[self.posts_file] = False

    async def _load_users(self) -> List[User]:
        if self._degraded[self.users_file]:
            return self.mirror.snapshot_users()
        try:
            documents = await self._read_documents(self.users_file)
            users = [User.from_dict(doc) for doc in documents]
        except (PersistenceError, AttributeError, KeyError, TypeError) as exc:
            logger.warning("[STORE] Reading %s failed, serving memory: %s", self.users_file, exc)
            return self.mirror.snapshot_users()
        self.mirror.replace_users(users)
        return users

    async def _save_users(self, users: List[User]) -> None:
        self.mirror.replace_users(users)
        try:
            await self._write_documents(self.users_file, [user.to_dict() for user in users])
        except PersistenceError as exc:
            logger.warning("[STORE] Writing %s failed, keeping users in memory: %s", self.users_file, exc)
            self._degraded[self.users_file] = True
            return
        self._degraded[self.users_file] = False

    # ================================================================
    # POSTS
    # ================================================================

    async def list_posts(self) -> List[Post]:
        async with self._posts_lock:
            return await self._load_posts()

    async def get_post(self, post_id: str) -> Optional[Post]:
        async with self._posts_lock:
            posts = await self._load_posts()
        for post in posts:
            if post.id == post_id:
                return post
        return None

    async def get_post_by_slug(self, slug: str) -> Optional[Post]:
        async with self._posts_lock:
            posts = await self._load_posts()
        for post in posts:
            if post.slug == slug:
                return post
        return None

    async def insert_post(self, post: Post) -> Post:
        async with self._posts_lock:
            posts = await self._load_posts()
            posts.append(post)
            await self._save_posts(posts)
        return post

    async def update_post(
        self, post_id: str, fields: Dict[str, Any], now: datetime
    ) -> Optional[Post]:
        async with self._posts_lock:
            posts = await self._load_posts()
            for index, post in enumerate(posts):
                if post.id == post_id:
                    updated = post.apply(fields, now)
                    posts[index] = updated
                    await self._save_posts(posts)
                    return updated
        return None

    async def delete_post(self, post_id: str) -> bool:
        async with self._posts_lock:
            posts = await self._load_posts()
            remaining = [post for post in posts if post.id != post_id]
            if len(remaining) == len(posts):
                return False
            await self._save_posts(remaining)
        return True

    # ================================================================
    # USERS
    # ================================================================

    async def get_user_by_email(self, email: str) -> Optional[User]:
        async with self._users_lock:
            users = await self._load_users()
        for user in users:
            if user.email == email:
                return user
        return None

    async def count_users(self) -> int:
        async with self._users_lock:
            return len(await self._load_users())

    async def insert_user(self, user: User) -> User:
        async with self._users_lock:
            users = await self._load_users()
            users.append(user)
            await self._save_users(users)
        return user
