"""
On-demand publishing scheduler that promotes due posts.

``PublishingScheduler.run_sweep()`` is invoked inline by the single-post read
path, not by a timer.  A post is due when it is unpublished and its
``published_date`` has passed; the sweep flips ``published`` to ``True`` and
touches nothing else.  Already published posts are never reverted, even when
their ``published_date`` lies in the future.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from blog_cms.scheduling.models import SweepResult
from blog_cms.utils import ensure_utc, utc_now

if TYPE_CHECKING:
    from blog_cms.storage import PostStore

logger = logging.getLogger(__name__)


class PublishingScheduler:
    """Scans the store and publishes every due post.

    Failures are collected per post and the sweep moves on to the next one;
    nothing is ever raised to the caller.

    Args:
        store: The :class:`~blog_cms.storage.store.PostStore` to sweep.
    """

    def __init__(self, store: "PostStore") -> None:
        self.store = store
        self.last_result: Optional[SweepResult] = None

    async def run_sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """Publish all posts whose scheduled time has elapsed.

        Args:
            now: Reference time for the due check.  Defaults to the current
                UTC time.

        Returns:
            A :class:`SweepResult` for diagnostics.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        result = SweepResult(started_at=now)
        self.last_result = result

        try:
            posts = await self.store.list_posts()
        except Exception as exc:
            logger.error("[SCHEDULER] Error checking scheduled posts: %s", exc)
            result.errors["*"] = str(exc)
            return result

        result.checked = len(posts)
        due_posts = [post for post in posts if post.is_due(now)]
        if not due_posts:
            return result

        logger.info("[SCHEDULER] Found %d posts due for publishing", len(due_posts))

        for post in due_posts:
            try:
                updated = await self.store.update(post.id, {"published": True})
            except Exception as exc:
                logger.error(
                    "[SCHEDULER] Error publishing post %s: %s",
                    post.id,
                    exc,
                    exc_info=True,
                )
                result.errors[post.id] = str(exc)
                continue

            if updated is None:
                # Deleted between listing and update
                logger.debug("[SCHEDULER] Post %s vanished before publishing", post.id)
                continue

            result.published.append(post.id)
            logger.info("[SCHEDULER] Auto-published post: %s (ID: %s)", post.title, post.id)

        return result


# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    "PublishingScheduler",
]
