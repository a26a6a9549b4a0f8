"""Scheduling subsystem: lazy promotion of scheduled posts to published."""

from blog_cms.scheduling.models import PostState, SweepResult
from blog_cms.scheduling.publishing_scheduler import PublishingScheduler

__all__ = [
    "PostState",
    "SweepResult",
    "PublishingScheduler",
]
