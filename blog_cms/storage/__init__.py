"""Post storage: one capability contract over database, file and memory tiers."""

from blog_cms.storage.base import PostBackend
from blog_cms.storage.file import FileBackend
from blog_cms.storage.memory import MemoryBackend
from blog_cms.storage.remote import SupabaseBackend
from blog_cms.storage.store import PostStore

__all__ = [
    "PostBackend",
    "FileBackend",
    "MemoryBackend",
    "SupabaseBackend",
    "PostStore",
]
