"""Shared fixtures for the blog CMS test suite."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from blog_cms.config import Settings, reset_settings
from blog_cms.models import Post
from blog_cms.storage import FileBackend, MemoryBackend, PostStore


# ---------------------------------------------------------------------------
# Ensure we don't hit real services or pick up a developer's .env
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _block_env_keys(monkeypatch):
    """Clear all configuration env vars so tests never hit real services."""
    keys = [
        "SUPABASE_URL",
        "SUPABASE_KEY",
        "STORAGE_BACKEND",
        "DATA_DIR",
        "JWT_SECRET",
        "JWT_EXPIRE_DAYS",
        "DEFAULT_ADMIN_EMAIL",
        "SWEEP_ON_FEED",
        "MAX_UPLOAD_BYTES",
        "UPLOAD_BUCKET",
        "ENVIRONMENT",
        "LOG_LEVEL",
    ]
    for key in keys:
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


# ---------------------------------------------------------------------------
# Common datetime fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def sample_utc_now():
    """A fixed UTC datetime for deterministic tests."""
    return datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def post_fields():
    """Valid create fields for a post already past its publish date."""
    return {
        "title": "Hello World",
        "slug": "hello-world",
        "excerpt": "A first post.",
        "content": "# Hello\n\nWorld.",
        "published_date": datetime(2025, 6, 1, 9, 0, 0, tzinfo=timezone.utc),
        "published": False,
        "cover_image": None,
    }


@pytest.fixture
def make_post():
    """Factory for ``Post`` objects with sensible defaults."""

    def _make(post_id="p1", **overrides):
        values = {
            "id": post_id,
            "title": f"Post {post_id}",
            "slug": f"post-{post_id}",
            "excerpt": "Excerpt",
            "content": "Body",
            "published_date": datetime(2025, 6, 1, 9, 0, 0, tzinfo=timezone.utc),
            "published": False,
            "cover_image": None,
            "created_at": datetime(2025, 5, 1, 8, 0, 0, tzinfo=timezone.utc),
            "updated_at": None,
        }
        values.update(overrides)
        return Post(**values)

    return _make


@pytest.fixture
def future():
    """One hour from now."""
    return datetime.now(timezone.utc) + timedelta(hours=1)


@pytest.fixture
def past():
    """One second ago."""
    return datetime.now(timezone.utc) - timedelta(seconds=1)


# ---------------------------------------------------------------------------
# Settings and stores
# ---------------------------------------------------------------------------
@pytest.fixture
def settings(tmp_path):
    """Settings pinned to the memory tier with a known JWT secret."""
    return Settings(
        storage_backend="memory",
        data_dir=str(tmp_path / "data"),
        jwt_secret="test-secret",
    )


@pytest.fixture
def memory_store():
    return PostStore(MemoryBackend())


@pytest.fixture
def file_backend(tmp_path):
    return FileBackend(tmp_path / "data")


@pytest.fixture
def file_store(file_backend):
    return PostStore(file_backend)


@pytest.fixture(params=["memory", "file"])
def local_store(request, tmp_path):
    """Parametrized over both local tiers."""
    if request.param == "memory":
        return PostStore(MemoryBackend())
    return PostStore(FileBackend(tmp_path / "data"))


# ---------------------------------------------------------------------------
# Mock Supabase client
# ---------------------------------------------------------------------------
@pytest.fixture
def mock_supabase_client():
    """A mock Supabase async client."""
    client = AsyncMock()
    # table().select().execute() chain
    table_mock = MagicMock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.update.return_value = table_mock
    table_mock.delete.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.limit.return_value = table_mock
    table_mock.execute = AsyncMock(return_value=MagicMock(data=[], count=0))
    client.table = MagicMock(return_value=table_mock)
    return client


@pytest.fixture
def sample_row():
    """A ``posts`` row as Supabase returns it."""
    return {
        "id": 42,
        "title": "From the database",
        "slug": "from-the-database",
        "excerpt": None,
        "content": "Stored remotely.",
        "published_date": "2025-06-01T09:00:00+00:00",
        "updated_at": None,
        "created_at": "2025-05-01T08:00:00+00:00",
        "cover_image": "https://cdn.example.com/cover.png",
        "published": None,
    }
