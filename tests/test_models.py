"""Tests for blog_cms.models.

Covers:
- validate_post_fields for create and partial update.
- Post scheduling helpers (is_due, state, apply).
- Document, public and row forms of Post.
- User / AuthUser and the bootstrap admin identity.
"""

from datetime import datetime, timedelta, timezone

import pytest

from blog_cms.exceptions import ValidationError
from blog_cms.models import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_USER,
    AuthUser,
    Post,
    PostState,
    User,
    fields_to_row,
    validate_post_fields,
)


# =============================================================================
# validate_post_fields
# =============================================================================


class TestValidatePostFields:
    """Tests for validate_post_fields()."""

    def test_create_fills_defaults(self, post_fields):
        """Omitted optional fields default to unpublished without a cover."""
        del post_fields["published"]
        del post_fields["cover_image"]
        cleaned = validate_post_fields(post_fields)
        assert cleaned["published"] is False
        assert cleaned["cover_image"] is None

    def test_create_parses_iso_date(self, post_fields):
        """A JavaScript ISO string becomes an aware UTC datetime."""
        post_fields["published_date"] = "2025-01-31T09:00:00.000Z"
        cleaned = validate_post_fields(post_fields)
        assert cleaned["published_date"] == datetime(2025, 1, 31, 9, tzinfo=timezone.utc)

    @pytest.mark.parametrize("missing", ["title", "slug", "excerpt", "content", "published_date"])
    def test_create_requires_fields(self, post_fields, missing):
        """Every required field must be present on create."""
        del post_fields[missing]
        with pytest.raises(ValidationError, match="Missing required fields"):
            validate_post_fields(post_fields)

    def test_create_rejects_empty_title(self, post_fields):
        """An empty string counts as missing."""
        post_fields["title"] = ""
        with pytest.raises(ValidationError, match="title"):
            validate_post_fields(post_fields)

    def test_blank_slug_rejected(self, post_fields):
        """Whitespace-only title or slug is rejected."""
        post_fields["slug"] = "   "
        with pytest.raises(ValidationError, match="slug cannot be empty"):
            validate_post_fields(post_fields)

    def test_unknown_fields_rejected(self, post_fields):
        """Keys outside the editable set are rejected."""
        post_fields["id"] = "forged"
        with pytest.raises(ValidationError, match="Unknown post fields"):
            validate_post_fields(post_fields)

    def test_published_must_be_bool(self):
        """Truthy strings are not accepted as booleans."""
        with pytest.raises(ValidationError, match="published must be a boolean"):
            validate_post_fields({"published": "true"}, partial=True)

    def test_partial_keeps_only_given_keys(self):
        """A partial update never introduces keys the caller did not send."""
        cleaned = validate_post_fields({"title": "New"}, partial=True)
        assert cleaned == {"title": "New"}

    def test_partial_empty_cover_clears_it(self):
        """An empty cover image string clears the cover."""
        cleaned = validate_post_fields({"cover_image": ""}, partial=True)
        assert cleaned == {"cover_image": None}

    def test_partial_bad_date_rejected(self):
        """An unparseable date is a validation error."""
        with pytest.raises(ValidationError, match="published_date"):
            validate_post_fields({"published_date": "tomorrow"}, partial=True)


# =============================================================================
# Post scheduling helpers
# =============================================================================


class TestPostScheduling:
    """Tests for Post.is_due(), Post.state() and Post.apply()."""

    def test_due_when_date_passed(self, make_post, sample_utc_now):
        """An unpublished post with a past date is due."""
        post = make_post(published_date=sample_utc_now - timedelta(seconds=1))
        assert post.is_due(sample_utc_now) is True

    def test_due_exactly_at_publish_time(self, make_post, sample_utc_now):
        """The boundary is inclusive."""
        post = make_post(published_date=sample_utc_now)
        assert post.is_due(sample_utc_now) is True

    def test_not_due_in_future(self, make_post, sample_utc_now):
        """A future date is not due yet."""
        post = make_post(published_date=sample_utc_now + timedelta(hours=1))
        assert post.is_due(sample_utc_now) is False
        assert post.state(sample_utc_now) == PostState.SCHEDULED

    def test_published_never_due(self, make_post, sample_utc_now):
        """Published posts are terminal, whatever their date says."""
        post = make_post(published=True, published_date=sample_utc_now + timedelta(days=1))
        assert post.is_due(sample_utc_now) is False
        assert post.state(sample_utc_now) == PostState.PUBLISHED

    def test_unpublished_past_is_draft(self, make_post, sample_utc_now):
        """An unpublished post whose date has passed reports DRAFT."""
        post = make_post(published_date=sample_utc_now - timedelta(days=1))
        assert post.state(sample_utc_now) == PostState.DRAFT

    def test_apply_merges_and_stamps(self, make_post, sample_utc_now):
        """apply() returns a copy with the fields merged and updated_at set."""
        post = make_post()
        updated = post.apply({"title": "Renamed"}, sample_utc_now)

        assert updated.title == "Renamed"
        assert updated.updated_at == sample_utc_now
        assert updated.slug == post.slug
        assert updated.created_at == post.created_at
        # original untouched
        assert post.title == "Post p1"
        assert post.updated_at is None


# =============================================================================
# Serialised forms
# =============================================================================


class TestPostDocument:
    """Tests for the camelCase document form."""

    def test_to_dict_omits_unset_optionals(self, make_post):
        """updatedAt and coverImage are absent until set."""
        data = make_post().to_dict()
        assert "updatedAt" not in data
        assert "coverImage" not in data
        assert data["publishedDate"] == "2025-06-01T09:00:00+00:00"
        assert data["createdAt"] == "2025-05-01T08:00:00+00:00"

    def test_round_trip(self, make_post, sample_utc_now):
        """from_dict(to_dict()) restores the same post."""
        post = make_post(cover_image="https://img/x.png", updated_at=sample_utc_now)
        assert Post.from_dict(post.to_dict()) == post

    def test_from_dict_accepts_javascript_dates(self):
        """Documents written by JavaScript clients load correctly."""
        post = Post.from_dict({
            "id": "1714000000000",
            "title": "t",
            "slug": "s",
            "excerpt": "e",
            "content": "c",
            "publishedDate": "2025-01-31T09:00:00.000Z",
            "published": True,
            "createdAt": "2025-01-30T10:00:00.000Z",
            "coverImage": "",
        })
        assert post.id == "1714000000000"
        assert post.published is True
        assert post.cover_image is None
        assert post.published_date.tzinfo == timezone.utc

    def test_public_dict_wraps_cover_and_falls_back_updated_at(self, make_post):
        """The feed shape nests the cover URL and never carries the flag."""
        data = make_post(cover_image="https://img/x.png", published=True).public_dict()
        assert data["coverImage"] == {"url": "https://img/x.png"}
        assert data["updatedAt"] == "2025-05-01T08:00:00+00:00"
        assert "published" not in data
        assert "createdAt" not in data

    def test_public_dict_without_cover(self, make_post):
        """No cover means no coverImage key at all."""
        assert "coverImage" not in make_post().public_dict()


class TestPostRow:
    """Tests for the Supabase row form."""

    def test_from_row_normalises_nulls(self, sample_row):
        """Null columns map onto the documented defaults."""
        post = Post.from_row(sample_row)
        assert post.id == "42"
        assert post.excerpt == ""
        assert post.published is False
        assert post.cover_image == "https://cdn.example.com/cover.png"
        # updated_at falls back to created_at
        assert post.updated_at == post.created_at

    def test_to_row_leaves_id_to_database(self, make_post):
        """id and created_at are assigned by the database."""
        row = make_post().to_row()
        assert "id" not in row
        assert "created_at" not in row
        assert row["published_date"] == "2025-06-01T09:00:00+00:00"

    def test_fields_to_row_serialises_datetimes(self):
        """Datetime values become ISO strings, others pass through."""
        when = datetime(2025, 6, 1, tzinfo=timezone.utc)
        row = fields_to_row({"published_date": when, "published": True})
        assert row == {"published_date": "2025-06-01T00:00:00+00:00", "published": True}


# =============================================================================
# Users
# =============================================================================


class TestUsers:
    """Tests for User, AuthUser and the bootstrap admin."""

    def test_identity_drops_password(self):
        """identity() never exposes the password hash."""
        user = User(id="7", email="e@x.io", password="$2b$10$hash", name="Ed")
        identity = user.identity()
        assert identity == AuthUser(id="7", email="e@x.io", name="Ed")
        assert "password" not in identity.to_dict()

    def test_from_dict_stringifies_id(self):
        """Numeric ids from the database become strings."""
        user = User.from_dict({"id": 3, "email": "e@x.io", "password": "h", "name": "Ed"})
        assert user.id == "3"

    def test_default_admin(self):
        """The bootstrap identity is the well-known admin account."""
        assert DEFAULT_ADMIN_EMAIL == "admin@galactis.ai"
        assert DEFAULT_ADMIN_USER.email == DEFAULT_ADMIN_EMAIL
        assert DEFAULT_ADMIN_USER.password.startswith("$2a$10$")
