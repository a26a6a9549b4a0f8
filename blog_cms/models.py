"""
Shared data types for the blog CMS backend.

This module is the single source of truth for the shapes a post or a user
takes anywhere in the system.  A ``Post`` has three serialised forms:

- **document** (``to_dict`` / ``from_dict``): camelCase keys, ISO-8601
  timestamps.  Written to ``posts.json`` and returned by editor endpoints.
- **row** (``to_row`` / ``from_row``): snake_case columns of the Supabase
  ``posts`` table.
- **public** (``public_dict``): the feed shape consumed by the main website.

``published_date`` carries two meanings at once: it is the date shown to
readers AND the moment an unpublished post becomes due for auto-publishing.
Nothing except an explicit editor update ever changes it.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from blog_cms.exceptions import ValidationError
from blog_cms.utils import parse_timestamp, to_iso, utc_now


# =============================================================================
# ENUMS
# =============================================================================


class PostState(Enum):
    """Lifecycle state of a single post, derived from ``published`` and the clock.

    Transitions:
        SCHEDULED -> PUBLISHED   (sweep at or after ``published_date``)
        any       -> any         (explicit editor update only)

    DRAFT never auto-transitions; PUBLISHED is terminal for the scheduler.
    """

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


# =============================================================================
# FIELD NAMES
# =============================================================================

# Attribute name -> document (camelCase) key for every editor-writable field
EDITABLE_FIELDS: Dict[str, str] = {
    "title": "title",
    "slug": "slug",
    "excerpt": "excerpt",
    "content": "content",
    "published_date": "publishedDate",
    "published": "published",
    "cover_image": "coverImage",
}

REQUIRED_CREATE_FIELDS = ("title", "slug", "excerpt", "content", "published_date")

_TEXT_FIELDS = ("title", "slug", "excerpt", "content")


# =============================================================================
# VALIDATION
# =============================================================================


def validate_post_fields(
    fields: Mapping[str, Any], partial: bool = False
) -> Dict[str, Any]:
    """Validate and normalise caller-supplied post fields.

    Keys are attribute names (``published_date``, ``cover_image``...).  Only
    keys present in *fields* appear in the result, so a partial update
    never touches anything the caller did not send.

    Normalisation:
        - ``published_date`` is parsed into an aware UTC datetime.
        - ``cover_image`` of ``None`` or ``""`` becomes ``None`` (cleared).
        - ``published`` must be a real bool (``None`` means ``False`` on
          create).

    Args:
        fields: Raw field mapping.
        partial: ``False`` for create (all of ``REQUIRED_CREATE_FIELDS``
            must be present and non-empty), ``True`` for update.

    Returns:
        A new dict of normalised fields.

    Raises:
        ValidationError: On unknown keys, missing required fields, empty
            text, a non-bool ``published`` or an unparseable date.
    """
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown post fields: {sorted(unknown)}")

    if not partial:
        missing = [
            name for name in REQUIRED_CREATE_FIELDS
            if fields.get(name) in (None, "")
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {missing}")

    cleaned: Dict[str, Any] = {}
    for name, value in fields.items():
        if name in _TEXT_FIELDS:
            if not isinstance(value, str):
                raise ValidationError(f"{name} must be a string")
            if name in ("title", "slug") and not value.strip():
                raise ValidationError(f"{name} cannot be empty string")
            cleaned[name] = value
        elif name == "published_date":
            cleaned[name] = parse_timestamp(value, "published_date")
        elif name == "published":
            if value is None and not partial:
                value = False
            if not isinstance(value, bool):
                raise ValidationError(f"published must be a boolean, got {value!r}")
            cleaned[name] = value
        elif name == "cover_image":
            if value is not None and not isinstance(value, str):
                raise ValidationError("cover_image must be a string URL")
            cleaned[name] = value or None

    if not partial:
        cleaned.setdefault("published", False)
        cleaned.setdefault("cover_image", None)
    return cleaned


# =============================================================================
# POST
# =============================================================================


@dataclass
class Post:
    """One blog entry.

    Attributes:
        id: Opaque unique identifier, assigned at creation.
        title: Post title.
        slug: URL slug.  Intended unique, not enforced.
        excerpt: Short summary shown in listings.
        content: Markdown body.
        published_date: Display date and auto-publish time (aware UTC).
        published: ``False`` for drafts/scheduled posts, ``True`` when live.
        cover_image: Optional remote URL or base64 data URL.
        created_at: Set once at creation.
        updated_at: Stamped on every mutation; ``None`` until the first one.
    """

    id: str
    title: str
    slug: str
    excerpt: str
    content: str
    published_date: datetime
    published: bool = False
    cover_image: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    # -----------------------------------------------------------------
    # Scheduling helpers
    # -----------------------------------------------------------------

    def is_due(self, now: Optional[datetime] = None) -> bool:
        """True when the post is unpublished and its publish time has passed."""
        now = now or utc_now()
        return not self.published and self.published_date <= now

    def state(self, now: Optional[datetime] = None) -> PostState:
        now = now or utc_now()
        if self.published:
            return PostState.PUBLISHED
        if self.published_date > now:
            return PostState.SCHEDULED
        return PostState.DRAFT

    def apply(self, fields: Mapping[str, Any], now: Optional[datetime] = None) -> "Post":
        """Return a copy with *fields* merged in and ``updated_at`` stamped.

        *fields* must already be normalised by :func:`validate_post_fields`.
        """
        return dataclasses.replace(self, **fields, updated_at=now or utc_now())

    # -----------------------------------------------------------------
    # Document form (posts.json, editor API)
    # -----------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "content": self.content,
            "publishedDate": to_iso(self.published_date),
            "published": self.published,
            "createdAt": to_iso(self.created_at),
        }
        if self.updated_at is not None:
            data["updatedAt"] = to_iso(self.updated_at)
        if self.cover_image is not None:
            data["coverImage"] = self.cover_image
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Post":
        created_at = parse_timestamp(data["createdAt"], "createdAt")
        updated_raw = data.get("updatedAt")
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            slug=data.get("slug", ""),
            excerpt=data.get("excerpt") or "",
            content=data.get("content") or "",
            published_date=parse_timestamp(
                data.get("publishedDate") or data["createdAt"], "publishedDate"
            ),
            published=bool(data.get("published", False)),
            cover_image=data.get("coverImage") or None,
            created_at=created_at,
            updated_at=parse_timestamp(updated_raw, "updatedAt") if updated_raw else None,
        )

    def public_dict(self) -> Dict[str, Any]:
        """Feed shape: no draft flag, ``coverImage`` wrapped as ``{"url": ...}``."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt or "",
            "content": self.content or "",
            "publishedDate": to_iso(self.published_date),
            "updatedAt": to_iso(self.updated_at or self.created_at),
        }
        if self.cover_image:
            data["coverImage"] = {"url": self.cover_image}
        return data

    # -----------------------------------------------------------------
    # Row form (Supabase ``posts`` table)
    # -----------------------------------------------------------------

    def to_row(self) -> Dict[str, Any]:
        """Insertable row.  ``id`` and ``created_at`` are left to the database."""
        return {
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "content": self.content,
            "published_date": to_iso(self.published_date),
            "published": self.published,
            "cover_image": self.cover_image,
            "updated_at": to_iso(self.updated_at),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Post":
        created_at = parse_timestamp(row["created_at"], "created_at")
        updated_raw = row.get("updated_at")
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            slug=row.get("slug") or "",
            excerpt=row.get("excerpt") or "",
            content=row.get("content") or "",
            published_date=parse_timestamp(
                row.get("published_date") or row["created_at"], "published_date"
            ),
            published=bool(row.get("published") or False),
            cover_image=row.get("cover_image") or None,
            created_at=created_at,
            updated_at=parse_timestamp(updated_raw, "updated_at") if updated_raw else created_at,
        )


def fields_to_row(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Map normalised post fields onto Supabase column values."""
    row: Dict[str, Any] = {}
    for name, value in fields.items():
        if isinstance(value, datetime):
            value = to_iso(value)
        row[name] = value
    return row


# =============================================================================
# USERS
# =============================================================================


@dataclass
class User:
    """The editor account.

    Attributes:
        id: Opaque identifier.
        email: Lookup key.
        password: Salted bcrypt hash, never the plaintext.
        name: Display name.
    """

    id: str
    email: str
    password: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "password": self.password,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            email=data["email"],
            password=data.get("password") or "",
            name=data.get("name") or "",
        )

    def identity(self) -> "AuthUser":
        return AuthUser(id=self.id, email=self.email, name=self.name)


@dataclass(frozen=True)
class AuthUser:
    """Identity yielded by the auth gate: everything but the password."""

    id: str
    email: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "email": self.email, "name": self.name}


# Bootstrap identity served when no users are persisted yet.
# The hash is bcrypt (cost 10) of "admin123".
DEFAULT_ADMIN_EMAIL = "admin@galactis.ai"

DEFAULT_ADMIN_USER = User(
    id="1",
    email=DEFAULT_ADMIN_EMAIL,
    password="$2a$10$3hfy6d3Xi/7JCRzGbR.FiuPkUl6VbTGZzunHoPhqHRHg/2RPT9B32",
    name="Admin",
)


# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    "PostState",
    "EDITABLE_FIELDS",
    "REQUIRED_CREATE_FIELDS",
    "validate_post_fields",
    "Post",
    "fields_to_row",
    "User",
    "AuthUser",
    "DEFAULT_ADMIN_EMAIL",
    "DEFAULT_ADMIN_USER",
]
