"""Request bodies accepted by the JSON API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostPayload(BaseModel):
    """Create/update body using the camelCase keys the dashboard sends.

    Every field is optional at this layer: missing required fields are
    reported by the store's validation as a 400, not by pydantic as a 422.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    published_date: Optional[str] = Field(default=None, alias="publishedDate")
    published: Optional[bool] = None
    cover_image: Optional[str] = Field(default=None, alias="coverImage")

    def to_fields(self) -> Dict[str, Any]:
        """Only the keys the client actually sent, including explicit nulls."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
