"""Pydantic models mirroring the remote blog API schema (/v1/blog)."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class BlogPostStatus(str, Enum):
    """Publication status as stored by the backend."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class BlogPost(BaseModel):
    """A blog post as returned by the backend."""
    id: str
    user_id: str = ""
    brand_id: str = ""
    title: str
    slug: str
    excerpt: str = ""
    content: str = ""  # MDX
    status: BlogPostStatus = BlogPostStatus.DRAFT
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    schema_markup: Optional[dict[str, Any]] = None
    quality_score: Optional[float] = None
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    created_at: str
    updated_at: Optional[str] = None


class Pagination(BaseModel):
    """Pagination metadata of a list response."""
    page: int
    page_size: int
    total: int
    total_pages: int


class BlogPostsResponse(BaseModel):
    """Paginated list of blog posts."""
    posts: list[BlogPost] = Field(default_factory=list)
    pagination: Pagination


class BlogPostPayload(BaseModel):
    """Create/update payload. Unset fields are omitted from the request."""
    brand_id: Optional[str] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    status: Optional[BlogPostStatus] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[list[str]] = None
    schema_markup: Optional[dict[str, Any]] = None
    frontmatter: Optional[dict[str, Any]] = None

    def to_request_dict(self) -> dict:
        """Serialize for the API, omitting None values."""
        return self.model_dump(mode="json", exclude_none=True)


class GetPostsParams(BaseModel):
    """Query parameters for the list endpoint."""
    brand_id: Optional[str] = None
    status_filter: Optional[BlogPostStatus] = None
    workflow_status: Optional[str] = None
    search: Optional[str] = None
    page: int = 1
    page_size: int = 20

    def to_query(self) -> dict:
        """Serialize to query parameters, omitting None values."""
        return self.model_dump(mode="json", exclude_none=True)
