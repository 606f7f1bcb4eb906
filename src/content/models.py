"""Unified post model shared by both content sources.

Whatever backend served a post, callers only ever see a UnifiedPost.
The `source` / `original_data` fields exist for diagnostics and must not
drive business logic.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContentSource(str, Enum):
    """Backend that served a post."""
    API = "api"
    STATIC = "static"


class SchemaKind(str, Enum):
    """Schema.org type hint used by the structured-data generator."""
    ARTICLE = "Article"
    HOW_TO = "HowTo"
    FAQ_PAGE = "FAQPage"


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: str = ""
    image: Optional[str] = None


class OpenGraph(BaseModel):
    """Open Graph overrides for social previews."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    image: Optional[str] = None
    image_alt: Optional[str] = Field(default=None, alias="imageAlt")


class UnifiedPost(BaseModel):
    """Normalized, immutable blog post record.

    `description`/`excerpt` and `content`/`body` carry the same values.
    `published` and `draft` are independent (an archived API post is neither).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Identity
    slug: str
    slug_as_params: str = Field(alias="slugAsParams")

    # Content
    title: str
    description: str = ""
    excerpt: str = ""
    content: str = ""
    body: str = ""

    # Temporal
    date_published: Optional[str] = Field(default=None, alias="datePublished")
    date_modified: Optional[str] = Field(default=None, alias="dateModified")

    # Publication state
    published: bool = True
    draft: bool = False

    # Classification
    featured: bool = False
    category: Optional[str] = None
    keywords: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    # Presentation
    author: Optional[Author] = None
    read_time: Optional[int] = Field(default=None, alias="readTime")
    thumbnail: Optional[str] = None
    layout: Optional[str] = None
    blocks: Optional[list[Any]] = None
    og: Optional[OpenGraph] = None

    # Structured-data hints
    schema_kind: Optional[SchemaKind] = Field(default=None, alias="schema")
    faq: Any = None
    steps: Any = None

    # Provenance
    source: ContentSource = Field(alias="_source")
    original_data: Any = Field(default=None, alias="_originalData", repr=False)

    def to_dict(self, include_original: bool = False) -> dict:
        """Serialize with the public (camelCase) field names."""
        exclude = None if include_original else {"original_data"}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


@dataclass(frozen=True)
class ResolvedContent:
    """A resolved post together with the source that served it."""
    source: ContentSource
    data: UnifiedPost
    timestamp: int  # epoch milliseconds


@dataclass
class ContentStats:
    """Content source statistics for debugging/monitoring."""
    api_enabled: bool
    api_available: bool
    api_post_count: int
    static_count: int
    authenticated: bool

    def to_dict(self) -> dict:
        return asdict(self)
