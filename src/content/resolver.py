"""Dual content resolver.

Resolves blog posts from one of two sources:
1. The remote content API, when API content is enabled AND the caller is
   authenticated.
2. The prebuilt static content index otherwise, or whenever the API path
   fails for any reason.

Both source shapes are normalized into UnifiedPost by two explicit transform
functions. Remote failures are logged and swallowed; a post missing from
every source is a normal outcome (None / empty list). Errors raised while
reading the static index propagate.

Usage:
    resolver = ContentResolver.from_settings()
    resolved = resolver.resolve_post("my-blog-post")
    if resolved:
        print(resolved.source, resolved.data.title)
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional, Sequence

from src.api.auth import AuthService
from src.api.blog_service import BlogService
from src.api.client import APIClient
from src.api.models import BlogPost, BlogPostStatus, GetPostsParams
from src.common.config import Settings, settings as default_settings
from src.common.logging import setup_logging

from .models import (
    ContentSource,
    ContentStats,
    ResolvedContent,
    SchemaKind,
    UnifiedPost,
)
from .static_index import load_static_index

logger = setup_logging(module_name="content.resolver")

DEFAULT_LIMIT = 100


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_list(value: Any) -> bool:
    return isinstance(value, list)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


def _is_optional_str_mapping(*keys: str):
    def check(value: Any) -> bool:
        return isinstance(value, dict) and all(
            isinstance(value.get(k), (str, type(None))) for k in keys
        )
    return check


def _is_author(value: Any) -> bool:
    return (
        _is_optional_str_mapping("image")(value)
        and isinstance(value.get("name"), str)
        and isinstance(value.get("url", ""), str)
    )


_is_open_graph = _is_optional_str_mapping("image", "imageAlt")


def _presentation_field(frontmatter: dict, key: str, accepts) -> Any:
    """Frontmatter value when it fits its field, otherwise None."""
    value = frontmatter.get(key)
    if value is None or accepts(value):
        return value
    logger.debug("Dropping frontmatter %s of type %s", key, type(value).__name__)
    return None


def _schema_kind_or_none(value: Any) -> Optional[str]:
    return value if value in {kind.value for kind in SchemaKind} else None


def transform_api_post(api_post: BlogPost) -> UnifiedPost:
    """Normalize a backend BlogPost. Presentation fields live in frontmatter.

    Backend frontmatter is free-form: a presentation value of the wrong
    type is dropped, so only the typed BlogPost fields can fail a record.
    """
    frontmatter = api_post.frontmatter or {}

    def pick(key: str, accepts) -> Any:
        return _presentation_field(frontmatter, key, accepts)

    return UnifiedPost(
        slug=api_post.slug,
        slug_as_params=api_post.slug,
        title=api_post.title,
        description=api_post.excerpt,
        excerpt=api_post.excerpt,
        content=api_post.content,
        body=api_post.content,
        date_published=api_post.created_at,
        date_modified=api_post.updated_at,
        published=api_post.status == BlogPostStatus.PUBLISHED,
        draft=api_post.status == BlogPostStatus.DRAFT,
        featured=bool(frontmatter.get("featured") or False),
        category=pick("category", _is_str),
        keywords=api_post.keywords or (),
        tags=pick("tags", _is_str_list) or (),
        author=pick("author", _is_author),
        read_time=pick("readTime", _is_int),
        thumbnail=pick("thumbnail", _is_str),
        layout=pick("layout", _is_str),
        blocks=pick("blocks", _is_list),
        og=pick("og", _is_open_graph),
        schema_kind=_schema_kind_or_none(frontmatter.get("schema")),
        faq=frontmatter.get("faq"),
        steps=frontmatter.get("steps"),
        source=ContentSource.API,
        original_data=api_post,
    )


def transform_static_post(static_post: dict) -> UnifiedPost:
    """Normalize a static index record.

    Raises:
        KeyError: If the record has no slug or title.
    """
    slug = static_post["slug"]
    description = static_post.get("description") or static_post.get("excerpt") or ""

    return UnifiedPost(
        slug=slug,
        slug_as_params=static_post.get("slugAsParams") or slug,
        title=static_post["title"],
        description=description,
        excerpt=description,
        content=static_post.get("content") or static_post.get("body") or "",
        body=static_post.get("body") or static_post.get("content") or "",
        date_published=static_post.get("datePublished") or static_post.get("date"),
        date_modified=static_post.get("dateModified"),
        published=static_post.get("published") is not False,
        draft=static_post.get("draft") or False,
        featured=static_post.get("featured") or False,
        category=static_post.get("category"),
        keywords=static_post.get("keywords") or (),
        tags=static_post.get("tags") or (),
        author=static_post.get("author"),
        read_time=static_post.get("readTime"),
        thumbnail=static_post.get("thumbnail"),
        layout=static_post.get("layout"),
        blocks=static_post.get("blocks"),
        og=static_post.get("og"),
        schema_kind=static_post.get("schema"),
        faq=static_post.get("faq"),
        steps=static_post.get("steps"),
        source=ContentSource.STATIC,
        original_data=static_post,
    )


def sort_posts_by_date(posts: Sequence[UnifiedPost]) -> list[UnifiedPost]:
    """Newest first by datePublished. Posts without a date sort last."""
    return sorted(posts, key=lambda p: p.date_published or "", reverse=True)


def _now_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class ContentResolver:
    """Chooses between the remote API and the static index per request."""

    def __init__(
        self,
        static_posts: Sequence[dict],
        blog_service: BlogService | None = None,
        auth: AuthService | None = None,
        enable_api_content: bool = False,
    ):
        """Initialize the resolver.

        Args:
            static_posts: Prebuilt static index records, in index order.
            blog_service: Remote API service (required when API content is on).
            auth: Auth capability used to gate the API path.
            enable_api_content: Feature flag for the API path.
        """
        if enable_api_content and (blog_service is None or auth is None):
            raise ValueError("API content requires both blog_service and auth")
        self._static_posts = list(static_posts)
        self._blog_service = blog_service
        self._auth = auth
        self.enable_api_content = enable_api_content

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> ContentResolver:
        """Build a resolver from application settings (flag read once here)."""
        config = config or default_settings
        static_posts = load_static_index(Path(config.content.static_index_path))
        enabled = config.content.enable_api_content
        auth = AuthService()
        blog_service = BlogService(APIClient(auth=auth, config=config)) if enabled else None
        return cls(
            static_posts,
            blog_service=blog_service,
            auth=auth,
            enable_api_content=enabled,
        )

    @property
    def static_count(self) -> int:
        return len(self._static_posts)

    def _check_authenticated(self) -> bool:
        if self._auth is None:
            return False
        try:
            return self._auth.is_authenticated()
        except Exception as e:
            logger.warning("Auth check failed: %s", e)
            return False

    def _api_allowed(self) -> bool:
        if not self.enable_api_content:
            return False
        return self._auth.is_authenticated()

    def resolve_post(self, slug: str) -> ResolvedContent | None:
        """Resolve a single post by slug.

        Returns:
            ResolvedContent from the API or the static index, or None when
            neither source has the post.
        """
        if not slug:
            raise ValueError("slug must be a non-empty string")

        if self.enable_api_content:
            try:
                if self._api_allowed():
                    logger.info("Trying API for post: %s", slug)
                    api_post = self._blog_service.get_post_by_slug(slug)
                    return ResolvedContent(
                        source=ContentSource.API,
                        data=transform_api_post(api_post),
                        timestamp=_now_ms(),
                    )
            except Exception as e:
                logger.warning(
                    "API fetch failed for %s, falling back to static: %s", slug, e
                )

        logger.debug("Using static content for post: %s", slug)
        static_post = next((p for p in self._static_posts if p["slug"] == slug), None)
        if static_post is None:
            return None

        return ResolvedContent(
            source=ContentSource.STATIC,
            data=transform_static_post(static_post),
            timestamp=_now_ms(),
        )

    def resolve_posts(
        self,
        limit: int | None = None,
        published: bool = True,
        featured: bool | None = None,
        category: str | None = None,
    ) -> list[UnifiedPost]:
        """Resolve a list of posts.

        The API filters status server-side and returns one pre-paginated
        page. The static path filters everything client-side and applies
        `limit` last. Ordering is source-defined; use sort_posts_by_date.

        Args:
            limit: Maximum number of posts (default 100).
            published: Published posts only (default True).
            featured: Keep only posts whose featured flag equals this value.
            category: Keep only posts in this category.
        """
        limit = limit or DEFAULT_LIMIT

        if self.enable_api_content:
            try:
                if self._api_allowed():
                    logger.info("Fetching posts from API")
                    result = self._blog_service.get_posts(
                        GetPostsParams(
                            page=1,
                            page_size=limit,
                            status_filter=BlogPostStatus.PUBLISHED if published else None,
                        )
                    )
                    posts = [transform_api_post(p) for p in result.posts]
                    posts = _filter_posts(posts, featured=featured, category=category)
                    logger.info("Fetched %d posts from API", len(posts))
                    return posts
            except Exception as e:
                logger.warning("API fetch failed, falling back to static: %s", e)

        posts = [transform_static_post(p) for p in self._static_posts]
        if published:
            posts = [p for p in posts if p.published and not p.draft]
        posts = _filter_posts(posts, featured=featured, category=category)
        posts = posts[:limit]

        logger.debug("Using %d static posts", len(posts))
        return posts

    def get_content_stats(self) -> ContentStats:
        """Content source statistics (debugging/monitoring)."""
        authenticated = self._check_authenticated()

        api_post_count = 0
        if self.enable_api_content and authenticated:
            try:
                result = self._blog_service.get_posts(GetPostsParams(page=1, page_size=1))
                api_post_count = result.pagination.total
            except Exception as e:
                logger.warning("API unavailable for stats: %s", e)

        return ContentStats(
            api_enabled=self.enable_api_content,
            api_available=self.enable_api_content and authenticated and api_post_count > 0,
            api_post_count=api_post_count,
            static_count=self.static_count,
            authenticated=authenticated,
        )


def _filter_posts(
    posts: list[UnifiedPost],
    featured: bool | None = None,
    category: str | None = None,
) -> list[UnifiedPost]:
    if featured is not None:
        posts = [p for p in posts if p.featured == featured]
    if category:
        posts = [p for p in posts if p.category == category]
    return posts
