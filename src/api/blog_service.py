"""Blog service: typed CRUD wrapper over the backend /v1/blog endpoints.

Usage:
    service = BlogService()
    result = service.get_posts(GetPostsParams(page=1, page_size=20, status_filter="published"))
    post = service.get_post_by_slug("my-blog-post")
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from .client import APIClient, APIError
from .models import (
    BlogPost,
    BlogPostPayload,
    BlogPostsResponse,
    GetPostsParams,
)

logger = logging.getLogger(__name__)

POSTS_PATH = "/v1/blog/posts"


class BlogAPIError(Exception):
    """Raised when a blog API operation fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BlogService:
    """Blog post operations against the content backend."""

    def __init__(self, client: APIClient | None = None):
        self._client = client or APIClient()

    def get_posts(self, params: GetPostsParams | None = None) -> BlogPostsResponse:
        """Get a paginated list of blog posts."""
        params = params or GetPostsParams()
        try:
            data = self._client.get(POSTS_PATH, params=params.to_query())
            return BlogPostsResponse.model_validate(data)
        except (APIError, ValidationError) as e:
            raise _wrap(e, "Failed to fetch blog posts") from e

    def get_post_by_slug(self, slug: str) -> BlogPost:
        """Get a single blog post by slug."""
        try:
            data = self._client.get(f"{POSTS_PATH}/{slug}")
            return BlogPost.model_validate(data)
        except (APIError, ValidationError) as e:
            raise _wrap(e, f'Failed to fetch post "{slug}"') from e

    def get_post_by_id(self, post_id: str) -> BlogPost:
        """Get a single blog post by ID."""
        try:
            data = self._client.get(f"{POSTS_PATH}/{post_id}")
            return BlogPost.model_validate(data)
        except (APIError, ValidationError) as e:
            raise _wrap(e, f'Failed to fetch post with ID "{post_id}"') from e

    def create_post(self, payload: BlogPostPayload) -> BlogPost:
        """Create a new blog post. title and content are required."""
        if not payload.title or payload.content is None:
            raise ValueError("title and content are required to create a post")
        try:
            data = self._client.post(POSTS_PATH, json=payload.to_request_dict())
            post = BlogPost.model_validate(data)
        except (APIError, ValidationError) as e:
            raise _wrap(e, "Failed to create blog post") from e
        logger.info("Created post %s (%s)", post.id, post.slug)
        return post

    def update_post(self, post_id: str, payload: BlogPostPayload) -> BlogPost:
        """Update an existing post. Only fields set on payload are sent."""
        try:
            data = self._client.put(f"{POSTS_PATH}/{post_id}", json=payload.to_request_dict())
            return BlogPost.model_validate(data)
        except (APIError, ValidationError) as e:
            raise _wrap(e, f'Failed to update post "{post_id}"') from e

    def delete_post(self, post_id: str) -> None:
        try:
            self._client.delete(f"{POSTS_PATH}/{post_id}")
        except APIError as e:
            raise _wrap(e, f'Failed to delete post "{post_id}"') from e
        logger.info("Deleted post %s", post_id)

    def publish_post(self, post_id: str) -> BlogPost:
        """Publish a draft post."""
        try:
            data = self._client.post(f"{POSTS_PATH}/{post_id}/publish")
            return BlogPost.model_validate(data)
        except (APIError, ValidationError) as e:
            raise _wrap(e, f'Failed to publish post "{post_id}"') from e


def _wrap(error: Exception, prefix: str) -> BlogAPIError:
    status_code = getattr(error, "status_code", None)
    message = error.message if isinstance(error, APIError) else str(error)
    return BlogAPIError(f"{prefix}: {message}", status_code=status_code)
