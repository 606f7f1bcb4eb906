# API: Remote content backend and auth capability
"""
Clients for the collaborators the content layer talks to:
- client: authenticated HTTP client (requests) for the content backend
- blog_service: blog post CRUD over /v1/blog/posts
- auth: Supabase-backed auth capability
"""

from .auth import AuthError, AuthService
from .blog_service import BlogAPIError, BlogService
from .client import APIClient, APIError, get_error_message
from .models import (
    BlogPost,
    BlogPostPayload,
    BlogPostsResponse,
    BlogPostStatus,
    GetPostsParams,
    Pagination,
)

__all__ = [
    "APIClient",
    "APIError",
    "AuthError",
    "AuthService",
    "BlogAPIError",
    "BlogPost",
    "BlogPostPayload",
    "BlogPostsResponse",
    "BlogPostStatus",
    "BlogService",
    "GetPostsParams",
    "Pagination",
    "get_error_message",
]
