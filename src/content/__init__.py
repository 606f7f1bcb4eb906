# Content: Dual content resolution
"""
Blog content resolution with a remote-first, static-fallback strategy:
- models: UnifiedPost and resolution result types
- static_index: offline compilation of MDX files into the static index
- resolver: ContentResolver (API when enabled and authenticated, else static)
"""

from .models import (
    Author,
    ContentSource,
    ContentStats,
    OpenGraph,
    ResolvedContent,
    SchemaKind,
    UnifiedPost,
)
from .resolver import (
    ContentResolver,
    sort_posts_by_date,
    transform_api_post,
    transform_static_post,
)
from .static_index import build_static_index, load_static_index, save_static_index

__all__ = [
    "Author",
    "ContentResolver",
    "ContentSource",
    "ContentStats",
    "OpenGraph",
    "ResolvedContent",
    "SchemaKind",
    "UnifiedPost",
    "build_static_index",
    "load_static_index",
    "save_static_index",
    "sort_posts_by_date",
    "transform_api_post",
    "transform_static_post",
]
