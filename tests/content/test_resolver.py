"""Tests for the dual content resolver."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from src.api.blog_service import BlogAPIError
from src.api.models import BlogPost, BlogPostsResponse, BlogPostStatus, Pagination
from src.content.models import ContentSource, SchemaKind
from src.content.resolver import (
    ContentResolver,
    sort_posts_by_date,
    transform_api_post,
    transform_static_post,
)


def _api_post(**overrides) -> BlogPost:
    data = {
        "id": "post-1",
        "title": "API Post",
        "slug": "api-post",
        "excerpt": "From the API",
        "content": "# API\n\nBody",
        "status": "published",
        "keywords": ["api"],
        "frontmatter": {
            "featured": True,
            "category": "Guides",
            "tags": ["x"],
            "readTime": 4,
            "author": {"name": "Ana", "url": "https://a.example"},
            "schema": "HowTo",
        },
        "created_at": "2024-03-01T00:00:00Z",
        "updated_at": "2024-03-02T00:00:00Z",
    }
    data.update(overrides)
    return BlogPost.model_validate(data)


def _posts_response(posts: list[BlogPost], total: int | None = None) -> BlogPostsResponse:
    return BlogPostsResponse(
        posts=posts,
        pagination=Pagination(
            page=1, page_size=len(posts) or 1, total=len(posts) if total is None else total, total_pages=1
        ),
    )


def _resolver(static_posts, authenticated: bool = True, enabled: bool = True):
    service = MagicMock()
    auth = MagicMock()
    auth.is_authenticated.return_value = authenticated
    resolver = ContentResolver(
        static_posts, blog_service=service, auth=auth, enable_api_content=enabled
    )
    return resolver, service, auth


class TestTransforms:
    def test_api_post(self):
        post = transform_api_post(_api_post())

        assert post.source == ContentSource.API
        assert post.slug == post.slug_as_params == "api-post"
        assert post.description == post.excerpt == "From the API"
        assert post.content == post.body == "# API\n\nBody"
        assert post.date_published == "2024-03-01T00:00:00Z"
        assert post.published is True and post.draft is False
        assert post.featured is True
        assert post.category == "Guides"
        assert post.tags == ("x",)
        assert post.author.name == "Ana"
        assert post.read_time == 4
        assert post.schema_kind == SchemaKind.HOW_TO
        assert isinstance(post.original_data, BlogPost)

    def test_api_status_mapping(self):
        draft = transform_api_post(_api_post(status="draft"))
        archived = transform_api_post(_api_post(status="archived"))
        assert (draft.published, draft.draft) == (False, True)
        assert (archived.published, archived.draft) == (False, False)

    def test_api_post_without_frontmatter(self):
        post = transform_api_post(_api_post(frontmatter={}))
        assert post.featured is False
        assert post.author is None
        assert post.schema_kind is None
        assert post.tags == ()

    def test_api_post_with_loose_frontmatter(self):
        post = transform_api_post(
            _api_post(
                frontmatter={
                    "tags": "ai, marketing",
                    "readTime": 4.5,
                    "category": ["Guides"],
                    "author": "Ana",
                    "og": {"image": 3},
                    "blocks": {"type": "hero"},
                    "thumbnail": "/img/t.png",
                }
            )
        )

        assert post.source == ContentSource.API
        assert post.tags == ()
        assert post.read_time is None
        assert post.category is None
        assert post.author is None
        assert post.og is None
        assert post.blocks is None
        assert post.thumbnail == "/img/t.png"

    def test_static_post(self, static_posts):
        post = transform_static_post(static_posts[1])

        assert post.source == ContentSource.STATIC
        assert post.layout == "builder"
        assert post.blocks == [{"type": "hero", "content": "Test"}]
        assert post.excerpt == post.description
        assert post.original_data is static_posts[1]

    def test_static_defaults(self):
        post = transform_static_post({"slug": "bare", "title": "Bare", "excerpt": "Short"})
        assert post.slug_as_params == "bare"
        assert post.description == "Short"
        assert post.published is True
        assert post.draft is False
        assert post.featured is False
        assert post.keywords == ()
        assert post.content == ""

    def test_static_missing_slug_raises(self):
        with pytest.raises(KeyError):
            transform_static_post({"title": "No slug"})

    def test_unified_post_is_immutable(self, static_posts):
        post = transform_static_post(static_posts[0])
        with pytest.raises(Exception):
            post.title = "changed"

    def test_to_dict_uses_public_names(self, static_posts):
        data = transform_static_post(static_posts[0]).to_dict()
        assert data["slugAsParams"] == "whatsapp-business-guide-when-to-use"
        assert data["_source"] == "static"
        assert data["readTime"] == 10
        assert "_originalData" not in data


class TestResolvePostStatic:
    def test_static_when_unauthenticated(self, static_posts):
        resolver, service, _ = _resolver(static_posts, authenticated=False)

        result = resolver.resolve_post("whatsapp-business-guide-when-to-use")

        assert result.source == ContentSource.STATIC
        assert result.data.title == "WhatsApp Business Guide: When to Use"
        assert result.timestamp > 0
        service.get_post_by_slug.assert_not_called()

    def test_static_when_flag_off(self, static_posts):
        resolver = ContentResolver(static_posts)
        assert resolver.resolve_post("draft-post").source == ContentSource.STATIC

    @pytest.mark.parametrize("slug", ["non-existent-post-slug-12345", "WHATSAPP-BUSINESS-GUIDE-WHEN-TO-USE"])
    def test_unknown_slug_returns_none(self, static_posts, slug):
        resolver, service, _ = _resolver(static_posts)
        service.get_post_by_slug.side_effect = BlogAPIError("not found", status_code=404)
        assert resolver.resolve_post(slug) is None

    def test_empty_slug_rejected(self, static_posts):
        with pytest.raises(ValueError):
            ContentResolver(static_posts).resolve_post("")


class TestResolvePostApi:
    def test_api_first_when_authenticated(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_post_by_slug.return_value = _api_post(slug="whatsapp-business-guide-when-to-use")

        result = resolver.resolve_post("whatsapp-business-guide-when-to-use")

        assert result.source == ContentSource.API
        assert result.data.title == "API Post"

    def test_fallback_on_api_error(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_post_by_slug.side_effect = BlogAPIError("boom", status_code=500)

        result = resolver.resolve_post("ai-generated-content-example")

        assert result.source == ContentSource.STATIC

    def test_fallback_on_auth_error(self, static_posts):
        resolver, service, auth = _resolver(static_posts)
        auth.is_authenticated.side_effect = RuntimeError("auth down")

        result = resolver.resolve_post("ai-generated-content-example")

        assert result.source == ContentSource.STATIC
        service.get_post_by_slug.assert_not_called()

    def test_loose_frontmatter_does_not_fall_back(self):
        resolver, service, _ = _resolver([])
        service.get_post_by_slug.return_value = _api_post(
            slug="loose", frontmatter={"category": ["Guides"]}
        )

        result = resolver.resolve_post("loose")

        assert result.source == ContentSource.API
        assert result.data.slug == "loose"

    def test_flag_requires_collaborators(self, static_posts):
        with pytest.raises(ValueError):
            ContentResolver(static_posts, enable_api_content=True)


class TestResolvePosts:
    def test_static_published_only(self, static_posts):
        resolver, _, _ = _resolver(static_posts, authenticated=False)

        posts = resolver.resolve_posts()

        assert [p.slug for p in posts] == [
            "whatsapp-business-guide-when-to-use",
            "ai-generated-content-example",
        ]
        assert all(p.published and not p.draft for p in posts)
        assert all(p.source == ContentSource.STATIC for p in posts)

    def test_static_all(self, static_posts):
        posts = ContentResolver(static_posts).resolve_posts(published=False)
        assert len(posts) == 3

    def test_published_flag_without_draft_flag(self):
        posts = ContentResolver(
            [
                {"slug": "a", "title": "A", "published": True, "draft": True},
                {"slug": "b", "title": "B", "published": False},
                {"slug": "c", "title": "C"},
            ]
        ).resolve_posts()
        assert [p.slug for p in posts] == ["c"]

    def test_featured_and_category_filters(self, static_posts):
        resolver = ContentResolver(static_posts)
        assert [p.slug for p in resolver.resolve_posts(featured=True)] == [
            "whatsapp-business-guide-when-to-use"
        ]
        assert [p.slug for p in resolver.resolve_posts(featured=False)] == [
            "ai-generated-content-example"
        ]
        assert [p.slug for p in resolver.resolve_posts(category="AI")] == [
            "ai-generated-content-example"
        ]

    def test_filter_then_limit(self):
        index = [
            {"slug": f"post-{i}", "title": f"Post {i}", "category": "Other"} for i in range(10)
        ]
        index[7]["category"] = "Guides"
        index[9]["category"] = "Guides"

        posts = ContentResolver(index).resolve_posts(limit=3, category="Guides")

        assert [p.slug for p in posts] == ["post-7", "post-9"]

    def test_limit_applied(self):
        index = [{"slug": f"post-{i}", "title": f"Post {i}"} for i in range(5)]
        assert len(ContentResolver(index).resolve_posts(limit=2)) == 2

    def test_api_list(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_posts.return_value = _posts_response(
            [_api_post(), _api_post(slug="other", frontmatter={"category": "News"})]
        )

        posts = resolver.resolve_posts(limit=10, category="Guides")

        params = service.get_posts.call_args.args[0]
        assert params.page == 1
        assert params.page_size == 10
        assert params.status_filter == BlogPostStatus.PUBLISHED
        assert [p.slug for p in posts] == ["api-post"]
        assert posts[0].source == ContentSource.API

    def test_api_list_keeps_page_with_loose_frontmatter(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_posts.return_value = _posts_response(
            [_api_post(), _api_post(slug="loose", frontmatter={"tags": "ai, marketing", "readTime": 4.5})]
        )

        posts = resolver.resolve_posts()

        assert [p.slug for p in posts] == ["api-post", "loose"]
        assert all(p.source == ContentSource.API for p in posts)

    def test_api_list_unpublished_has_no_status_filter(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_posts.return_value = _posts_response([])

        assert resolver.resolve_posts(published=False) == []
        assert service.get_posts.call_args.args[0].status_filter is None

    def test_api_list_falls_back(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_posts.side_effect = BlogAPIError("down")

        posts = resolver.resolve_posts()

        assert len(posts) == 2
        assert all(p.source == ContentSource.STATIC for p in posts)


class TestContentStats:
    def test_stats_with_api(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_posts.return_value = _posts_response([_api_post()], total=42)

        stats = resolver.get_content_stats()

        assert stats.to_dict() == {
            "api_enabled": True,
            "api_available": True,
            "api_post_count": 42,
            "static_count": 3,
            "authenticated": True,
        }
        params = service.get_posts.call_args.args[0]
        assert (params.page, params.page_size) == (1, 1)

    def test_stats_api_failure(self, static_posts):
        resolver, service, _ = _resolver(static_posts)
        service.get_posts.side_effect = BlogAPIError("down")

        stats = resolver.get_content_stats()

        assert stats.api_available is False
        assert stats.api_post_count == 0

    def test_stats_flag_off(self, static_posts):
        stats = ContentResolver(static_posts).get_content_stats()
        assert stats.api_enabled is False
        assert stats.authenticated is False
        assert stats.static_count == 3


class TestFromSettings:
    def test_loads_static_index(self, tmp_path, test_settings, static_posts):
        index_path = tmp_path / "data" / "blog.json"
        index_path.parent.mkdir(parents=True)
        index_path.write_text(json.dumps(static_posts), encoding="utf-8")

        with patch("src.content.resolver.AuthService") as mock_auth:
            resolver = ContentResolver.from_settings(test_settings)

        mock_auth.assert_called_once()
        assert resolver.static_count == 3
        assert resolver.enable_api_content is False

    def test_missing_index_means_no_static_posts(self, test_settings):
        with patch("src.content.resolver.AuthService"):
            resolver = ContentResolver.from_settings(test_settings)
        assert resolver.resolve_posts() == []


def test_sort_posts_by_date(static_posts):
    posts = [transform_static_post(p) for p in static_posts]
    posts.append(transform_static_post({"slug": "undated", "title": "Undated"}))

    ordered = sort_posts_by_date(posts)

    assert [p.slug for p in ordered] == [
        "draft-post",
        "ai-generated-content-example",
        "whatsapp-business-guide-when-to-use",
        "undated",
    ]
