"""CLI entry point for the content layer.

Usage:
    python -m src.content.main build-index
    python -m src.content.main get --slug blog/my-post
    python -m src.content.main list --limit 10 --category Guides
    python -m src.content.main stats
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from src.common.config import settings
from src.common.logging import setup_logging

from .resolver import ContentResolver, sort_posts_by_date
from .static_index import build_static_index, save_static_index

logger = setup_logging(module_name="content.main")


def _print_json(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Resolve blog content from the API or static index")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build-index", help="Compile MDX files into the static index")
    build.add_argument("--content-dir", type=Path, help="Content root (default: settings)")
    build.add_argument("--output", type=Path, help="Index path (default: settings)")

    get = subparsers.add_parser("get", help="Resolve one post by slug")
    get.add_argument("--slug", required=True)

    list_cmd = subparsers.add_parser("list", help="Resolve a list of posts")
    list_cmd.add_argument("--limit", type=int, default=settings.content.default_limit)
    list_cmd.add_argument("--category")
    featured = list_cmd.add_mutually_exclusive_group()
    featured.add_argument("--featured", dest="featured", action="store_true", default=None)
    featured.add_argument("--not-featured", dest="featured", action="store_false")
    list_cmd.add_argument("--all", action="store_true", help="Include unpublished posts")

    subparsers.add_parser("stats", help="Show content source statistics")

    args = parser.parse_args()

    if args.command == "build-index":
        content_dir = args.content_dir or Path(settings.content.content_dir)
        output = args.output or Path(settings.content.static_index_path)
        records = build_static_index(content_dir, settings.content.collection)
        save_static_index(records, output)
        print(f"\nIndexed {len(records)} posts: {output}")
        return

    resolver = ContentResolver.from_settings(settings)

    if args.command == "get":
        resolved = resolver.resolve_post(args.slug)
        if resolved is None:
            logger.error("Post not found: %s", args.slug)
            sys.exit(1)
        _print_json(
            {
                "source": resolved.source.value,
                "timestamp": resolved.timestamp,
                "data": resolved.data.to_dict(),
            }
        )
    elif args.command == "list":
        posts = resolver.resolve_posts(
            limit=args.limit,
            published=not args.all,
            featured=args.featured,
            category=args.category,
        )
        _print_json([p.to_dict() for p in sort_posts_by_date(posts)])
    elif args.command == "stats":
        _print_json(resolver.get_content_stats().to_dict())


if __name__ == "__main__":
    main()
