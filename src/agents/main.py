"""CLI entry point for section image tooling.

Usage:
    python -m src.agents.main list
    python -m src.agents.main list-images
    python -m src.agents.main analyze --slug my-post
    python -m src.agents.main generate --slug my-post [--apply] [--no-enhance]
    python -m src.agents.main insert --slug my-post --insertions insertions.json
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from src.common.config import settings
from src.common.logging import setup_logging

from .content_analyzer import (
    analyze_content,
    extract_body_content,
    generate_image_intent,
    parse_frontmatter,
)
from .document_store import DocumentNotFoundError, InsertionValidationError, MDXDocumentStore
from .image_generator import OpenAIImageGenerator, list_images
from .mdx_updater import ImageInsertion
from .pipeline import ContentImagePipeline, build_insertions
from .prompt_enhancement import PromptEnhancer

logger = setup_logging(module_name="agents.main")


def _print_json(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _apply(store: MDXDocumentStore, slug: str, insertions: list[ImageInsertion]) -> None:
    try:
        result = store.insert_images(slug, insertions)
    except InsertionValidationError as e:
        logger.error("Insertion rejected: %s", e)
        sys.exit(1)
    print(
        f"\nInserted {result.insertions_made} images into {slug}.mdx "
        f"(backup: {result.backup_path})"
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze MDX posts and insert section images")
    parser.add_argument("--collection-dir", type=Path, help="Directory of MDX posts (default: settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List MDX posts")
    subparsers.add_parser("list-images", help="List generated images, newest first")

    analyze = subparsers.add_parser("analyze", help="Show sections needing images")
    analyze.add_argument("--slug", required=True)
    analyze.add_argument("--intents", action="store_true", help="Include image intents")

    generate = subparsers.add_parser("generate", help="Generate images for a post")
    generate.add_argument("--slug", required=True)
    generate.add_argument("--max-sections", type=int, default=settings.images.max_sections)
    generate.add_argument("--apply", action="store_true", help="Insert generated images into the post")
    generate.add_argument("--no-enhance", action="store_true", help="Send intents to the generator unrefined")

    insert = subparsers.add_parser("insert", help="Insert images from a JSON file")
    insert.add_argument("--slug", required=True)
    insert.add_argument("--insertions", type=Path, required=True, help="JSON list of insertions")

    args = parser.parse_args()
    store = MDXDocumentStore(args.collection_dir)

    try:
        if args.command == "list":
            _print_json({"posts": store.list_posts()})

        elif args.command == "list-images":
            _print_json({"images": list_images()})

        elif args.command == "analyze":
            mdx_content = store.read(args.slug)
            analysis = analyze_content(
                extract_body_content(mdx_content), parse_frontmatter(mdx_content)
            )
            output = asdict(analysis)
            if args.intents:
                for section, data in zip(analysis.sections, output["sections"]):
                    data["intent"] = generate_image_intent(
                        section, analysis.title, analysis.description
                    )
            _print_json(output)

        elif args.command == "generate":
            pipeline = ContentImagePipeline(
                store,
                OpenAIImageGenerator(),
                enhancer=None if args.no_enhance else PromptEnhancer(),
                max_sections=args.max_sections,
            )
            run = pipeline.run(args.slug)
            _print_json(run.to_dict())
            insertions = build_insertions(run)
            if args.apply:
                if not insertions:
                    logger.error("No images were generated; nothing to insert")
                    sys.exit(1)
                _apply(store, args.slug, insertions)

        elif args.command == "insert":
            try:
                with open(args.insertions, encoding="utf-8") as f:
                    raw = json.load(f)
                insertions = [ImageInsertion.from_dict(item) for item in raw]
            except ValueError as e:
                logger.error("Invalid insertions file %s: %s", args.insertions, e)
                sys.exit(1)
            _apply(store, args.slug, insertions)

    except DocumentNotFoundError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
