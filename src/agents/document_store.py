"""Filesystem access to authored MDX blog posts.

Documents live at `<content_dir>/blog/{slug}.mdx`; backups at
`<content_dir>/blog/.backups/{slug}.backup-{epoch_ms}.mdx`.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Sequence

from src.common.config import Settings, settings as default_settings
from src.common.logging import setup_logging

from .content_analyzer import parse_frontmatter
from .mdx_updater import (
    ImageInsertion,
    MDXUpdateResult,
    update_mdx_with_images,
    validate_insertions,
)

logger = setup_logging(module_name="agents.document_store")

BACKUP_DIRNAME = ".backups"


class DocumentNotFoundError(LookupError):
    """No MDX document exists for a slug."""


class InsertionValidationError(ValueError):
    """Insertions were rejected before anything was written."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("Validation failed: " + "; ".join(self.errors))


class MDXDocumentStore:
    """Read, back up and rewrite MDX documents of one collection."""

    def __init__(self, collection_dir: Path | None = None, config: Settings | None = None):
        self.config = config or default_settings
        self.collection_dir = Path(collection_dir) if collection_dir else self.config.content.collection_dir

    @property
    def backup_dir(self) -> Path:
        return self.collection_dir / BACKUP_DIRNAME

    def path_for(self, slug: str) -> Path:
        if not slug or "/" in slug or "\\" in slug or slug.startswith("."):
            raise ValueError(f"Invalid slug: {slug!r}")
        return self.collection_dir / f"{slug}.mdx"

    def exists(self, slug: str) -> bool:
        return self.path_for(slug).exists()

    def read(self, slug: str) -> str:
        path = self.path_for(slug)
        if not path.exists():
            raise DocumentNotFoundError(f"Blog post not found: {slug}")
        return path.read_text(encoding="utf-8")

    def write(self, slug: str, content: str) -> Path:
        path = self.path_for(slug)
        path.write_text(content, encoding="utf-8")
        return path

    def list_posts(self) -> list[dict]:
        """Summary (slug, title, description, category) of every document."""
        if not self.collection_dir.exists():
            return []

        posts = []
        for path in sorted(self.collection_dir.glob("*.mdx")):
            frontmatter = parse_frontmatter(path.read_text(encoding="utf-8"))
            posts.append(
                {
                    "slug": path.stem,
                    "title": frontmatter.get("title") or "Untitled",
                    "description": frontmatter.get("description") or "",
                    "category": frontmatter.get("category") or "Uncategorized",
                }
            )
        return posts

    def create_backup(self, slug: str, content: str) -> Path:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = self.backup_dir / f"{slug}.backup-{int(time.time() * 1000)}.mdx"
        backup_path.write_text(content, encoding="utf-8")
        logger.info("Created backup: %s", backup_path)
        return backup_path

    def insert_images(self, slug: str, insertions: Sequence[ImageInsertion]) -> MDXUpdateResult:
        """Validate, back up, and apply image insertions to one document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            InsertionValidationError: If any insertion is rejected. Nothing
                is written in that case.
        """
        if not insertions:
            raise InsertionValidationError(["No insertions provided"])

        original = self.read(slug)

        validation = validate_insertions(
            original, insertions, image_prefix=self.config.images.public_prefix
        )
        if not validation.valid:
            raise InsertionValidationError(validation.errors)

        result = update_mdx_with_images(original, insertions)
        if not result.success:
            raise InsertionValidationError([result.error or "Failed to update content"])

        backup_path = self.create_backup(slug, original)
        self.write(slug, result.updated_content)
        result.backup_path = str(backup_path)

        logger.info("Updated %s.mdx with %d images", slug, result.insertions_made)
        return result
