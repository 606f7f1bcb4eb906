"""Static content index: offline compilation of MDX files into post records.

The build step reads every `.mdx` file of a collection, validates its
frontmatter, adds computed fields (slug, slugAsParams, readTime, permalink)
and writes one JSON list. At request time the resolver only loads that list;
it never touches the MDX files.

Usage:
    records = build_static_index(CONTENT_DIR)
    save_static_index(records, STATIC_INDEX_PATH)
    posts = load_static_index(STATIC_INDEX_PATH)
"""

from __future__ import annotations

import json
import math
import re
from datetime import date
from pathlib import Path
from typing import Literal, Optional

import markdown as md
import yaml
from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field

from src.common.logging import setup_logging

from .models import SchemaKind

logger = setup_logging(module_name="content.static_index")

WORDS_PER_MINUTE = 200

_FRONTMATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---\r?\n?", re.DOTALL)


# ---------------------------------------------------------------------------
# Frontmatter schema
# ---------------------------------------------------------------------------

class StaticAuthor(BaseModel):
    name: str
    url: str
    image: Optional[str] = None


class FAQEntry(BaseModel):
    q: str
    a: str


class HowToStep(BaseModel):
    name: str
    description: str
    image: Optional[str] = None


class StaticOpenGraph(BaseModel):
    image: str
    imageAlt: str


class StaticPostFrontmatter(BaseModel):
    """Frontmatter contract for authored blog posts."""
    model_config = ConfigDict(extra="allow")

    title: str = Field(max_length=100)
    description: str = Field(max_length=200)
    datePublished: date
    dateModified: Optional[date] = None

    author: StaticAuthor = Field(
        default_factory=lambda: StaticAuthor(
            name="OmniSignalAI Team", url="https://omnisignalai.com"
        )
    )

    keywords: list[str]
    category: Literal["Guides", "Case Studies", "Research", "Technical", "News"]
    tags: Optional[list[str]] = None
    readTime: Optional[int] = Field(default=None, gt=0)
    featured: bool = False
    thumbnail: Optional[str] = None
    schema_kind: SchemaKind = Field(default=SchemaKind.ARTICLE, alias="schema")
    faq: Optional[list[FAQEntry]] = None
    steps: Optional[list[HowToStep]] = None
    og: Optional[StaticOpenGraph] = None
    related: Optional[list[str]] = None
    draft: bool = False
    published: bool = True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def split_frontmatter(text: str) -> tuple[dict, str]:
    """Split an MDX document into (frontmatter dict, body).

    Uses a full YAML parser: authored frontmatter may contain nested
    mappings (author, og) and lists of mappings (faq, steps).
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        raise ValueError("Frontmatter must be a YAML mapping")
    return data, text[match.end():]


def count_words(markdown_text: str) -> int:
    """Count words of rendered Markdown/MDX (tags and JSX stripped)."""
    html = md.markdown(markdown_text, extensions=["tables", "fenced_code"])
    soup = BeautifulSoup(html, "lxml")
    text = soup.get_text(separator=" ", strip=True)
    return len(text.split())


def _slug_for(path: Path, content_root: Path) -> str:
    """Path relative to the content root, without extension ("blog/my-post")."""
    return path.relative_to(content_root).with_suffix("").as_posix()


def compile_document(path: Path, content_root: Path) -> dict:
    """Compile one MDX file into a static post record.

    Raises:
        pydantic.ValidationError: If the frontmatter violates the contract.
    """
    text = path.read_text(encoding="utf-8")
    raw_frontmatter, body = split_frontmatter(text)
    frontmatter = StaticPostFrontmatter.model_validate(raw_frontmatter)

    slug = _slug_for(path, content_root)
    slug_as_params = "/".join(slug.split("/")[1:])
    body = body.strip()

    record = frontmatter.model_dump(mode="json", by_alias=True, exclude_none=True)
    record.update(
        {
            "slug": slug,
            "slugAsParams": slug_as_params,
            "body": body,
            "readTime": frontmatter.readTime
            or math.ceil(count_words(body) / WORDS_PER_MINUTE),
            "permalink": f"/blog/{slug_as_params}",
        }
    )
    return record


# ---------------------------------------------------------------------------
# Build / load
# ---------------------------------------------------------------------------

def build_static_index(content_root: Path, collection: str = "blog") -> list[dict]:
    """Compile every MDX document of a collection into index records.

    Hidden directories (e.g. `.backups`) are skipped. Records are ordered by
    file path so the index order is stable between builds.
    """
    collection_dir = content_root / collection
    if not collection_dir.exists():
        logger.warning("Collection directory not found: %s", collection_dir)
        return []

    records = []
    for path in sorted(collection_dir.rglob("*.mdx")):
        relative = path.relative_to(collection_dir)
        if any(part.startswith(".") for part in relative.parts):
            continue
        records.append(compile_document(path, content_root))

    logger.info("Compiled %d documents from %s", len(records), collection_dir)
    return records


def save_static_index(records: list[dict], index_path: Path) -> Path:
    """Write the index as a JSON list."""
    index_path.parent.mkdir(parents=True, exist_ok=True)
    with open(index_path, "w", encoding="utf-8") as f:
        json.dump(records, f, ensure_ascii=False, indent=2)
    logger.info("Saved static index (%d posts) to %s", len(records), index_path)
    return index_path


def load_static_index(index_path: Path) -> list[dict]:
    """Load the prebuilt index. A missing index means no static content."""
    if not index_path.exists():
        logger.warning("Static index not found: %s", index_path)
        return []
    with open(index_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Static index must be a JSON list: {index_path}")
    return data
