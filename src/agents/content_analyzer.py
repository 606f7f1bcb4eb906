"""Content analyzer: splits MDX documents into sections that need images.

A section starts at a `##` or `###` heading and runs until the next one.
Sections already illustrated (an image right under the heading) and
sections with too little text are dropped from the analysis result.

Usage:
    frontmatter = parse_frontmatter(mdx)
    result = analyze_content(extract_body_content(mdx), frontmatter)
    for section in result.sections:
        intent = generate_image_intent(section, result.title, result.description)
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .prompts import build_image_intent_prompt

HEADING_RE = re.compile(r"^(#{2,3})\s+(.+)$")
IMAGE_PATH_RE = re.compile(r"!\[.*?\]\((.+?)\)")
FRONTMATTER_RE = re.compile(r"---\n([\s\S]+?)\n---")
FRONTMATTER_BLOCK_RE = re.compile(r"---\n[\s\S]+?\n---\n")
FRONTMATTER_KEY_RE = re.compile(r"^([A-Za-z0-9_]+):\s*(.*)$")
LIST_ITEM_RE = re.compile(r"^\s+- (.+)$")

CONTEXT_LINES = 3
MIN_SECTION_LENGTH = 50
INTENT_CONTENT_CHARS = 500
INTENT_CONTEXT_CHARS = 200


@dataclass
class SectionContext:
    """Neighbouring text used to keep generated images coherent."""
    preceding_content: str = ""
    following_content: str = ""


@dataclass
class ContentSection:
    """A heading-delimited span of a document."""
    title: str
    content: str
    heading_level: int
    needs_image: bool
    existing_image_path: Optional[str] = None
    context: SectionContext = field(default_factory=SectionContext)


@dataclass
class AnalysisMetadata:
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    date_published: Optional[str] = None


@dataclass
class ContentAnalysisResult:
    """Sections of one document that qualify for a new image."""
    title: str
    description: str
    sections: list[ContentSection] = field(default_factory=list)
    metadata: AnalysisMetadata = field(default_factory=AnalysisMetadata)


# ---------------------------------------------------------------------------
# Section scanning
# ---------------------------------------------------------------------------

@dataclass
class _OpenSection:
    title: str
    heading_level: int
    needs_image: bool
    existing_image_path: Optional[str]


class _SectionScanner:
    """Line-by-line state machine over a document.

    States: no open section (`_open is None`) or one open section. Every
    line goes through `feed`; a heading closes the open section and opens
    a new one, and `finish` closes whatever is open at end of input.
    """

    def __init__(self, lines: list[str]):
        self._lines = lines
        self._open: Optional[_OpenSection] = None
        self._buffer: list[str] = []
        self.sections: list[ContentSection] = []

    def feed(self, index: int) -> None:
        line = self._lines[index]
        match = HEADING_RE.match(line)
        if match:
            # following_content of the closed section starts after the new heading
            self._close(
                anchor=index,
                following_content=_following_context(self._lines, index, CONTEXT_LINES),
            )
            self._open = self._open_section(match, index)
            self._buffer = []
        elif not line.startswith("!["):
            self._buffer.append(line)

    def finish(self) -> list[ContentSection]:
        self._close(anchor=len(self._lines), following_content="")
        self._open = None
        return self.sections

    def _open_section(self, match: re.Match, index: int) -> _OpenSection:
        next_line = self._lines[index + 1] if index + 1 < len(self._lines) else None
        has_image = next_line is not None and "![" in next_line
        return _OpenSection(
            title=match.group(2).strip(),
            heading_level=len(match.group(1)),
            needs_image=not has_image,
            existing_image_path=extract_image_path(next_line) if has_image else None,
        )

    def _close(self, anchor: int, following_content: str) -> None:
        if self._open is None or not self._open.title:
            return
        self.sections.append(
            ContentSection(
                title=self._open.title,
                content="\n".join(self._buffer).strip(),
                heading_level=self._open.heading_level,
                needs_image=self._open.needs_image,
                existing_image_path=self._open.existing_image_path,
                context=SectionContext(
                    preceding_content=_preceding_context(
                        self._lines, anchor - len(self._buffer) - 1, CONTEXT_LINES
                    ),
                    following_content=following_content,
                ),
            )
        )


def _preceding_context(lines: list[str], start_idx: int, num_lines: int) -> str:
    start_idx = max(0, start_idx)
    start = max(0, start_idx - num_lines)
    return "\n".join(lines[start:start_idx]).strip()


def _following_context(lines: list[str], start_idx: int, num_lines: int) -> str:
    end = min(len(lines), start_idx + num_lines)
    return "\n".join(lines[start_idx + 1:end]).strip()


def extract_image_path(line: str) -> Optional[str]:
    """URL of the first Markdown image on a line."""
    match = IMAGE_PATH_RE.search(line)
    return match.group(1) if match else None


def split_sections(mdx_content: str) -> list[ContentSection]:
    """Every section of a document, illustrated or not."""
    lines = mdx_content.split("\n")
    scanner = _SectionScanner(lines)
    for index in range(len(lines)):
        scanner.feed(index)
    return scanner.finish()


def analyze_content(mdx_content: str, frontmatter: dict[str, Any]) -> ContentAnalysisResult:
    """Extract the sections of a document that need a new image.

    Args:
        mdx_content: Document body (frontmatter already removed).
        frontmatter: Parsed frontmatter of the same document.

    Returns:
        ContentAnalysisResult whose sections all lack an image and have
        more than MIN_SECTION_LENGTH characters of content.
    """
    sections = [
        s for s in split_sections(mdx_content)
        if s.needs_image and len(s.content) > MIN_SECTION_LENGTH
    ]

    return ContentAnalysisResult(
        title=frontmatter.get("title") or "Untitled",
        description=frontmatter.get("description") or "",
        sections=sections,
        metadata=AnalysisMetadata(
            category=frontmatter.get("category"),
            tags=frontmatter.get("tags"),
            date_published=frontmatter.get("datePublished"),
        ),
    )


def generate_image_intent(
    section: ContentSection,
    blog_title: str,
    blog_description: str,
) -> str:
    """Natural-language prompt for generating one section image."""
    return build_image_intent_prompt(
        section_title=section.title,
        blog_title=blog_title,
        blog_description=blog_description,
        content_summary=section.content[:INTENT_CONTENT_CHARS],
        previous_context=section.context.preceding_content[:INTENT_CONTEXT_CHARS],
    )


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------

def _coerce_scalar(value: str) -> Any:
    """Unquoted scalar: boolean, number, or the string itself."""
    if value in ("true", "false"):
        return value == "true"
    if "_" in value:
        return value
    try:
        return int(value)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def parse_frontmatter(mdx_content: str) -> dict[str, Any]:
    """Parse the project's frontmatter subset.

    Supported: `key: value` scalars (quoted strings, true/false, numbers,
    plain strings), block sequences (`key:` followed by indented `- item`
    lines) and indented continuation lines of a string value. Nested
    mappings, flow collections and anchors are not supported and will be
    mis-parsed; use a YAML parser for anything beyond this subset.
    """
    match = FRONTMATTER_RE.match(mdx_content)
    if not match:
        return {}

    frontmatter: dict[str, Any] = {}
    current_key = ""

    for line in match.group(1).split("\n"):
        if line.startswith("  "):
            current = frontmatter.get(current_key)
            if isinstance(current, list):
                item = LIST_ITEM_RE.match(line)
                if item:
                    current.append(item.group(1))
            elif isinstance(current, str):
                frontmatter[current_key] = f"{current} {line.strip()}"
            continue

        key_match = FRONTMATTER_KEY_RE.match(line)
        if not key_match:
            continue

        current_key = key_match.group(1)
        value = key_match.group(2).strip()

        if value == "":
            frontmatter[current_key] = []
        elif value.startswith(("'", '"')):
            frontmatter[current_key] = value[1:-1]
        else:
            frontmatter[current_key] = _coerce_scalar(value)

    return frontmatter


def extract_body_content(mdx_content: str) -> str:
    """Document body without its frontmatter block, trimmed.

    Documents without frontmatter are returned unchanged.
    """
    match = FRONTMATTER_BLOCK_RE.match(mdx_content)
    if match:
        return mdx_content[match.end():].strip()
    return mdx_content
