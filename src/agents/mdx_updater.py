"""MDX updater: places approved section images into an MDX document.

Placement, in order of preference, inside the section whose heading matches
the insertion's section title:
1. A line in the section already showing the same image is replaced.
2. An image directly under the heading is replaced.
3. After the intro paragraph.
4. Before the first list (sections of 5+ lines).
5. Right after the heading, skipping one blank line.

Updates are all-or-nothing: if any approved insertion has no matching
section, the document is returned unchanged with an error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

GENERATED_IMAGES_PREFIX = "/generated/images/"

HEADING_RE = re.compile(r"^(#{2,3})\s+(.+)$")
HEADING_START_RE = re.compile(r"^#{2,3}\s+")
ORDERED_ITEM_RE = re.compile(r"^\d+\.")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


class ImageLayout(str, Enum):
    FULL = "full"
    INSET = "inset"
    FLOAT_RIGHT = "float-right"
    GRID = "grid"


@dataclass
class ImageInsertion:
    """One image to place under a section heading."""
    section_title: str
    image_url: str
    image_path: str
    alt_text: str = ""
    approved: bool = True
    layout: Optional[ImageLayout] = None
    caption: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> ImageInsertion:
        """Build from a JSON object (camelCase or snake_case keys).

        Raises:
            ValueError: If `data` is not a mapping, `approved` is not a
                boolean, or `layout` is unknown.
        """
        if not isinstance(data, dict):
            raise ValueError(f"insertion must be a JSON object, got {data!r}")

        def pick(*keys, default=None):
            for key in keys:
                if key in data:
                    return data[key]
            return default

        approved = pick("approved", default=True)
        if not isinstance(approved, bool):
            raise ValueError(f"approved must be a boolean, got {approved!r}")

        layout = pick("layout")
        return cls(
            section_title=pick("sectionTitle", "section_title", default=""),
            image_url=pick("imageUrl", "image_url", default=""),
            image_path=pick("imagePath", "image_path", default=""),
            alt_text=pick("altText", "alt_text", default=""),
            approved=approved,
            layout=ImageLayout(layout) if layout else None,
            caption=pick("caption", default="") or "",
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["layout"] = self.layout.value if self.layout else None
        return data


@dataclass
class MDXUpdateResult:
    success: bool
    updated_content: str
    original_content: str
    insertions_made: int = 0
    error: Optional[str] = None
    backup_path: Optional[str] = None


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Section structure
# ---------------------------------------------------------------------------

@dataclass
class SectionStructure:
    """Shape of a section body, used to pick an insertion point."""
    first_paragraph_index: int
    first_list_index: int
    section_length: int

    @property
    def has_intro_paragraph(self) -> bool:
        return self.first_paragraph_index != -1

    @property
    def has_lists(self) -> bool:
        return self.first_list_index != -1

    @property
    def content_type(self) -> str:
        if self.section_length < 5:
            return "short"
        return "medium" if self.section_length < 15 else "long"


def _analyze_section(lines: Sequence[str], start: int, end: int) -> SectionStructure:
    first_paragraph = -1
    first_list = -1

    for i in range(start, end):
        line = lines[i].strip()
        if first_paragraph == -1 and line and not line.startswith(("#", "!", "-", "*")):
            first_paragraph = i
        if first_list == -1 and (
            line.startswith(("- ", "* ")) or ORDERED_ITEM_RE.match(line)
        ):
            first_list = i

    return SectionStructure(
        first_paragraph_index=first_paragraph,
        first_list_index=first_list,
        section_length=end - start,
    )


def _normalize_title(title: str) -> str:
    return _NON_ALNUM_RE.sub("", title.lower())


def _is_image_line(line: str) -> bool:
    return line.startswith(("![", "<BlogImage"))


def find_section_bounds(lines: Sequence[str], section_title: str) -> Optional[tuple[int, int]]:
    """(heading index, next heading index) of the first matching section.

    A heading matches when its normalized title equals or contains the
    normalized section title. Titles that normalize to nothing never match.
    """
    wanted = _normalize_title(section_title)
    if not wanted.strip():
        return None

    for i, line in enumerate(lines):
        match = HEADING_RE.match(line)
        if not match:
            continue
        candidate = _normalize_title(match.group(2).strip())
        if candidate == wanted or wanted in candidate:
            end = next(
                (j for j in range(i + 1, len(lines)) if HEADING_START_RE.match(lines[j])),
                len(lines),
            )
            return i, end
    return None


@dataclass
class _Target:
    index: int
    replace: bool


def _locate(lines: Sequence[str], section_title: str, image_path: str = "") -> Optional[_Target]:
    bounds = find_section_bounds(lines, section_title)
    if bounds is None:
        return None
    heading, end = bounds

    if image_path:
        for i in range(heading + 1, end):
            if _is_image_line(lines[i]) and image_path in lines[i]:
                return _Target(i, replace=True)

    if heading + 1 < len(lines) and _is_image_line(lines[heading + 1]):
        return _Target(heading + 1, replace=True)

    structure = _analyze_section(lines, heading + 1, end)

    if structure.has_intro_paragraph:
        pos = structure.first_paragraph_index
        for i in range(structure.first_paragraph_index, end):
            line = lines[i]
            if line.strip() == "" or line.startswith(("-", "*")) or ORDERED_ITEM_RE.match(line):
                pos = i
                break
            pos = i + 1
        while pos < len(lines) and lines[pos].strip() == "":
            pos += 1
        return _Target(pos, replace=False)

    if structure.has_lists and structure.content_type != "short":
        return _Target(structure.first_list_index, replace=False)

    pos = heading + 1
    if pos < len(lines) and lines[pos] == "":
        pos = heading + 2
    return _Target(pos, replace=False)


def find_insertion_point(lines: Sequence[str], section_title: str) -> int:
    """Line index where an image for the section goes, or -1 if not found."""
    target = _locate(lines, section_title)
    return target.index if target else -1


# ---------------------------------------------------------------------------
# Layout / rendering
# ---------------------------------------------------------------------------

def suggest_layout(section_title: str, section_content: str) -> ImageLayout:
    """Pick a layout from the section title and content length."""
    title = section_title.lower()
    content = section_content.lower()

    if any(k in title for k in ("introduction", "overview", "getting started", "quick answer")):
        return ImageLayout.FULL

    if len(content) < 300 or any(k in title for k in ("tip", "note", "example")):
        return ImageLayout.FLOAT_RIGHT

    if any(k in title for k in ("vs", "compare", "before", "after", "options")):
        return ImageLayout.GRID

    return ImageLayout.INSET


def create_image_line(insertion: ImageInsertion) -> str:
    """Markdown image for plain inset images, a BlogImage element otherwise."""
    alt_text = insertion.alt_text or insertion.section_title
    layout = ImageLayout(insertion.layout) if insertion.layout else ImageLayout.INSET
    caption = insertion.caption or ""

    if layout == ImageLayout.INSET and not caption:
        return f"![{alt_text}]({insertion.image_path})"

    props = [f'src="{insertion.image_path}"', f'alt="{alt_text}"']
    if layout != ImageLayout.INSET:
        props.append(f'layout="{layout.value}"')
    if caption:
        props.append(f'caption="{caption}"')
    return f"<BlogImage {' '.join(props)} />"


# ---------------------------------------------------------------------------
# Validation / update
# ---------------------------------------------------------------------------

def validate_insertions(
    mdx_content: str,
    insertions: Sequence[ImageInsertion],
    image_prefix: str = GENERATED_IMAGES_PREFIX,
) -> ValidationResult:
    """Check every approved insertion against the document. No side effects."""
    errors = []
    lines = mdx_content.split("\n")

    for insertion in (i for i in insertions if i.approved):
        if find_insertion_point(lines, insertion.section_title) == -1:
            errors.append(f'Section "{insertion.section_title}" not found in content')
        if not insertion.image_path or not insertion.image_path.startswith(image_prefix):
            errors.append(f'Invalid image path for section "{insertion.section_title}"')

    return ValidationResult(valid=not errors, errors=errors)


def update_mdx_with_images(
    mdx_content: str,
    insertions: Sequence[ImageInsertion],
) -> MDXUpdateResult:
    """Apply approved insertions to a document.

    Returns:
        MDXUpdateResult. On failure `updated_content` equals the input.
    """
    approved = [i for i in insertions if i.approved]

    def failure(error: str) -> MDXUpdateResult:
        return MDXUpdateResult(
            success=False,
            updated_content=mdx_content,
            original_content=mdx_content,
            error=error,
        )

    if not approved:
        return failure("No approved images to insert")

    lines = mdx_content.split("\n")
    missing = [i.section_title for i in approved if find_section_bounds(lines, i.section_title) is None]
    if missing:
        for title in missing:
            logger.warning('Section not found: "%s"', title)
        return failure("Sections not found: " + ", ".join(f'"{t}"' for t in missing))

    for insertion in approved:
        # Recomputed per insertion so earlier edits shift later targets
        target = _locate(lines, insertion.section_title, insertion.image_path)
        image_line = create_image_line(insertion)
        if target.replace:
            lines[target.index] = image_line
            logger.info('Replaced image in section: "%s"', insertion.section_title)
        else:
            lines[target.index:target.index] = [image_line, ""]
            logger.info('Inserted image in section: "%s"', insertion.section_title)

    return MDXUpdateResult(
        success=True,
        updated_content="\n".join(lines),
        original_content=mdx_content,
        insertions_made=len(approved),
    )
