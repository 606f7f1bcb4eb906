"""Shared test fixtures for the content engine."""

import copy
import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import Settings


STATIC_POSTS = [
    {
        "slug": "whatsapp-business-guide-when-to-use",
        "slugAsParams": "whatsapp-business-guide-when-to-use",
        "title": "WhatsApp Business Guide: When to Use",
        "description": "Complete guide to WhatsApp Business",
        "body": "# WhatsApp Business Guide\n\nComplete content here...",
        "content": "# WhatsApp Business Guide\n\nComplete content here...",
        "datePublished": "2024-01-15",
        "published": True,
        "draft": False,
        "featured": True,
        "category": "Social Media",
        "keywords": ["whatsapp", "business", "guide"],
        "tags": ["whatsapp", "marketing"],
        "author": {"name": "OmniSignalAI", "url": "https://omnisignalai.com"},
        "readTime": 10,
    },
    {
        "slug": "ai-generated-content-example",
        "slugAsParams": "ai-generated-content-example",
        "title": "AI Generated Content Example",
        "description": "Example of AI-generated blog content",
        "body": "# AI Content\n\nExample content...",
        "content": "# AI Content\n\nExample content...",
        "datePublished": "2024-01-20",
        "published": True,
        "draft": False,
        "featured": False,
        "category": "AI",
        "keywords": ["ai", "content"],
        "tags": ["ai", "automation"],
        "layout": "builder",
        "blocks": [{"type": "hero", "content": "Test"}],
        "author": {"name": "OmniSignalAI", "url": "https://omnisignalai.com"},
        "readTime": 7,
    },
    {
        "slug": "draft-post",
        "slugAsParams": "draft-post",
        "title": "Draft Post",
        "description": "This is a draft",
        "body": "# Draft\n\nDraft content...",
        "content": "# Draft\n\nDraft content...",
        "datePublished": "2024-01-25",
        "published": False,
        "draft": True,
        "category": "General",
        "author": {"name": "OmniSignalAI", "url": "https://omnisignalai.com"},
        "readTime": 5,
    },
]

LONG_PARAGRAPH = (
    "This paragraph is long enough to qualify the section for a generated "
    "header image in the analyzer."
)

SAMPLE_MDX = f"""---
title: "Social Media Scheduling Guide"
description: "How to plan a month of posts"
category: Guides
datePublished: 2024-03-01
keywords:
  - scheduling
  - social media
featured: true
---

## Introduction

{LONG_PARAGRAPH}

## Planning Your Calendar
![Calendar](/generated/images/calendar.png)

{LONG_PARAGRAPH}

## Tools Compared

- Buffer
- Hootsuite
- Later
"""


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def static_posts() -> list[dict]:
    """Return a fresh copy of the sample static index."""
    return copy.deepcopy(STATIC_POSTS)


@pytest.fixture
def sample_mdx() -> str:
    return SAMPLE_MDX


@pytest.fixture
def blog_dir(tmp_path) -> Path:
    """Collection directory containing one sample post."""
    directory = tmp_path / "content" / "blog"
    directory.mkdir(parents=True)
    (directory / "scheduling-guide.mdx").write_text(SAMPLE_MDX, encoding="utf-8")
    return directory


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at temporary directories."""
    config = Settings()
    config.content.content_dir = str(tmp_path / "content")
    config.content.static_index_path = str(tmp_path / "data" / "blog.json")
    config.images.output_dir = str(tmp_path / "images")
    return config
