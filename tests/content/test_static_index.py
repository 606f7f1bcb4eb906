"""Tests for static index compilation and loading."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from src.content.static_index import (
    build_static_index,
    count_words,
    load_static_index,
    save_static_index,
    split_frontmatter,
)


POST = """---
title: "Scheduling Guide"
description: "Plan a month of posts"
datePublished: 2024-03-01
keywords: [scheduling, social]
category: Guides
faq:
  - q: "How often?"
    a: "Daily."
---

## Intro

Some **bold** words here.
"""


def _write(root, relative: str, text: str = POST):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestSplitFrontmatter:
    def test_nested_yaml(self):
        data, body = split_frontmatter(POST)
        assert data["faq"] == [{"q": "How often?", "a": "Daily."}]
        assert body.lstrip().startswith("## Intro")

    def test_no_frontmatter(self):
        assert split_frontmatter("Body only") == ({}, "Body only")

    def test_non_mapping_rejected(self):
        with pytest.raises(ValueError):
            split_frontmatter("---\n- a\n- b\n---\nBody")


def test_count_words_ignores_markup():
    assert count_words("## Intro\n\nSome **bold** words [here](http://x)") == 5


class TestBuildStaticIndex:
    def test_compiles_records(self, tmp_path):
        _write(tmp_path, "blog/scheduling-guide.mdx")

        records = build_static_index(tmp_path)

        assert len(records) == 1
        record = records[0]
        assert record["slug"] == "blog/scheduling-guide"
        assert record["slugAsParams"] == "scheduling-guide"
        assert record["permalink"] == "/blog/scheduling-guide"
        assert record["datePublished"] == "2024-03-01"
        assert record["readTime"] == 1
        assert record["schema"] == "Article"
        assert record["author"]["name"] == "OmniSignalAI Team"
        assert record["draft"] is False
        assert record["published"] is True
        assert record["body"].startswith("## Intro")

    def test_read_time_from_word_count(self, tmp_path):
        _write(tmp_path, "blog/long.mdx", POST + "\n" + "word " * 450)
        assert build_static_index(tmp_path)[0]["readTime"] == 3

    def test_explicit_read_time_kept(self, tmp_path):
        _write(tmp_path, "blog/timed.mdx", POST.replace("category: Guides", "category: Guides\nreadTime: 9"))
        assert build_static_index(tmp_path)[0]["readTime"] == 9

    def test_backups_and_other_files_skipped(self, tmp_path):
        _write(tmp_path, "blog/a.mdx")
        _write(tmp_path, "blog/.backups/a.backup-1.mdx")
        _write(tmp_path, "blog/notes.txt", "ignore me")

        assert [r["slug"] for r in build_static_index(tmp_path)] == ["blog/a"]

    def test_invalid_frontmatter_raises(self, tmp_path):
        _write(tmp_path, "blog/bad.mdx", POST.replace("category: Guides", "category: Gossip"))
        with pytest.raises(ValidationError):
            build_static_index(tmp_path)

    def test_missing_collection(self, tmp_path):
        assert build_static_index(tmp_path) == []


class TestSaveLoad:
    def test_round_trip(self, tmp_path, static_posts):
        path = save_static_index(static_posts, tmp_path / "out" / "blog.json")
        assert load_static_index(path) == static_posts

    def test_missing_index_is_empty(self, tmp_path):
        assert load_static_index(tmp_path / "missing.json") == []

    def test_non_list_rejected(self, tmp_path):
        path = tmp_path / "blog.json"
        path.write_text(json.dumps({"posts": []}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_static_index(path)
