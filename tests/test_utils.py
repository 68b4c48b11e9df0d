"""
Tests for bmk/utils.py helpers.
"""
import json
import re

import pytest

from bmk.constants import TAG_COLORS
from bmk.utils import (
    StorageError,
    ensure_dir,
    generate_id,
    get_tag_color,
    parse_tags,
    read_json_file,
    to_file_name,
    write_json_file,
)


class TestGenerateId:
    """Test id generation."""

    def test_format(self):
        assert re.match(r"^\d{13,}-[a-z0-9]{9}$", generate_id())

    def test_unique(self):
        assert len({generate_id() for _ in range(100)}) == 100


class TestJsonFiles:
    """Test reading and writing data files."""

    def test_missing_file_returns_fallback(self, tmp_path):
        assert read_json_file(tmp_path / "missing.json", []) == []

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "nested" / "data.json"

        write_json_file(path, [{"title": "Café"}])

        assert read_json_file(path, None) == [{"title": "Café"}]
        assert "Café" in path.read_text(encoding="utf-8")

    def test_written_with_indent(self, tmp_path):
        path = tmp_path / "data.json"
        write_json_file(path, [1])
        assert path.read_text(encoding="utf-8") == json.dumps([1], indent=2)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[1,", encoding="utf-8")

        with pytest.raises(StorageError):
            read_json_file(path, [])

    def test_ensure_dir(self, tmp_path):
        target = tmp_path / "a" / "b"
        ensure_dir(target)
        ensure_dir(target)
        assert target.is_dir()


class TestTags:
    """Test tag helpers."""

    def test_tag_color_is_stable(self):
        assert get_tag_color("python") == get_tag_color("python")
        assert get_tag_color("python") in TAG_COLORS

    def test_tag_color_override(self):
        assert get_tag_color("python", {"python": "custom"}) == "custom"

    def test_empty_tag_color(self):
        assert get_tag_color("") not in TAG_COLORS

    def test_parse_tags(self):
        assert parse_tags(" web, demo ,,web,") == ["web", "demo"]
        assert parse_tags("") == []
        assert parse_tags(None) == []


class TestToFileName:
    """Test export file name slugs."""

    def test_slug(self):
        assert to_file_name("My Reading List!") == "my-reading-list"

    def test_empty_slug_falls_back(self):
        assert to_file_name("!!!") == "bookmarks"
