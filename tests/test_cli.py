"""
Tests for bmk/cli.py

Commands are run through ``main`` against a temporary data directory;
network access is replaced with in-memory fetchers.
"""
import json

import pytest
from unittest.mock import patch

from bmk import cli
from bmk.models import Bookmark, ExtractedMetadata
from bmk.storage import Storage


@pytest.fixture
def run(data_dir):
    """Run the CLI against the test data directory."""
    def run_cli(*args):
        cli.main(["--data-dir", str(data_dir)] + list(args))
    return run_cli


@pytest.fixture
def no_delay(monkeypatch):
    monkeypatch.setenv("BMK_IMPORT_DELAY", "0")


def read_store(data_dir):
    return Storage(str(data_dir))


class TestParser:
    """Test the grouped argument parser."""

    def test_command_groups(self):
        parser = cli.build_parser()
        for argv in (["bookmark", "list"], ["tag", "list"], ["collection", "list"],
                     ["import", "auto", "f.md"], ["export"], ["metadata", "https://a.com"],
                     ["config", "show"]):
            assert callable(parser.parse_args(argv).func)

    def test_group_requires_subcommand(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["bookmark"])

    def test_import_format_recorded(self):
        args = cli.build_parser().parse_args(["import", "html", "bookmarks.html"])
        assert args.format == "html"
        assert args.func is cli.cmd_import


class TestBookmarkCommands:
    """Test bookmark add/list/search/get/update/delete."""

    def test_add_without_fetch(self, run, data_dir, capsys):
        run("-q", "bookmark", "add", "https://example.com/?ref=hn", "--no-fetch",
            "--tags", "web,demo", "--title", "Example")

        bookmark = read_store(data_dir).get_bookmarks()[0]
        assert capsys.readouterr().out.strip() == bookmark.id
        assert bookmark.url == "https://example.com/"
        assert bookmark.title == "Example"
        assert bookmark.tags == ["web", "demo"]
        assert {t.name for t in read_store(data_dir).get_tags()} == {"web", "demo"}

    def test_add_fetches_metadata(self, run, data_dir, fake_fetcher):
        with patch("bmk.cli.default_fetcher", return_value=fake_fetcher):
            run("bookmark", "add", "https://example.com/page")

        assert read_store(data_dir).get_bookmarks()[0].title == "Title of https://example.com/page"

    def test_add_duplicate(self, run, populated_storage, capsys):
        run("bookmark", "add", "https://github.com?ref=x", "--no-fetch")

        assert "already exists" in capsys.readouterr().out
        assert len(populated_storage.get_bookmarks()) == 3

    def test_add_into_collection_by_name(self, run, populated_storage):
        run("bookmark", "add", "https://new.example.com", "--no-fetch", "--collection", "work")

        assert populated_storage.get_bookmarks()[0].collection_id == "work"

    def test_list_urls(self, run, populated_storage, capsys):
        run("-o", "urls", "bookmark", "list")

        assert capsys.readouterr().out.splitlines() == [
            "https://example.com/café", "https://github.com", "https://docs.python.org/3/",
        ]

    def test_list_filters(self, run, populated_storage, capsys):
        run("-o", "urls", "bookmark", "list", "--collection", "Work")
        assert capsys.readouterr().out.splitlines() == ["https://github.com"]

        run("-o", "urls", "bookmark", "list", "--tag", "python", "--sort", "oldest")
        assert capsys.readouterr().out.splitlines() == ["https://docs.python.org/3/"]

        run("-o", "urls", "bookmark", "list", "--sort", "oldest", "--limit", "1")
        assert capsys.readouterr().out.splitlines() == ["https://docs.python.org/3/"]

    def test_list_json(self, run, populated_storage, capsys):
        run("-o", "json", "bookmark", "list")

        data = json.loads(capsys.readouterr().out)
        assert {b["id"] for b in data} == {"b1", "b2", "b3"}

    def test_search_tag(self, run, populated_storage, capsys):
        run("-o", "urls", "bookmark", "search", "#git")
        assert capsys.readouterr().out.splitlines() == ["https://github.com"]

    def test_search_no_results(self, run, populated_storage, capsys):
        run("bookmark", "search", "nothing-matches-this")
        assert "No bookmarks match" in capsys.readouterr().out

    def test_get_json(self, run, populated_storage, capsys):
        run("-o", "json", "bookmark", "get", "b2")
        assert json.loads(capsys.readouterr().out)["collectionId"] == "work"

    def test_get_missing(self, run, populated_storage, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run("bookmark", "get", "nope")

        assert exc_info.value.code == 1
        assert "Error: Bookmark not found: nope" in capsys.readouterr().out

    def test_update_tags(self, run, populated_storage):
        run("bookmark", "update", "b1", "--add-tags", "reference", "--remove-tags", "python",
            "--title", "Py Docs")

        bookmark = populated_storage.get_bookmark("b1")
        assert bookmark.tags == ["documentation", "reference"]
        assert bookmark.title == "Py Docs"
        assert bookmark.updated_at > 1_700_000_000_000

    def test_update_url_strips_ref(self, run, populated_storage):
        run("bookmark", "update", "b2", "--url", "https://github.com/about?ref=nav")
        assert populated_storage.get_bookmark("b2").url == "https://github.com/about"

    def test_delete(self, run, populated_storage, capsys):
        run("-q", "bookmark", "delete", "b1", "b2", "missing", "-y")

        assert capsys.readouterr().out.strip() == "2"
        assert [b.id for b in populated_storage.get_bookmarks()] == ["b3"]

    def test_delete_declined(self, run, populated_storage):
        with patch("bmk.cli.Confirm.ask", return_value=False):
            run("bookmark", "delete", "b1")

        assert populated_storage.get_bookmark("b1") is not None

    def test_dedupe(self, run, populated_storage, capsys):
        populated_storage.add_bookmark(Bookmark(id="dup", url="http://www.github.com/?ref=x",
                                                created_at=1, updated_at=1))

        run("bookmark", "dedupe")

        assert "1 duplicates removed" in capsys.readouterr().out
        assert populated_storage.get_bookmark("dup") is None
        assert len(populated_storage.get_bookmarks()) == 3

    def test_dedupe_dry_run(self, run, populated_storage, capsys):
        populated_storage.add_bookmark(Bookmark(id="dup", url="http://github.com/", updated_at=1))

        run("bookmark", "dedupe", "--dry-run")

        assert "Duplicates" in capsys.readouterr().out
        assert populated_storage.get_bookmark("dup") is not None


class TestTagCommands:
    """Test tag list/add/remove."""

    def test_tag_add_and_remove(self, run, populated_storage, capsys):
        run("tag", "add", "favorite", "b1", "b2", "missing")
        assert "Added tag 'favorite' to 2 bookmark(s)" in capsys.readouterr().out
        assert "favorite" in populated_storage.get_bookmark("b2").tags

        run("tag", "remove", "favorite", "b2")
        assert "favorite" not in populated_storage.get_bookmark("b2").tags

    def test_tag_list_json(self, run, populated_storage, capsys):
        run("-o", "json", "tag", "list")

        counts = {t["tag"]: t["count"] for t in json.loads(capsys.readouterr().out)}
        assert counts == {"development": 1, "documentation": 1, "git": 1, "python": 1}


class TestCollectionCommands:
    """Test collection list/add/rename/delete."""

    def test_add_and_list(self, run, storage, capsys):
        run("-q", "collection", "add", "Reading List")
        collection_id = capsys.readouterr().out.strip()

        run("-o", "json", "collection", "list")
        collections = json.loads(capsys.readouterr().out)

        assert [c["name"] for c in collections] == ["All Bookmarks", "Reading List"]
        assert collections[1]["id"] == collection_id
        assert collections[1]["color"]

    def test_rename(self, run, populated_storage):
        run("collection", "rename", "Work", "Office")
        assert populated_storage.get_collection("work").name == "Office"

    def test_cannot_delete_default(self, run, populated_storage, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run("collection", "delete", "default", "-y")

        assert exc_info.value.code == 1
        assert "cannot be deleted" in capsys.readouterr().out

    def test_delete_cascades(self, run, populated_storage, capsys):
        run("collection", "delete", "work", "-y")

        assert "1 bookmark(s)" in capsys.readouterr().out
        assert populated_storage.get_bookmark("b2") is None

    def test_unknown_collection(self, run, populated_storage, capsys):
        with pytest.raises(SystemExit):
            run("bookmark", "list", "--collection", "ghost")
        assert "Collection not found: ghost" in capsys.readouterr().out


class TestImportExportCommands:
    """Test import and export commands."""

    def test_import_markdown_without_fetch(self, run, storage, tmp_path, capsys, no_delay):
        notes = tmp_path / "notes.md"
        notes.write_text("- [A](https://a.com)\n- https://b.com\n", encoding="utf-8")

        run("import", "markdown", str(notes), "--no-fetch")

        assert "Import complete: 2 imported, 0 skipped (duplicates), 0 failed." in capsys.readouterr().out
        assert {b.title for b in storage.get_bookmarks()} == {"https://a.com/", "https://b.com/"}

    def test_import_links_new_collection(self, run, storage, tmp_path, fake_fetcher, capsys, no_delay):
        links = tmp_path / "links.txt"
        links.write_text("https://a.com\nhttps://b.com\n", encoding="utf-8")

        with patch("bmk.importers.default_fetcher", return_value=fake_fetcher):
            run("import", "links", str(links), "--new-collection")

        assert "Added 2 link(s) to 'Collection 1'" in capsys.readouterr().out
        assert len(storage.get_collections()) == 2

    def test_export_markdown(self, run, populated_storage, tmp_path):
        out = tmp_path / "export.md"

        run("export", str(out))

        assert "- [GitHub](https://github.com)" in out.read_text(encoding="utf-8")

    def test_export_collection_default_name(self, run, populated_storage, tmp_path, capsys):
        run("export", "--format", "json", "--collection", "Work")

        data = json.loads((tmp_path / "work.json").read_text(encoding="utf-8"))
        assert [b["url"] for b in data] == ["https://github.com"]
        assert "Exported 1 link as json" in capsys.readouterr().out

    def test_export_nothing(self, run, storage, capsys):
        run("export")
        assert "No bookmarks to export." in capsys.readouterr().out


class TestOtherCommands:
    """Test metadata, config and error handling."""

    def test_metadata_json(self, run, capsys):
        metadata = ExtractedMetadata(title="Example", description="About",
                                     icon="https://a.com/favicon.ico")
        with patch("bmk.cli.fetch_metadata", return_value=metadata) as mock_fetch:
            run("-o", "json", "metadata", "https://a.com/")

        assert json.loads(capsys.readouterr().out)["title"] == "Example"
        assert mock_fetch.call_args[1]["timeout"] == 10

    def test_config_set_and_show(self, run, capsys):
        run("config", "set", "timeout", "30")
        run("config", "show", "timeout")

        assert capsys.readouterr().out.strip().endswith("30")

    def test_config_set_unknown_key(self, run, capsys):
        with pytest.raises(SystemExit):
            run("config", "set", "nope", "1")
        assert "Unknown config key: nope" in capsys.readouterr().out

    def test_keyboard_interrupt(self, run):
        with patch("bmk.cli.cmd_list", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                run("bookmark", "list")

        assert exc_info.value.code == 130
