import json
import os

import pytest

import bmk.config
import bmk.storage
from bmk.models import Bookmark, Collection, ExtractedMetadata
from bmk.storage import Storage


@pytest.fixture(autouse=True)
def clean_bmk_env(monkeypatch, tmp_path):
    """Isolate every test from real config files, BMK_* variables and globals."""
    for key in list(os.environ):
        if key.startswith("BMK_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("BMK_NO_PROGRESS", "1")

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)

    monkeypatch.setattr(bmk.config, "_config", None)
    monkeypatch.setattr(bmk.storage, "_storage", None)
    yield


@pytest.fixture
def data_dir(tmp_path):
    """Empty data directory for a Storage."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def storage(data_dir):
    return Storage(str(data_dir))


@pytest.fixture
def sample_bookmarks():
    """Sample bookmarks covering collections, tags and timestamps."""
    return [
        Bookmark(
            id="b1",
            url="https://docs.python.org/3/",
            title="Python Documentation",
            description="Official Python documentation",
            tags=["python", "documentation"],
            created_at=1_700_000_000_000,
            updated_at=1_700_000_000_000,
        ),
        Bookmark(
            id="b2",
            url="https://github.com",
            title="GitHub",
            description="Code hosting platform",
            tags=["development", "git"],
            collection_id="work",
            created_at=1_700_000_100_000,
            updated_at=1_700_000_100_000,
        ),
        Bookmark(
            id="b3",
            url="https://example.com/café",
            title="Café Guide",
            tags=[],
            created_at=1_700_000_200_000,
            updated_at=1_700_000_200_000,
        ),
    ]


@pytest.fixture
def work_collection():
    return Collection(id="work", name="Work", color="bg-blue-500",
                      created_at=1_700_000_000_000, updated_at=1_700_000_000_000)


@pytest.fixture
def populated_storage(storage, sample_bookmarks, work_collection):
    """Storage holding the sample bookmarks and a 'Work' collection."""
    storage.add_collection(work_collection)
    storage.save_bookmarks(sample_bookmarks)
    storage.sync_tags()
    return storage


@pytest.fixture
def fake_fetcher():
    """Metadata fetcher that never touches the network."""
    def fetch(url):
        return ExtractedMetadata(title=f"Title of {url}", description="desc",
                                 icon=f"{url.rstrip('/')}/favicon.ico")
    return fetch


@pytest.fixture
def write_json():
    def write(path, data):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        return path
    return write
