"""
Tests for bmk/models.py record types.
"""
from bmk.constants import DEFAULT_COLLECTION_ID
from bmk.models import Bookmark, Collection, ExtractedMetadata, TagDefinition, now_ms


class TestBookmark:
    """Test the Bookmark dataclass."""

    def test_defaults(self):
        bookmark = Bookmark(id="1", url="https://a.com/")

        assert bookmark.title == ""
        assert bookmark.description == ""
        assert bookmark.tags == []
        assert bookmark.collection_id == DEFAULT_COLLECTION_ID
        assert bookmark.in_default_collection
        assert bookmark.created_at is None

    def test_from_dict_tolerates_missing_fields(self):
        bookmark = Bookmark.from_dict({"id": 7, "url": "https://a.com/", "title": None})

        assert bookmark.id == "7"
        assert bookmark.title == ""
        assert bookmark.collection_id == DEFAULT_COLLECTION_ID
        assert bookmark.updated_at is None

    def test_from_dict_coerces_bad_values(self):
        """Null URLs become empty strings and non-numeric timestamps count as missing."""
        bookmark = Bookmark.from_dict({"id": None, "url": None, "createdAt": "yesterday",
                                       "updatedAt": True, "tags": ["a", None, 3]})

        assert bookmark.id == ""
        assert bookmark.url == ""
        assert bookmark.created_at is None
        assert bookmark.updated_at is None
        assert bookmark.tags == ["a", "3"]

    def test_from_dict_float_timestamp(self):
        assert Bookmark.from_dict({"url": "https://a.com/", "updatedAt": 1.5e12}).updated_at == 1_500_000_000_000

    def test_dict_round_trip(self):
        data = {
            "id": "1",
            "url": "https://a.com/",
            "title": "A",
            "description": "About A",
            "tags": ["x"],
            "collectionId": "work",
            "createdAt": 1,
            "updatedAt": 2,
            "icon": "https://a.com/favicon.ico",
        }
        assert Bookmark.from_dict(data).to_dict() == data

    def test_copy_does_not_share_tags(self):
        original = Bookmark(id="1", url="https://a.com/", tags=["x"])

        copy = original.copy(url="https://b.com/")
        copy.tags.append("y")

        assert original.tags == ["x"]
        assert copy.url == "https://b.com/"

    def test_repr(self):
        assert "Bookmark(id=1" in repr(Bookmark(id="1", url="https://a.com/", title="A"))


class TestOtherModels:
    """Test Collection, TagDefinition and ExtractedMetadata."""

    def test_collection_round_trip(self):
        collection = Collection(id="work", name="Work", color="bg-blue-500", created_at=1, updated_at=2)

        restored = Collection.from_dict(collection.to_dict())

        assert restored == collection
        assert not restored.is_default

    def test_tag_definition(self):
        tag = TagDefinition.from_dict({"name": "python", "color": "c"})
        assert tag.to_dict() == {"name": "python", "color": "c"}

    def test_metadata_to_dict(self):
        metadata = ExtractedMetadata(title="T")
        assert metadata.to_dict() == {"title": "T", "description": "", "icon": None, "image": None}

    def test_now_ms_is_milliseconds(self):
        assert now_ms() > 1_600_000_000_000
