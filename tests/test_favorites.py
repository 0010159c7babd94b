"""Test favorites persistence"""

import json

import pytest

from conftest import make_track
from songpeek.favorites.store import BlobStore, FavoritesStore, JsonFileBlobStore, MemoryBlobStore


class BrokenBlobStore(BlobStore):
    """Blob store whose writes always fail"""

    async def get(self, key):
        return None

    async def set(self, key, blob):
        raise OSError("disk full")


class TestFavoritesStore:
    """Test the de-duplicated favorites list"""

    @pytest.mark.asyncio
    async def test_add_is_deduplicated(self):
        store = FavoritesStore(MemoryBlobStore())
        await store.load()

        assert await store.add(make_track("a")) is True
        assert await store.add(make_track("a", title="Same id, other title")) is False
        assert [track.id for track in store.all()] == ["a"]

    @pytest.mark.asyncio
    async def test_add_then_remove_restores_order(self):
        store = FavoritesStore(MemoryBlobStore())
        for track_id in ("a", "b", "c"):
            await store.add(make_track(track_id))

        await store.add(make_track("d"))
        assert await store.remove("d") is True
        assert [track.id for track in store.all()] == ["a", "b", "c"]

        assert await store.remove("b") is True
        assert [track.id for track in store.all()] == ["a", "c"]
        assert await store.remove("missing") is False

    @pytest.mark.asyncio
    async def test_toggle(self):
        store = FavoritesStore(MemoryBlobStore())
        track = make_track("a")

        assert await store.toggle(track) is True
        assert store.contains("a")
        assert await store.toggle(track) is False
        assert not store.contains("a")

    @pytest.mark.asyncio
    async def test_persisted_across_instances(self):
        blobs = MemoryBlobStore()
        first = FavoritesStore(blobs, key="favs")
        await first.add(make_track("a"))
        await first.add(make_track("b"))

        second = FavoritesStore(blobs, key="favs")
        loaded = await second.load()

        assert [track.id for track in loaded] == ["a", "b"]
        assert loaded[0] == make_track("a")

    @pytest.mark.asyncio
    async def test_unreadable_blob_starts_empty(self):
        store = FavoritesStore(MemoryBlobStore({"favorites": "{not json"}))
        assert await store.load() == []

    @pytest.mark.asyncio
    async def test_malformed_and_duplicate_entries_skipped(self):
        entries = [make_track("a").to_dict(), {"title": "no id"}, make_track("a").to_dict(), make_track("b").to_dict()]
        store = FavoritesStore(MemoryBlobStore({"favorites": json.dumps(entries)}))

        loaded = await store.load()

        assert [track.id for track in loaded] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_save_failure_is_not_fatal(self):
        """Test that a failing blob store keeps the in-memory list"""
        store = FavoritesStore(BrokenBlobStore())
        await store.load()

        assert await store.add(make_track("a")) is True
        assert store.contains("a")


class TestJsonFileBlobStore:
    """Test the file-backed blob store"""

    @pytest.mark.asyncio
    async def test_missing_file_reads_none(self, tmp_path):
        blobs = JsonFileBlobStore(tmp_path / "favorites.json")
        assert await blobs.get("favorites") is None

    @pytest.mark.asyncio
    async def test_keys_written_side_by_side(self, tmp_path):
        path = tmp_path / "nested" / "favorites.json"
        blobs = JsonFileBlobStore(path)

        await blobs.set("favorites", "[]")
        await blobs.set("other", "x")

        assert await blobs.get("favorites") == "[]"
        assert json.loads(path.read_text(encoding="utf-8")) == {"favorites": "[]", "other": "x"}

    @pytest.mark.asyncio
    async def test_favorites_on_disk(self, tmp_path):
        path = tmp_path / "favorites.json"
        await FavoritesStore(JsonFileBlobStore(path)).add(make_track("a"))

        loaded = await FavoritesStore(JsonFileBlobStore(path)).load()

        assert [track.id for track in loaded] == ["a"]
