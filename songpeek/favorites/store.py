"""
Favorites persistence

Favorites are an ordered list of Track records with set semantics over
Track.id. The list is stored as one JSON blob under a single key in an
async key-value BlobStore; the blob format is private to this module.

Storage failures are never fatal: a failed load starts from an empty list
and a failed save is logged and ignored, so the in-memory list stays
authoritative for the rest of the session.
"""

import asyncio
import json
from pathlib import Path
from typing import Dict, List, Optional

from ..catalog.models import Track
from ..core.exceptions import UpstreamError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class BlobStore:
    """Async key-value store of string blobs"""

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, blob: str) -> None:
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    """In-process blob store, mostly for tests and ephemeral sessions"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, blob: str) -> None:
        self._data[key] = blob


class JsonFileBlobStore(BlobStore):
    """
    Blob store backed by one JSON object on disk

    Each key maps to a string blob. Writes go to a temporary file that is
    then renamed over the original. File I/O runs in a worker thread so the
    event loop never blocks on disk.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def _write(self, key: str, blob: str) -> None:
        data = self._read_all()
        data[key] = blob
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, blob: str) -> None:
        await asyncio.to_thread(self._write, key, blob)


class FavoritesStore:
    """
    Ordered, de-duplicated favorites list persisted through a BlobStore

    Call load() once before use; every mutation persists the whole list.
    """

    def __init__(self, blob_store: BlobStore, key: str = "favorites"):
        self.blob_store = blob_store
        self.key = key
        self._tracks: List[Track] = []
        self._loaded = False

    async def load(self) -> List[Track]:
        """
        Load favorites from the blob store

        Unreadable blobs and malformed entries are logged and skipped.

        Returns:
            The loaded favorites in stored order
        """
        tracks: List[Track] = []
        try:
            blob = await self.blob_store.get(self.key)
            if blob:
                entries = json.loads(blob)
                if not isinstance(entries, list):
                    raise ValueError("favorites blob is not a list")
                seen = set()
                for entry in entries:
                    try:
                        track = Track.from_dict(entry)
                    except UpstreamError as e:
                        logger.warning(f"Skipping malformed favorite: {e}")
                        continue
                    if track.id not in seen:
                        seen.add(track.id)
                        tracks.append(track)
        except Exception as e:
            logger.error(f"Failed to load favorites: {e}")
            tracks = []

        self._tracks = tracks
        self._loaded = True
        logger.debug(f"Loaded {len(tracks)} favorites")
        return list(self._tracks)

    async def _save(self) -> None:
        blob = json.dumps([track.to_dict() for track in self._tracks], ensure_ascii=False)
        try:
            await self.blob_store.set(self.key, blob)
        except Exception as e:
            logger.error(f"Failed to save favorites: {e}")

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    def all(self) -> List[Track]:
        """Snapshot of the current favorites in order"""
        return list(self._tracks)

    def contains(self, track_id: str) -> bool:
        return any(track.id == track_id for track in self._tracks)

    async def add(self, track: Track) -> bool:
        """
        Append a track unless one with the same id is already present

        Returns:
            True if the track was added
        """
        await self._ensure_loaded()
        if self.contains(track.id):
            return False
        self._tracks.append(track)
        await self._save()
        return True

    async def remove(self, track_id: str) -> bool:
        """
        Remove the track with the given id, keeping the order of the others

        Returns:
            True if a track was removed
        """
        await self._ensure_loaded()
        remaining = [track for track in self._tracks if track.id != track_id]
        if len(remaining) == len(self._tracks):
            return False
        self._tracks = remaining
        await self._save()
        return True

    async def toggle(self, track: Track) -> bool:
        """
        Add the track if absent, remove it if present

        Returns:
            True if the track is a favorite after the call
        """
        await self._ensure_loaded()
        if self.contains(track.id):
            await self.remove(track.id)
            return False
        await self.add(track)
        return True
