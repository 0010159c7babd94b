"""
Favorites package: blob stores and the de-duplicated favorites list
"""

from .store import BlobStore, MemoryBlobStore, JsonFileBlobStore, FavoritesStore

__all__ = [
    'BlobStore',
    'MemoryBlobStore',
    'JsonFileBlobStore',
    'FavoritesStore',
]
