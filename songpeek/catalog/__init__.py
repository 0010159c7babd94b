"""
Catalog package: track model and search backends (Spotify, YouTube)
"""

from .models import Track
from .client import (
    CatalogSearchClient,
    SpotifyCatalogClient,
    YouTubeCatalogClient,
    create_catalog_client
)

__all__ = [
    'Track',
    'CatalogSearchClient',
    'SpotifyCatalogClient',
    'YouTubeCatalogClient',
    'create_catalog_client',
]
