"""
Catalog search clients

Two interchangeable backends turn a free-text query into a list of Track
records:

1. **SpotifyCatalogClient**: exchanges the application's client credentials
   for a bearer token and then calls /v1/search. The token is requested
   again for every search; nothing is cached between searches.

2. **YouTubeCatalogClient**: calls /search for video ids, then /videos with
   part=status,snippet and keeps only the videos whose status marks them as
   embeddable. Non-embeddable results can never be played back, so they are
   dropped here, before anything reaches the playback manager.

Both validate the query before touching the network and translate every
upstream failure into UpstreamError. Individually malformed records are
skipped; a response that is malformed as a whole is rejected.

Usage:
    async with create_catalog_client() as catalog:
        tracks = await catalog.search("yoasobi idol")
"""

from typing import Any, Dict, List, Optional

import aiohttp

from ..config.settings import get_settings, Settings
from ..core.exceptions import ConfigError, UpstreamError, ValidationError
from ..core.http import JsonHttpClient, expect_object
from ..utils.helpers import collapse_whitespace
from ..utils.logger import get_logger
from .models import Track, decode_tracks


class CatalogSearchClient(JsonHttpClient):
    """
    Base class for catalog backends

    Subclasses implement _search(); search() handles validation and logging.
    """

    service = "catalog"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        limit: int = 10,
        timeout: float = 15.0,
        rate_limit: int = 5,
        user_agent: str = "songpeek/1.0"
    ):
        super().__init__(session=session, timeout=timeout, rate_limit=rate_limit, user_agent=user_agent)
        self.logger = get_logger(__name__)
        self.limit = limit

    async def search(self, query: str, limit: Optional[int] = None) -> List[Track]:
        """
        Search the catalog

        Args:
            query: Free-text query; surrounding whitespace is ignored
            limit: Maximum number of results requested upstream

        Returns:
            Tracks in upstream relevance order (possibly empty)

        Raises:
            ValidationError: If the query is blank
            UpstreamError: If the backend fails or answers with an unusable payload
        """
        cleaned = collapse_whitespace(query)
        if not cleaned:
            raise ValidationError("Search query must not be empty", details={'query': query})

        effective_limit = limit or self.limit
        self.logger.debug(f"{self.service} search: '{cleaned}' (limit {effective_limit})")

        tracks = await self._search(cleaned, effective_limit)

        self.logger.info(f"{self.service} search '{cleaned}' returned {len(tracks)} tracks")
        return tracks

    async def _search(self, query: str, limit: int) -> List[Track]:
        raise NotImplementedError


class SpotifyCatalogClient(CatalogSearchClient):
    """
    Spotify Web API search using the client-credentials flow

    Attributes:
        client_id: Spotify application client id
        client_secret: Spotify application client secret
        market: Optional ISO country code; limits results to playable tracks there
    """

    service = "spotify"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str = "https://accounts.spotify.com/api/token",
        api_url: str = "https://api.spotify.com/v1",
        market: str = "",
        **kwargs
    ):
        super().__init__(**kwargs)
        if not client_id or not client_secret:
            raise ConfigError(
                "Spotify client_id and client_secret are required",
                details={'setting': 'catalog.spotify_client_id / catalog.spotify_client_secret'}
            )
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.api_url = api_url.rstrip('/')
        self.market = market

    async def fetch_token(self) -> str:
        """
        Exchange client credentials for a bearer token

        Returns:
            Access token string

        Raises:
            UpstreamError: If the exchange fails or the response has no token
        """
        payload = await self.post_json(
            self.token_url,
            data={'grant_type': 'client_credentials'},
            auth=aiohttp.BasicAuth(self.client_id, self.client_secret)
        )
        payload = expect_object(payload, self.service, "token response")

        token = payload.get('access_token')
        if not isinstance(token, str) or not token:
            raise UpstreamError(
                "Spotify token response has no access_token",
                details={'keys': sorted(payload.keys())},
                service=self.service
            )
        return token

    async def _search(self, query: str, limit: int) -> List[Track]:
        token = await self.fetch_token()

        params: Dict[str, Any] = {'q': query, 'type': 'track', 'limit': min(max(limit, 1), 50)}
        if self.market:
            params['market'] = self.market

        payload = await self.get_json(
            f"{self.api_url}/search",
            params=params,
            headers={'Authorization': f"Bearer {token}"}
        )
        payload = expect_object(payload, self.service, "search response")

        tracks_block = payload.get('tracks')
        if not isinstance(tracks_block, dict) or not isinstance(tracks_block.get('items'), list):
            raise UpstreamError(
                "Spotify search response has no tracks.items list",
                service=self.service
            )

        return decode_tracks([item for item in tracks_block['items'] if item], Track.from_spotify_data)


class YouTubeCatalogClient(CatalogSearchClient):
    """
    YouTube Data API search restricted to embeddable videos

    Attributes:
        api_key: YouTube Data API key
    """

    service = "youtube"

    def __init__(self, api_key: str, api_url: str = "https://www.googleapis.com/youtube/v3", **kwargs):
        super().__init__(**kwargs)
        if not api_key:
            raise ConfigError("YouTube API key is required", details={'setting': 'catalog.youtube_api_key'})
        self.api_key = api_key
        self.api_url = api_url.rstrip('/')

    async def _search(self, query: str, limit: int) -> List[Track]:
        payload = await self.get_json(
            f"{self.api_url}/search",
            params={
                'part': 'snippet',
                'type': 'video',
                'maxResults': min(max(limit, 1), 50),
                'q': query,
                'key': self.api_key,
            }
        )
        payload = expect_object(payload, self.service, "search response")

        video_ids = []
        for item in payload.get('items') or []:
            video_id = (item.get('id') or {}).get('videoId') if isinstance(item, dict) else None
            if video_id:
                video_ids.append(video_id)

        if not video_ids:
            return []

        details = await self.get_json(
            f"{self.api_url}/videos",
            params={'part': 'status,snippet', 'id': ','.join(video_ids), 'key': self.api_key}
        )
        details = expect_object(details, self.service, "videos response")

        items = details.get('items')
        if not isinstance(items, list):
            raise UpstreamError("YouTube videos response has no items list", service=self.service)

        embeddable = [
            item for item in items
            if isinstance(item, dict) and (item.get('status') or {}).get('embeddable') is True
        ]
        skipped = len(items) - len(embeddable)
        if skipped:
            self.logger.debug(f"Dropped {skipped} non-embeddable videos")

        return decode_tracks(embeddable, Track.from_youtube_data)


def create_catalog_client(
    settings: Optional[Settings] = None,
    backend: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None
) -> CatalogSearchClient:
    """
    Build the catalog client selected in settings

    Args:
        settings: Settings to read from (defaults to the global instance)
        backend: Override for settings.catalog.backend
        session: Optional shared aiohttp session

    Returns:
        Configured catalog client

    Raises:
        ConfigError: For unknown backends or missing credentials
    """
    settings = settings or get_settings()
    catalog = settings.catalog
    backend = backend or catalog.backend

    common = dict(
        session=session,
        limit=int(catalog.search_limit),
        timeout=float(settings.network.request_timeout),
        rate_limit=int(settings.network.catalog_rate_limit),
        user_agent=settings.network.user_agent,
    )

    if backend == 'spotify':
        return SpotifyCatalogClient(
            client_id=catalog.spotify_client_id,
            client_secret=catalog.spotify_client_secret,
            token_url=catalog.spotify_token_url,
            api_url=catalog.spotify_api_url,
            market=catalog.market,
            **common
        )
    if backend == 'youtube':
        return YouTubeCatalogClient(api_key=catalog.youtube_api_key, api_url=catalog.youtube_api_url, **common)

    raise ConfigError(f"Unknown catalog backend: {backend}", details={'backend': backend})
