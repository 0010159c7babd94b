"""
Genius lyrics index

Searches Genius for song pages and, in text mode, scrapes the lyrics of a
chosen page.

Search endpoints:
- With an API key: GET https://api.genius.com/search?q=... (bearer token),
  hits under response.hits[].result
- Without a key: the public web endpoint GET https://genius.com/api/search/song?q=...,
  hits under response.sections[].hits[].result

Hits are returned in Genius' own order; ranking is the resolver's job.
Page scraping goes through lyricsgenius, which needs an API key, and runs
in a worker thread because lyricsgenius is built on blocking requests.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import lyricsgenius
import requests

from ..config.settings import get_settings, Settings
from ..core.exceptions import ConfigError, UpstreamError
from ..core.http import JsonHttpClient, expect_object
from ..utils.helpers import clean_lyrics_text
from ..utils.logger import get_logger
from .index import LyricsIndex
from .models import LyricsCandidate


def parse_song_hit(result: Dict[str, Any]) -> Optional[LyricsCandidate]:
    """
    Convert one Genius song object into a candidate

    Returns:
        LyricsCandidate, or None when the object lacks an id or url
    """
    if not isinstance(result, dict):
        return None

    song_id = result.get('id')
    url = result.get('url')
    if song_id is None or not isinstance(url, str) or not url:
        return None

    primary_artist = result.get('primary_artist') or {}
    artist = primary_artist.get('name') if isinstance(primary_artist, dict) else None

    return LyricsCandidate(
        id=str(song_id),
        title=str(result.get('title') or result.get('full_title') or ''),
        artist=str(artist or result.get('artist_names') or ''),
        url=url
    )


class GeniusLyricsIndex(JsonHttpClient, LyricsIndex):
    """
    Genius search over aiohttp plus lyricsgenius page scraping

    Attributes:
        api_key: Genius client access token; empty selects the public search endpoint
        per_page: Number of hits requested per search
    """

    service = "genius"

    def __init__(
        self,
        api_key: str = "",
        api_url: str = "https://api.genius.com",
        public_url: str = "https://genius.com/api",
        per_page: int = 5,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 15.0,
        rate_limit: int = 2,
        user_agent: str = "songpeek/1.0"
    ):
        super().__init__(session=session, timeout=timeout, rate_limit=rate_limit, user_agent=user_agent)
        self.logger = get_logger(__name__)
        self.api_key = api_key
        self.api_url = api_url.rstrip('/')
        self.public_url = public_url.rstrip('/')
        self.per_page = per_page
        self.request_timeout = timeout
        self._genius_client: Optional[lyricsgenius.Genius] = None

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        session: Optional[aiohttp.ClientSession] = None
    ) -> 'GeniusLyricsIndex':
        settings = settings or get_settings()
        return cls(
            api_key=settings.lyrics.genius_api_key,
            api_url=settings.lyrics.genius_api_url,
            public_url=settings.lyrics.genius_public_url,
            per_page=max(int(settings.lyrics.max_candidates), 1),
            session=session,
            timeout=float(settings.network.request_timeout),
            rate_limit=int(settings.network.genius_rate_limit),
            user_agent=settings.network.user_agent
        )

    @property
    def genius_client(self) -> lyricsgenius.Genius:
        """
        Lazily created lyricsgenius client used for page scraping

        Raises:
            ConfigError: If no API key is configured
        """
        if self._genius_client is None:
            if not self.api_key:
                raise ConfigError(
                    "Genius API key not configured; text mode needs one",
                    details={'setting': 'lyrics.genius_api_key'}
                )
            self._genius_client = lyricsgenius.Genius(
                access_token=self.api_key,
                timeout=int(self.request_timeout),
                retries=0,
                remove_section_headers=False,
                skip_non_songs=True,
                verbose=False
            )
        return self._genius_client

    async def search(self, query: str) -> List[LyricsCandidate]:
        """
        Search Genius for songs

        Args:
            query: Free-text query ("artist title" or "title")

        Returns:
            Candidates in Genius order

        Raises:
            UpstreamError: On transport failure or an unexpected payload
        """
        self.logger.debug(f"Searching Genius for: {query}")

        if self.api_key:
            payload = await self.get_json(
                f"{self.api_url}/search",
                params={'q': query, 'per_page': self.per_page},
                headers={'Authorization': f"Bearer {self.api_key}"}
            )
            hits = self._hits_from_api(payload)
        else:
            payload = await self.get_json(
                f"{self.public_url}/search/song",
                params={'q': query, 'per_page': self.per_page}
            )
            hits = self._hits_from_public(payload)

        candidates = []
        for hit in hits:
            if not isinstance(hit, dict):
                continue
            if hit.get('type', 'song') != 'song':
                continue
            candidate = parse_song_hit(hit.get('result'))
            if candidate:
                candidates.append(candidate)

        self.logger.debug(f"Genius returned {len(candidates)} candidates for: {query}")
        return candidates

    def _response_block(self, payload: Any) -> Dict[str, Any]:
        payload = expect_object(payload, self.service, "search response")
        response = payload.get('response')
        if not isinstance(response, dict):
            raise UpstreamError("Genius search response has no 'response' object", service=self.service)
        return response

    def _hits_from_api(self, payload: Any) -> List[Any]:
        hits = self._response_block(payload).get('hits')
        if not isinstance(hits, list):
            raise UpstreamError("Genius search response has no hits list", service=self.service)
        return hits

    def _hits_from_public(self, payload: Any) -> List[Any]:
        sections = self._response_block(payload).get('sections')
        if not isinstance(sections, list):
            raise UpstreamError("Genius search response has no sections list", service=self.service)

        hits: List[Any] = []
        for section in sections:
            if isinstance(section, dict) and isinstance(section.get('hits'), list):
                hits.extend(section['hits'])
        return hits

    async def fetch_lyrics(self, candidate: LyricsCandidate) -> Optional[str]:
        """
        Scrape the plain lyrics of a candidate's page

        Returns:
            Cleaned lyrics, or None when the page has no plain text

        Raises:
            ConfigError: If no API key is configured
            UpstreamError: If the page request fails
        """
        client = self.genius_client
        self.logger.debug(f"Fetching lyrics page: {candidate.url}")

        try:
            lyrics = await asyncio.to_thread(client.lyrics, song_url=candidate.url)
        except requests.RequestException as e:
            raise UpstreamError(
                f"Failed to fetch Genius lyrics page: {e}",
                details={'url': candidate.url},
                service=self.service
            ) from e

        cleaned = clean_lyrics_text(lyrics)
        return cleaned or None
