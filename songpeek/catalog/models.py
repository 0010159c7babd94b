"""
Track model and boundary decoding for catalog search responses

Raw catalog payloads are decoded here and nowhere else. A record that lacks
a required field is rejected with UpstreamError; optional fields that are
missing (artwork, preview) degrade to None so that one incomplete record
never breaks a whole result list.

Supported payloads:
- Spotify Web API track objects (search results)
- YouTube Data API video resources (videos?part=snippet,status)
- The JSON shape written by Track.to_dict() (favorites storage)
"""

import html
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from ..core.exceptions import UpstreamError
from ..utils.logger import get_logger

logger = get_logger(__name__)


YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

# Preference order when picking a YouTube thumbnail
YOUTUBE_THUMBNAIL_KEYS = ('high', 'medium', 'default')


def _require(data: Dict[str, Any], key: str, service: str) -> Any:
    """Fetch a required non-empty field or raise UpstreamError"""
    if not isinstance(data, dict):
        raise UpstreamError(
            f"Unexpected {service} record: expected an object, got {type(data).__name__}",
            service=service
        )
    value = data.get(key)
    if value is None or value == "":
        raise UpstreamError(
            f"Malformed {service} record: missing '{key}'",
            details={'record': data},
            service=service
        )
    return value


@dataclass(frozen=True)
class Track:
    """
    One playable catalog entry

    Attributes:
        id: Catalog-unique, stable identifier (Spotify track id or YouTube video id)
        title: Track title as published
        artist: Display artist (comma-joined for multiple Spotify artists,
                channel title for YouTube)
        artwork_url: Cover image URL, None when the catalog has none
        preview_url: Short playable clip URL, None when no preview exists
        external_url: Link to the track page on the catalog's own site
    """
    id: str
    title: str
    artist: str
    artwork_url: Optional[str]
    preview_url: Optional[str]
    external_url: str

    @property
    def has_preview(self) -> bool:
        return bool(self.preview_url)

    @property
    def display_name(self) -> str:
        return f"{self.artist} - {self.title}"

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'Track':
        """
        Decode a Spotify track object

        Args:
            data: Track object from /v1/search (tracks.items[])

        Returns:
            Track instance

        Raises:
            UpstreamError: If id or name is missing
        """
        track_id = _require(data, 'id', 'spotify')
        title = _require(data, 'name', 'spotify')

        artist_names = [
            artist.get('name') for artist in data.get('artists') or []
            if isinstance(artist, dict) and artist.get('name')
        ]

        # Spotify lists album images largest first
        images = (data.get('album') or {}).get('images') or []
        artwork_url = images[0].get('url') if images and isinstance(images[0], dict) else None

        external_url = (data.get('external_urls') or {}).get('spotify') \
            or f"https://open.spotify.com/track/{track_id}"

        return cls(
            id=str(track_id),
            title=str(title),
            artist=', '.join(artist_names) or 'Unknown Artist',
            artwork_url=artwork_url,
            preview_url=data.get('preview_url') or None,
            external_url=external_url,
        )

    @classmethod
    def from_youtube_data(cls, data: Dict[str, Any]) -> 'Track':
        """
        Decode a YouTube video resource

        The watch URL doubles as the preview URL; the playback backend
        streams it directly.

        Args:
            data: Item from videos?part=snippet,status

        Returns:
            Track instance

        Raises:
            UpstreamError: If the id or snippet title is missing
        """
        video_id = _require(data, 'id', 'youtube')
        snippet = _require(data, 'snippet', 'youtube')
        title = _require(snippet, 'title', 'youtube')

        thumbnails = snippet.get('thumbnails') or {}
        artwork_url = None
        for key in YOUTUBE_THUMBNAIL_KEYS:
            thumbnail = thumbnails.get(key)
            if isinstance(thumbnail, dict) and thumbnail.get('url'):
                artwork_url = thumbnail['url']
                break

        watch_url = YOUTUBE_WATCH_URL.format(video_id=video_id)

        return cls(
            id=str(video_id),
            title=html.unescape(str(title)),
            artist=html.unescape(str(snippet.get('channelTitle') or 'Unknown Channel')),
            artwork_url=artwork_url,
            preview_url=watch_url,
            external_url=watch_url,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Track':
        """
        Rebuild a Track from the dictionary produced by to_dict()

        Raises:
            UpstreamError: If required keys are missing
        """
        return cls(
            id=str(_require(data, 'id', 'storage')),
            title=str(_require(data, 'title', 'storage')),
            artist=str(data.get('artist') or ''),
            artwork_url=data.get('artwork_url'),
            preview_url=data.get('preview_url'),
            external_url=str(data.get('external_url') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def decode_tracks(items: List[Any], decoder) -> List[Track]:
    """
    Decode a list of raw records, skipping the ones that fail validation

    Args:
        items: Raw records from a search response
        decoder: One of the Track.from_*_data factories

    Returns:
        Successfully decoded tracks in upstream order
    """
    tracks = []
    for item in items:
        try:
            tracks.append(decoder(item))
        except UpstreamError as e:
            logger.debug(f"Skipping malformed catalog record: {e}")
    return tracks
