"""Test configuration and fixtures"""

import asyncio
from typing import Dict, List, Optional

import pytest

from songpeek.catalog.models import Track
from songpeek.core.exceptions import PlaybackFailed
from songpeek.lyrics.index import LyricsIndex
from songpeek.lyrics.models import LyricsCandidate
from songpeek.playback.session import AudioResource, ResourceAcquirer


class FakeResource(AudioResource):
    """Audio resource that records its lifecycle instead of making sound"""

    def __init__(self, url, on_complete, acquirer, fail_load=None, load_delay=0.0, release_gate=None):
        self.url = url
        self.on_complete = on_complete
        self.acquirer = acquirer
        self.fail_load = fail_load
        self.load_delay = load_delay
        self.release_gate = release_gate
        self.loaded = False
        self.playing = False
        self.released = False

    async def load(self):
        if self.load_delay:
            await asyncio.sleep(self.load_delay)
        if self.fail_load is not None:
            raise self.fail_load
        self.loaded = True

    async def play(self):
        self.playing = True

    async def release(self):
        if self.released:
            return
        if self.release_gate is not None:
            await self.release_gate.wait()
        self.released = True
        self.playing = False
        self.acquirer.live.discard(self)

    def finish(self):
        """Simulate the stream reaching its end"""
        self.on_complete(self)


class FakeAcquirer(ResourceAcquirer):
    """Creates FakeResource instances and tracks how many are alive"""

    def __init__(self, fail_load=None, fail_create=None, load_delay=0.0, release_gate=None):
        self.fail_load = fail_load
        self.fail_create = fail_create
        self.load_delay = load_delay
        self.release_gate = release_gate
        self.created: List[FakeResource] = []
        self.live = set()
        self.max_live = 0

    def create(self, url, on_complete):
        if self.fail_create is not None:
            raise self.fail_create
        resource = FakeResource(
            url,
            on_complete,
            self,
            fail_load=self.fail_load,
            load_delay=self.load_delay,
            release_gate=self.release_gate
        )
        self.created.append(resource)
        self.live.add(resource)
        self.max_live = max(self.max_live, len(self.live))
        return resource


class FakeLyricsIndex(LyricsIndex):
    """Lyrics index answering from a query -> candidates table"""

    def __init__(
        self,
        results: Optional[Dict[str, List[LyricsCandidate]]] = None,
        lyrics: Optional[str] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        fetch_error: Optional[Exception] = None
    ):
        self.results = results or {}
        self.lyrics = lyrics
        self.delay = delay
        self.error = error
        self.fetch_error = fetch_error
        self.queries: List[str] = []
        self.fetched: List[LyricsCandidate] = []
        self.closed = False

    async def search(self, query):
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.results.get(query, []))

    async def fetch_lyrics(self, candidate):
        self.fetched.append(candidate)
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.lyrics

    async def close(self):
        self.closed = True


def make_track(track_id="track1", title="Idol", artist="YOASOBI", preview=True) -> Track:
    return Track(
        id=track_id,
        title=title,
        artist=artist,
        artwork_url=f"https://i.scdn.co/image/{track_id}",
        preview_url=f"https://p.scdn.co/mp3-preview/{track_id}" if preview else None,
        external_url=f"https://open.spotify.com/track/{track_id}"
    )


def make_candidate(slug: str, song_id: str = None) -> LyricsCandidate:
    return LyricsCandidate(
        id=song_id or slug,
        title=slug,
        artist="YOASOBI",
        url=f"https://genius.com/{slug}-lyrics"
    )


@pytest.fixture
def acquirer():
    """Fake acquirer whose resources load instantly"""
    return FakeAcquirer()


@pytest.fixture
def track_a():
    return make_track("trackA", "Idol")


@pytest.fixture
def track_b():
    return make_track("trackB", "Yoru ni Kakeru")


@pytest.fixture
def silent_track():
    """Track without a preview URL"""
    return make_track("trackC", "Album Only", preview=False)


@pytest.fixture
def sample_spotify_track():
    """Spotify search result item"""
    return {
        'id': '7ovUcF5uHTBRzUpB6ZOmvt',
        'name': 'Idol',
        'artists': [{'id': 'a1', 'name': 'YOASOBI'}, {'id': 'a2', 'name': 'Guest'}],
        'album': {
            'name': 'Idol',
            'images': [
                {'url': 'https://i.scdn.co/image/large', 'width': 640},
                {'url': 'https://i.scdn.co/image/small', 'width': 64}
            ]
        },
        'preview_url': 'https://p.scdn.co/mp3-preview/abc',
        'external_urls': {'spotify': 'https://open.spotify.com/track/7ovUcF5uHTBRzUpB6ZOmvt'}
    }


@pytest.fixture
def sample_youtube_video():
    """YouTube videos?part=snippet,status item"""
    return {
        'id': 'ZRtdQ81jPUQ',
        'snippet': {
            'title': 'YOASOBI「アイドル」 Official Music Video &amp; Lyrics',
            'channelTitle': 'Ayase / YOASOBI',
            'thumbnails': {
                'default': {'url': 'https://i.ytimg.com/vi/ZRtdQ81jPUQ/default.jpg'},
                'medium': {'url': 'https://i.ytimg.com/vi/ZRtdQ81jPUQ/mqdefault.jpg'}
            }
        },
        'status': {'embeddable': True}
    }


@pytest.fixture
def failing_load():
    return PlaybackFailed("stream unreachable")
