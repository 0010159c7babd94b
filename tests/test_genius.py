"""Test the Genius lyrics index against a local fake API"""

from unittest.mock import Mock

import pytest
import requests
from aiohttp import web
from aiohttp.test_utils import TestServer

from songpeek.core.exceptions import ConfigError, UpstreamError
from songpeek.lyrics.genius import GeniusLyricsIndex, parse_song_hit
from songpeek.lyrics.models import LyricsCandidate


def song(song_id, slug, artist="YOASOBI"):
    return {
        'id': song_id,
        'title': slug,
        'url': f"https://genius.com/{slug}-lyrics",
        'primary_artist': {'name': artist}
    }


def genius_app(calls, status=200):
    async def api_search(request):
        calls.append(('api', request.query.get('q'), request.headers.get('Authorization')))
        if status != 200:
            return web.json_response({'meta': {'status': status}}, status=status)
        return web.json_response({'response': {'hits': [
            {'type': 'song', 'result': song(1, 'Genius-romanizations-yoasobi-idol-romanized')},
            {'type': 'album', 'result': {'id': 99, 'url': 'https://genius.com/albums/x'}},
            {'type': 'song', 'result': song(2, 'Yoasobi-idol')},
        ]}})

    async def public_search(request):
        calls.append(('public', request.query.get('q')))
        return web.json_response({'response': {'sections': [
            {'type': 'song', 'hits': [
                {'type': 'song', 'result': song(2, 'Yoasobi-idol')},
                {'type': 'song', 'result': {'id': 3}},
            ]},
        ]}})

    async def broken(request):
        return web.json_response({'unexpected': True})

    app = web.Application()
    app.router.add_get('/search', api_search)
    app.router.add_get('/api/search/song', public_search)
    app.router.add_get('/broken/search', broken)
    return app


class TestParseSongHit:

    def test_song_hit(self):
        candidate = parse_song_hit(song(2, 'Yoasobi-idol'))
        assert candidate == LyricsCandidate('2', 'Yoasobi-idol', 'YOASOBI', 'https://genius.com/Yoasobi-idol-lyrics')

    def test_incomplete_hit(self):
        assert parse_song_hit({'id': 3}) is None
        assert parse_song_hit(None) is None


class TestGeniusSearch:
    """Test Genius search endpoints"""

    @pytest.mark.asyncio
    async def test_api_search_keeps_order_and_songs_only(self):
        calls = []
        async with TestServer(genius_app(calls)) as server:
            async with GeniusLyricsIndex(api_key='secret', api_url=str(server.make_url(''))) as index:
                candidates = await index.search("YOASOBI Idol")

        assert [candidate.id for candidate in candidates] == ['1', '2']
        assert calls == [('api', 'YOASOBI Idol', 'Bearer secret')]

    @pytest.mark.asyncio
    async def test_public_search_without_key(self):
        calls = []
        async with TestServer(genius_app(calls)) as server:
            async with GeniusLyricsIndex(public_url=str(server.make_url('/api'))) as index:
                candidates = await index.search("Idol")

        assert [candidate.url for candidate in candidates] == ['https://genius.com/Yoasobi-idol-lyrics']
        assert calls == [('public', 'Idol')]

    @pytest.mark.asyncio
    async def test_http_error(self):
        async with TestServer(genius_app([], status=503)) as server:
            async with GeniusLyricsIndex(api_key='secret', api_url=str(server.make_url(''))) as index:
                with pytest.raises(UpstreamError) as exc_info:
                    await index.search("Idol")

        assert exc_info.value.status_code == 503
        assert exc_info.value.service == "genius"

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        async with TestServer(genius_app([])) as server:
            async with GeniusLyricsIndex(api_key='secret', api_url=str(server.make_url('/broken'))) as index:
                with pytest.raises(UpstreamError):
                    await index.search("Idol")


class TestGeniusLyricsPages:
    """Test page scraping through lyricsgenius"""

    CANDIDATE = LyricsCandidate('2', 'Idol', 'YOASOBI', 'https://genius.com/Yoasobi-idol-lyrics')

    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        index = GeniusLyricsIndex()
        with pytest.raises(ConfigError):
            await index.fetch_lyrics(self.CANDIDATE)

    @pytest.mark.asyncio
    async def test_lyrics_cleaned(self):
        index = GeniusLyricsIndex(api_key='secret')
        index._genius_client = Mock()
        index._genius_client.lyrics.return_value = "3 ContributorsIdol Lyrics[Intro]\nline\n1Embed"

        text = await index.fetch_lyrics(self.CANDIDATE)

        assert text == "[Intro]\nline"
        index._genius_client.lyrics.assert_called_once_with(song_url=self.CANDIDATE.url)

    @pytest.mark.asyncio
    async def test_empty_page(self):
        index = GeniusLyricsIndex(api_key='secret')
        index._genius_client = Mock()
        index._genius_client.lyrics.return_value = None

        assert await index.fetch_lyrics(self.CANDIDATE) is None

    @pytest.mark.asyncio
    async def test_page_request_failure(self):
        index = GeniusLyricsIndex(api_key='secret')
        index._genius_client = Mock()
        index._genius_client.lyrics.side_effect = requests.Timeout("read timed out")

        with pytest.raises(UpstreamError):
            await index.fetch_lyrics(self.CANDIDATE)
