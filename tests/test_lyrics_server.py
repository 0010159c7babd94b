"""Test the lyrics companion HTTP service"""

import pytest
from aiohttp.test_utils import TestClient, TestServer

from conftest import FakeLyricsIndex, make_candidate
from songpeek.core.exceptions import ConfigError, UpstreamError
from songpeek.lyrics.models import (
    DeliveryMode,
    Failed,
    FailureReason,
    Found,
    LyricsLink,
    LyricsText,
    NotFound
)
from songpeek.lyrics.resolver import LyricsResolver
from songpeek.lyrics.server import create_app, result_to_payload


CANDIDATE = make_candidate("Yoasobi-idol")


def client_for(index, mode=DeliveryMode.LINK, timeout=5.0):
    resolver = LyricsResolver(index, mode=mode, timeout=timeout)
    return TestClient(TestServer(create_app(resolver=resolver)))


class TestResultToPayload:
    """Test response bodies for each outcome"""

    def test_found_link(self):
        assert result_to_payload(Found(LyricsLink("https://genius.com/x")), DeliveryMode.LINK) == {
            'url': "https://genius.com/x"
        }

    def test_found_text(self):
        assert result_to_payload(Found(LyricsText("la la")), DeliveryMode.TEXT) == {'lyrics': "la la"}

    def test_not_found_shape_follows_mode(self):
        assert result_to_payload(NotFound(), DeliveryMode.LINK) == {'url': None}
        assert result_to_payload(NotFound(), DeliveryMode.TEXT) == {'lyrics': None}

    def test_failures(self):
        assert result_to_payload(Failed(FailureReason.TIMEOUT, "Timed out after 5s"), DeliveryMode.LINK) == {
            'error': "Timed out after 5s",
            'retryable': True
        }
        assert result_to_payload(Failed(FailureReason.UPSTREAM_ERROR), DeliveryMode.LINK) == {
            'error': "upstream_error",
            'retryable': False
        }


class TestLyricsEndpoint:
    """Test GET /lyrics"""

    @pytest.mark.asyncio
    async def test_missing_song(self):
        index = FakeLyricsIndex()
        async with client_for(index) as client:
            response = await client.get('/lyrics', params={'artist': 'YOASOBI'})
            body = await response.json()

        assert response.status == 400
        assert 'error' in body
        assert index.queries == []

    @pytest.mark.asyncio
    async def test_title_sanitizing_to_nothing(self):
        async with client_for(FakeLyricsIndex()) as client:
            response = await client.get('/lyrics', params={'song': '(Live)', 'artist': 'YOASOBI'})

        assert response.status == 400

    @pytest.mark.asyncio
    async def test_link_found(self):
        index = FakeLyricsIndex({"YOASOBI Idol": [CANDIDATE]})
        async with client_for(index) as client:
            response = await client.get('/lyrics', params={'song': 'Idol (Live)', 'artist': 'YOASOBI'})
            body = await response.json()

        assert response.status == 200
        assert body == {'url': CANDIDATE.url}
        assert response.headers['Access-Control-Allow-Origin'] == '*'

    @pytest.mark.asyncio
    async def test_not_found(self):
        async with client_for(FakeLyricsIndex()) as client:
            response = await client.get('/lyrics', params={'song': 'Idol', 'artist': 'YOASOBI'})
            body = await response.json()

        assert response.status == 200
        assert body == {'url': None}

    @pytest.mark.asyncio
    async def test_text_mode(self):
        index = FakeLyricsIndex({"YOASOBI Idol": [CANDIDATE]}, lyrics="[Intro]\nline")
        async with client_for(index, mode=DeliveryMode.TEXT) as client:
            response = await client.get('/lyrics', params={'song': 'Idol', 'artist': 'YOASOBI'})
            body = await response.json()

        assert body == {'lyrics': "[Intro]\nline"}

    @pytest.mark.asyncio
    async def test_upstream_failure(self):
        index = FakeLyricsIndex(error=UpstreamError("genius request failed", service="genius"))
        async with client_for(index) as client:
            response = await client.get('/lyrics', params={'song': 'Idol', 'artist': 'YOASOBI'})
            body = await response.json()

        assert response.status == 200
        assert body == {'error': "genius request failed", 'retryable': False}

    @pytest.mark.asyncio
    async def test_text_mode_without_genius_key(self):
        index = FakeLyricsIndex(
            {"YOASOBI Idol": [CANDIDATE]},
            fetch_error=ConfigError("Genius API key is required for lyrics text")
        )
        async with client_for(index, mode=DeliveryMode.TEXT) as client:
            response = await client.get('/lyrics', params={'song': 'Idol', 'artist': 'YOASOBI'})
            body = await response.json()

        assert response.status == 200
        assert body == {'error': "Genius API key is required for lyrics text", 'retryable': False}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_json(self):
        index = FakeLyricsIndex(error=RuntimeError("index crashed"))
        async with client_for(index) as client:
            response = await client.get('/lyrics', params={'song': 'Idol', 'artist': 'YOASOBI'})
            body = await response.json()

        assert response.status == 200
        assert response.content_type == 'application/json'
        assert body == {'error': "index crashed", 'retryable': False}

    @pytest.mark.asyncio
    async def test_timeout(self):
        index = FakeLyricsIndex({"YOASOBI Idol": [CANDIDATE]}, delay=5)
        async with client_for(index, timeout=0.05) as client:
            response = await client.get('/lyrics', params={'song': 'Idol', 'artist': 'YOASOBI'})
            body = await response.json()

        assert body['retryable'] is True

    @pytest.mark.asyncio
    async def test_preflight(self):
        async with client_for(FakeLyricsIndex()) as client:
            response = await client.options('/lyrics')

        assert response.status == 204
        assert response.headers['Access-Control-Allow-Origin'] == '*'
