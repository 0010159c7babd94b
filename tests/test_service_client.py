"""Test the lyrics companion service client"""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from conftest import FakeLyricsIndex, make_candidate
from songpeek.core.exceptions import UpstreamError, ValidationError
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
from songpeek.lyrics.server import create_app
from songpeek.lyrics.service_client import LyricsServiceClient


CANDIDATE = make_candidate("Yoasobi-idol")


def service_for(index, mode=DeliveryMode.LINK, timeout=5.0):
    return TestServer(create_app(resolver=LyricsResolver(index, mode=mode, timeout=timeout)))


def static_app(body, status=200, delay=0.0):
    async def handler(request):
        if delay:
            await asyncio.sleep(delay)
        return web.json_response(body, status=status)

    app = web.Application()
    app.router.add_get('/lyrics', handler)
    return app


class TestLyricsServiceClient:
    """Test mapping of service responses onto lookup results"""

    @pytest.mark.asyncio
    async def test_link(self):
        async with service_for(FakeLyricsIndex({"YOASOBI Idol": [CANDIDATE]})) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                result = await client.fetch("Idol (Live)", "YOASOBI")

        assert result == Found(LyricsLink(CANDIDATE.url))

    @pytest.mark.asyncio
    async def test_text(self):
        index = FakeLyricsIndex({"YOASOBI Idol": [CANDIDATE]}, lyrics="[Intro]\nline")
        async with service_for(index, mode=DeliveryMode.TEXT) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                result = await client.fetch("Idol", "YOASOBI")

        assert result == Found(LyricsText("[Intro]\nline"))

    @pytest.mark.asyncio
    async def test_not_found(self):
        async with service_for(FakeLyricsIndex()) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                result = await client.fetch("Idol", "YOASOBI")

        assert result == NotFound()

    @pytest.mark.asyncio
    async def test_server_side_failures(self):
        index = FakeLyricsIndex(error=UpstreamError("genius request failed", service="genius"))
        async with service_for(index) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                result = await client.fetch("Idol", "YOASOBI")

        assert result == Failed(FailureReason.UPSTREAM_ERROR, "genius request failed")

    @pytest.mark.asyncio
    async def test_server_side_timeout_is_retryable(self):
        async with TestServer(static_app({'error': "Timed out after 5s", 'retryable': True})) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                result = await client.fetch("Idol", "YOASOBI")

        assert result.reason is FailureReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_error_without_flag(self):
        """Test bodies from services that only send an error message"""
        async with TestServer(static_app({'error': "Genius error"})) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                result = await client.fetch("Idol", "YOASOBI")

        assert result == Failed(FailureReason.UPSTREAM_ERROR, "Genius error")

    @pytest.mark.asyncio
    async def test_client_deadline(self):
        async with TestServer(static_app({'url': None}, delay=1)) as server:
            async with LyricsServiceClient(str(server.make_url('')), deadline=0.05) as client:
                result = await client.fetch("Idol", "YOASOBI")

        assert result.reason is FailureReason.TIMEOUT
        assert result.retryable

    @pytest.mark.asyncio
    async def test_rejected_request(self):
        async with TestServer(static_app({'error': "Song title is required"}, status=400)) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                with pytest.raises(ValidationError):
                    await client.fetch("Idol", "YOASOBI")

    @pytest.mark.asyncio
    async def test_server_error_status(self):
        async with TestServer(static_app({'oops': True}, status=500)) as server:
            async with LyricsServiceClient(str(server.make_url(''))) as client:
                result = await client.fetch("Idol", "YOASOBI")

        assert result.reason is FailureReason.UPSTREAM_ERROR

    @pytest.mark.asyncio
    async def test_blank_title_rejected_locally(self):
        client = LyricsServiceClient("http://localhost:1")
        with pytest.raises(ValidationError):
            await client.fetch("  ", "YOASOBI")
