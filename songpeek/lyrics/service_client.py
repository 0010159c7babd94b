"""
Client for the lyrics companion service

Calls GET /lyrics on a running companion service and maps the JSON body
back onto LyricsResult, so the CLI can use a remote resolver exactly like a
local one.
"""

import asyncio
from typing import Any, Optional

import aiohttp

from ..config.settings import get_settings, Settings
from ..core.exceptions import UpstreamError, ValidationError
from ..core.http import JsonHttpClient, expect_object
from ..utils.helpers import sanitize_title
from .models import Failed, FailureReason, Found, LyricsLink, LyricsResult, LyricsText, NotFound


class LyricsServiceClient(JsonHttpClient):
    """
    Remote lyrics lookup through the companion service

    Attributes:
        base_url: Service root, e.g. http://localhost:3000
        deadline: Client-side deadline in seconds for one lookup
    """

    service = "lyrics service"

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        deadline: float = 5.0,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: str = "songpeek/1.0"
    ):
        super().__init__(session=session, timeout=deadline + 1.0, rate_limit=5, user_agent=user_agent)
        self.base_url = base_url.rstrip('/')
        self.deadline = deadline

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        session: Optional[aiohttp.ClientSession] = None
    ) -> 'LyricsServiceClient':
        settings = settings or get_settings()
        return cls(
            base_url=settings.lyrics.service_url,
            deadline=float(settings.lyrics.timeout),
            session=session,
            user_agent=settings.network.user_agent
        )

    async def fetch(self, title: str, artist: str = "") -> LyricsResult:
        """
        Look up lyrics through the service

        Args:
            title: Raw track title; the service sanitizes it
            artist: Artist name, may be empty

        Returns:
            Found, NotFound or Failed

        Raises:
            ValidationError: If the title is empty after sanitizing, or the
                             service rejects the request
        """
        if not sanitize_title(title or ""):
            raise ValidationError("Song title is required", details={'title': title})

        try:
            payload = await asyncio.wait_for(
                self.get_json(
                    f"{self.base_url}/lyrics",
                    params={'song': title, 'artist': artist or ""}
                ),
                timeout=self.deadline
            )
        except asyncio.TimeoutError:
            self.logger.warning(f"Lyrics service did not answer within {self.deadline:g}s")
            return Failed(FailureReason.TIMEOUT, f"Timed out after {self.deadline:g}s")
        except UpstreamError as e:
            if e.status_code == 400:
                raise ValidationError(f"Lyrics service rejected the request: {e.message}", details=e.details)
            self.logger.error(f"Lyrics service request failed: {e}")
            return Failed(FailureReason.UPSTREAM_ERROR, e.message)

        return self._to_result(payload)

    def _to_result(self, payload: Any) -> LyricsResult:
        try:
            body = expect_object(payload, self.service)
        except UpstreamError as e:
            return Failed(FailureReason.UPSTREAM_ERROR, e.message)

        if body.get('lyrics'):
            return Found(LyricsText(str(body['lyrics'])))
        if body.get('url'):
            return Found(LyricsLink(str(body['url'])))
        if body.get('error'):
            reason = FailureReason.TIMEOUT if body.get('retryable') is True else FailureReason.UPSTREAM_ERROR
            return Failed(reason, str(body['error']))
        return NotFound()
