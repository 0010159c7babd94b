"""
Shared asynchronous HTTP plumbing for upstream services

Every upstream client (catalog backends, Genius, the lyrics companion
service) goes through JsonHttpClient so that rate limiting, timeouts and
error translation behave the same way everywhere:

- requests are throttled with asyncio-throttle
- transport errors, non-2xx statuses and non-JSON bodies become UpstreamError
- asyncio.CancelledError is never swallowed, so deadlines set by callers
  abort the in-flight request
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
from asyncio_throttle import Throttler

from .exceptions import UpstreamError
from ..utils.logger import get_logger


class JsonHttpClient:
    """
    Base class for JSON-over-HTTP upstream clients

    The aiohttp session is either injected (and then owned by the caller) or
    created lazily on first request (and closed by close()).

    Attributes:
        service: Short service name used in errors and logs
    """

    service = "http"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 15.0,
        rate_limit: int = 5,
        user_agent: str = "songpeek/1.0"
    ):
        self.logger = get_logger(__name__)
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._throttler = Throttler(rate_limit=max(1, int(rate_limit)), period=1.0)
        self._headers = {'User-Agent': user_agent}

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout, headers=self._headers)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this client created it"""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[aiohttp.BasicAuth] = None,
        accept_statuses: tuple = ()
    ) -> Any:
        """
        Perform a throttled request and decode the JSON body

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters
            data: Form body
            headers: Extra request headers
            auth: Basic auth credentials
            accept_statuses: Non-2xx statuses whose JSON body should be
                             returned instead of raising

        Returns:
            Decoded JSON payload

        Raises:
            UpstreamError: On transport failure, unexpected status or invalid JSON
        """
        async with self._throttler:
            try:
                async with self.session.request(
                    method,
                    url,
                    params=params,
                    data=data,
                    headers=headers,
                    auth=auth,
                    timeout=self._timeout
                ) as response:
                    if response.status >= 400 and response.status not in accept_statuses:
                        body = await response.text(errors='ignore')
                        raise UpstreamError(
                            f"{self.service} returned HTTP {response.status}",
                            details={'url': url, 'body': body[:200]},
                            service=self.service,
                            status_code=response.status
                        )
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise UpstreamError(
                            f"{self.service} returned invalid JSON",
                            details={'url': url, 'original_error': str(e)},
                            service=self.service,
                            status_code=response.status
                        )
            except asyncio.TimeoutError:
                raise UpstreamError(
                    f"{self.service} request timed out",
                    details={'url': url},
                    service=self.service
                )
            except aiohttp.ClientError as e:
                raise UpstreamError(
                    f"{self.service} request failed: {e}",
                    details={'url': url, 'original_error': str(e)},
                    service=self.service
                )

    async def get_json(self, url: str, **kwargs) -> Any:
        return await self.request_json('GET', url, **kwargs)

    async def post_json(self, url: str, **kwargs) -> Any:
        return await self.request_json('POST', url, **kwargs)


def expect_object(payload: Any, service: str, what: str = "response") -> Dict[str, Any]:
    """
    Ensure a decoded payload is a JSON object

    Raises:
        UpstreamError: If the payload is not a dict
    """
    if not isinstance(payload, dict):
        raise UpstreamError(
            f"Unexpected {service} {what}: expected an object, got {type(payload).__name__}",
            service=service
        )
    return payload
