"""
HTTP Transport
Sends prepared requests with requests (blocking) or aiohttp (event loop).
"""

import asyncio
from typing import Optional

import aiohttp
import requests

from .config import Config
from .errors import TwitterConnectionError
from .logger import logger
from .models import OutgoingRequest, Response


class Transport:
    """Blocking and non-blocking HTTP sender sharing one configuration."""

    def __init__(self, timeout: Optional[float] = None, user_agent: Optional[str] = None):
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT
        self.user_agent = user_agent or Config.USER_AGENT
        self._session: Optional[requests.Session] = None
        self._async_session: Optional[aiohttp.ClientSession] = None
        self._async_loop: Optional[asyncio.AbstractEventLoop] = None

    def _headers(self, request: OutgoingRequest) -> dict:
        headers = {"User-Agent": self.user_agent}
        headers.update(request.headers)
        return headers

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def send(self, request: OutgoingRequest) -> Response:
        """Send a request and block until the response arrives."""
        logger.debug("%s %s (blocking)", request.method, request.url)
        try:
            resp = self._get_session().request(
                request.method,
                request.url,
                params=request.params or None,
                data=request.form,
                json=request.json,
                headers=self._headers(request),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Connection to %s failed: %s", request.url, e)
            raise TwitterConnectionError(f"{request.method} {request.url} failed: {e}", e) from e
        return Response(status=resp.status_code, headers=dict(resp.headers), body=resp.content)

    def _release_stale_session(self):
        """Close a session left open by another event loop on that loop, if it still exists."""
        session, loop = self._async_session, self._async_loop
        self._async_session = None
        self._async_loop = None
        if session is None or session.closed:
            return
        if loop is not None and not loop.is_closed():
            asyncio.run_coroutine_threadsafe(session.close(), loop)
            logger.debug("Scheduled close of aiohttp session from a previous event loop")
        else:
            logger.warning("Dropping aiohttp session whose event loop is already closed")

    async def _get_async_session(self) -> aiohttp.ClientSession:
        loop = asyncio.get_running_loop()
        if self._async_session is not None and self._async_loop is not loop:
            self._release_stale_session()
        if self._async_session is None or self._async_session.closed:
            self._async_session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._async_loop = loop
        return self._async_session

    async def send_async(self, request: OutgoingRequest) -> Response:
        """Send a request without blocking the running event loop."""
        logger.debug("%s %s (async)", request.method, request.url)
        session = await self._get_async_session()
        try:
            async with session.request(
                request.method,
                request.url,
                params=request.params or None,
                data=request.form,
                json=request.json,
                headers=self._headers(request),
            ) as resp:
                body = await resp.read()
                return Response(status=resp.status, headers=dict(resp.headers), body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Connection to %s failed: %s", request.url, e)
            raise TwitterConnectionError(f"{request.method} {request.url} failed: {e}", e) from e

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None

    async def aclose(self):
        self.close()
        if self._async_session is not None and not self._async_session.closed:
            await self._async_session.close()
        self._async_session = None
        self._async_loop = None
