"""
HTTP transport for the ELC client.

Defines the abstract HTTPClient used by the route locator and its aiohttp
implementation.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import aiohttp

from version import __elc_api_provider__, __version__
from ..exceptions import TransportError
from .request_shaper import FORM_CONTENT_TYPE, ShapedRequest

logger = logging.getLogger(__name__)

_JSONP_RE = re.compile(r"^\s*[\w$.]+\s*\((.*)\)\s*;?\s*$", re.DOTALL)


@dataclass
class ELCAPIResponse:
    """Container for a decoded ELC service response."""

    status_code: int
    data: Any
    timestamp: datetime
    source: str


def decode_body(text: str) -> Any:
    """
    Decode a response body, removing a JSONP callback wrapper if present.

    Raises:
        TransportError: If the body is not JSON
    """
    match = _JSONP_RE.match(text)
    if match and not text.lstrip().startswith(("{", "[")):
        text = match.group(1)
    try:
        return json.loads(text)
    except ValueError as e:
        raise TransportError(f"Invalid JSON response: {e}")


class HTTPClient(ABC):
    """Abstract HTTP client interface for dependency injection."""

    @abstractmethod
    async def get(self, url: str) -> ELCAPIResponse:
        """Make HTTP GET request."""
        pass

    @abstractmethod
    async def post(self, url: str, body: str) -> ELCAPIResponse:
        """Make HTTP POST request with a urlencoded form body."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close HTTP client."""
        pass

    async def send(self, request: ShapedRequest) -> ELCAPIResponse:
        """Send a shaped request with the method it was shaped for."""
        if request.is_post:
            return await self.post(request.url, request.body or "")
        return await self.get(request.url)


class AioHttpClient(HTTPClient):
    """Concrete HTTP client implementation using aiohttp."""

    def __init__(self, timeout_seconds: int = 30):
        """Initialize HTTP client with timeout."""
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": f"ELCClient/{__version__}"},
            )
        return self._session

    async def get(self, url: str) -> ELCAPIResponse:
        """Make HTTP GET request."""
        session = await self._ensure_session()

        try:
            async with session.get(url) as response:
                text = await response.text()
                return self._build_response(response.status, text)
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error: {e}")
        except UnicodeDecodeError as e:
            raise TransportError(f"Undecodable response body: {e}")
        except asyncio.TimeoutError:
            raise TransportError(f"Request timed out: {url}")

    async def post(self, url: str, body: str) -> ELCAPIResponse:
        """Make HTTP POST request with a urlencoded form body."""
        session = await self._ensure_session()

        try:
            async with session.post(
                url, data=body, headers={"Content-Type": FORM_CONTENT_TYPE}
            ) as response:
                text = await response.text()
                return self._build_response(response.status, text)
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error: {e}")
        except UnicodeDecodeError as e:
            raise TransportError(f"Undecodable response body: {e}")
        except asyncio.TimeoutError:
            raise TransportError(f"Request timed out: {url}")

    def _build_response(self, status: int, text: str) -> ELCAPIResponse:
        try:
            data = decode_body(text) if text.strip() else None
        except TransportError:
            if status == 200:
                raise
            # Error pages are often HTML
            data = text
        return ELCAPIResponse(
            status_code=status,
            data=data,
            timestamp=datetime.now(),
            source=__elc_api_provider__,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
