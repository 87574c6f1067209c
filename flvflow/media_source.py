"""
Media source protocol for feeding the FLV demuxer.

Decouples the demuxer from any specific transport. Each transport implements
the MediaSource protocol to provide byte-range streaming.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse

import aiofiles
import aiohttp

from flvflow.configs import settings

logger = logging.getLogger(__name__)


@runtime_checkable
class MediaSource(Protocol):
    """
    Protocol for streaming media byte ranges.

    Implementations must provide:
    - stream(): async iterator of bytes from offset/limit
    - name: human-readable identity for logging
    """

    @property
    def name(self) -> str:
        """Human-readable source identity (path or URL)."""
        ...

    async def stream(self, offset: int = 0, limit: int | None = None) -> AsyncIterator[bytes]:
        """
        Stream bytes from the source.

        Args:
            offset: Byte offset to start from.
            limit: Number of bytes to read. None = read to end.

        Yields:
            Chunks of bytes.
        """
        ...


class FileMediaSource:
    """MediaSource backed by a local file read with aiofiles."""

    def __init__(self, path: str | Path, chunk_size: int | None = None) -> None:
        self._path = Path(path)
        self._chunk_size = chunk_size or settings.read_chunk_size

    @property
    def name(self) -> str:
        return str(self._path)

    async def stream(self, offset: int = 0, limit: int | None = None) -> AsyncIterator[bytes]:
        remaining = limit
        async with aiofiles.open(self._path, "rb") as f:
            if offset:
                await f.seek(offset)
            while remaining is None or remaining > 0:
                size = self._chunk_size if remaining is None else min(self._chunk_size, remaining)
                chunk = await f.read(size)
                if not chunk:
                    break
                if remaining is not None:
                    remaining -= len(chunk)
                yield chunk


class HTTPMediaSource:
    """MediaSource backed by HTTP (optionally byte-range) requests via aiohttp."""

    def __init__(self, url: str, headers: dict | None = None) -> None:
        self._url = url
        self._headers = {"user-agent": settings.user_agent}
        self._headers.update(headers or {})

    @property
    def name(self) -> str:
        return self._url

    async def stream(self, offset: int = 0, limit: int | None = None) -> AsyncIterator[bytes]:
        headers = dict(self._headers)

        if offset > 0 or limit is not None:
            end = ""
            if limit is not None:
                end = str(offset + limit - 1)
            headers["range"] = f"bytes={offset}-{end}"

        timeout = aiohttp.ClientTimeout(total=settings.http_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self._url, headers=headers, allow_redirects=True) as resp:
                resp.raise_for_status()
                logger.debug("[media_source] GET %s -> %d", self._url, resp.status)
                async for chunk in resp.content.iter_any():
                    yield chunk


def open_media_source(location: str) -> MediaSource:
    """Pick the MediaSource for a URL or a local path."""
    if urlparse(location).scheme in ("http", "https"):
        return HTTPMediaSource(location)
    return FileMediaSource(location)
