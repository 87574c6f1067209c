"""
Streaming async FLV demuxer.

Reads an FLV byte stream via an async iterator and yields tags as soon as
they are complete. Designed for on-the-fly inspection without buffering the
entire file.

Architecture:
  AsyncIterator[bytes] -> ByteCursor -> FLVDecoder -> Tag yields

The demuxer works in two phases:
  1. read_header(): Consume bytes until the FLV header is decoded.
  2. iter_tags(): Yield Tag objects until the source ends at a record
     boundary.
"""

import logging
from collections.abc import AsyncIterator

from flvflow.flv.codec import FLVDecoder
from flvflow.flv.header import Header
from flvflow.flv.tag import Tag

logger = logging.getLogger(__name__)


class FLVDemuxer:
    """
    Streaming async FLV demuxer.

    Usage:
        demuxer = FLVDemuxer()
        header = await demuxer.read_header(source)
        async for tag in demuxer.iter_tags(source):
            process(tag)
    """

    def __init__(self, strict_previous_tag_size: bool | None = None) -> None:
        self._decoder = FLVDecoder(strict_previous_tag_size=strict_previous_tag_size)

    @property
    def header(self) -> Header | None:
        return self._decoder.header

    @property
    def decoder(self) -> FLVDecoder:
        return self._decoder

    async def read_header(self, source: AsyncIterator[bytes]) -> Header:
        """
        Read and parse the FLV header.

        Any bytes after the header stay buffered for iter_tags().

        Raises:
            FormatError: The stream is not FLV.
            TruncatedInputError: The source ended inside the header.
        """
        while True:
            header = self._decoder.decode_header()
            if header is not None:
                logger.info(
                    "[flv_demuxer] FLV header: audio=%s video=%s",
                    header.has_audio,
                    header.has_video,
                )
                return header
            await self._pull(source)

    async def iter_tags(self, source: AsyncIterator[bytes]) -> AsyncIterator[Tag]:
        """
        Yield tags from the stream.

        Must be called after read_header(). Stops when the source ends at a
        record boundary; a source that ends mid-record raises
        TruncatedInputError.
        """
        if self._decoder.header is None:
            raise RuntimeError("read_header() must be called before iter_tags()")

        while True:
            tag = self._decoder.decode_tag()
            if tag is not None:
                yield tag
                continue
            if self._decoder.finished:
                logger.info("[flv_demuxer] Stream ended after %d tags", self._decoder.tags_decoded)
                return
            await self._pull(source)

    async def _pull(self, source: AsyncIterator[bytes]) -> None:
        """Feed the next chunk, or close the cursor when the source is exhausted."""
        try:
            chunk = await source.__anext__()
        except StopAsyncIteration:
            self._decoder.close()
            return
        self._decoder.feed(chunk)
