"""
FLV stream decoder and encoder.

Sequences header decoding and repeated tag decoding over input that may
arrive in arbitrary chunks, and keeps the running PreviousTagSize so callers
never handle it.

Usage:
    decoder = FLVDecoder()
    decoder.feed(chunk)
    header = decoder.decode_header()      # None -> feed more and retry
    ...
    for tag in decoder.iter_tags():       # stops when more input is needed
        process(tag)
    decoder.close()                       # at end of input
"""

import logging
from collections.abc import Iterable, Iterator

from flvflow.configs import settings
from flvflow.flv.cursor import ByteCursor
from flvflow.flv.fields import encode_u32
from flvflow.flv.frame import TagDecoder, encode_tag
from flvflow.flv.header import Header, HeaderDecoder, HeaderState, encode_header
from flvflow.flv.tag import Tag

logger = logging.getLogger(__name__)


class FLVDecoder:
    """
    Resumable FLV decoder.

    Every decode call returns None when the cursor runs out of bytes before a
    complete item is available; progress is kept, so calling again after
    feed() continues at the exact byte reached. Results do not depend on how
    the input was chunked.
    """

    def __init__(self, cursor: ByteCursor | None = None, strict_previous_tag_size: bool | None = None) -> None:
        self.cursor = cursor if cursor is not None else ByteCursor()
        if strict_previous_tag_size is None:
            strict_previous_tag_size = settings.strict_previous_tag_size
        self.strict_previous_tag_size = strict_previous_tag_size
        self.tags_decoded = 0
        self._header: Header | None = None
        self._header_decoder = HeaderDecoder()
        self._tag_decoder = TagDecoder()
        self._previous_tag_size = 0

    @property
    def header(self) -> Header | None:
        """Last decoded header, or None if no header has been decoded yet."""
        return self._header

    @property
    def previous_tag_size(self) -> int:
        """Size of the last decoded tag (0 before the first one)."""
        return self._previous_tag_size

    @property
    def finished(self) -> bool:
        """True once the input ended cleanly at a record boundary."""
        return self._tag_decoder.finished

    def feed(self, data: bytes) -> None:
        self.cursor.feed(data)

    def close(self) -> None:
        self.cursor.close()

    def reset(self) -> None:
        """
        Prepare to decode a new container from the same cursor.

        The cached header stays available until the next header is decoded.
        """
        self._header_decoder.reset()
        self._tag_decoder = TagDecoder()
        self._previous_tag_size = 0

    def decode_header(self) -> Header | None:
        header = self._header_decoder.decode(self.cursor)
        if header is not None:
            self._header = header
        return header

    def decode_tag(self) -> Tag | None:
        """
        Decode the next tag.

        Returns None when more input is needed, or when the stream has ended
        cleanly (finished is then True).
        """
        if self._header_decoder.state is not HeaderState.DONE:
            raise RuntimeError("decode_header() must return a header before decode_tag()")

        was_finished = self._tag_decoder.finished
        expected = self._previous_tag_size if self.strict_previous_tag_size else None
        tag = self._tag_decoder.decode(self.cursor, expected)

        if tag is None:
            if self._tag_decoder.finished and not was_finished:
                self._log_end()
            return None

        read_size = self._tag_decoder.last_previous_tag_size
        if read_size != self._previous_tag_size:
            logger.debug(
                "[flv_codec] PreviousTagSize %d before tag #%d does not match previous tag size %d",
                read_size,
                self.tags_decoded,
                self._previous_tag_size,
            )
        self._previous_tag_size = tag.tag_size
        self.tags_decoded += 1
        return tag

    def iter_tags(self) -> Iterator[Tag]:
        """Yield every tag decodable from the bytes fed so far."""
        while True:
            tag = self.decode_tag()
            if tag is None:
                return
            yield tag

    def _log_end(self) -> None:
        trailing = self._tag_decoder.trailing_previous_tag_size
        if trailing is not None and trailing != self._previous_tag_size:
            logger.warning(
                "[flv_codec] Trailing PreviousTagSize %d does not match last tag size %d",
                trailing,
                self._previous_tag_size,
            )
        logger.debug(
            "[flv_codec] End of stream after %d tags at offset %d",
            self.tags_decoded,
            self.cursor.consumed,
        )


class FLVEncoder:
    """
    FLV encoder producing wire bytes per call.

    encode_header() must come first; each encode_tag() writes the size of
    the previously encoded tag in front of the new one; finish() writes the
    trailing PreviousTagSize of the last tag.
    """

    def __init__(self) -> None:
        self.tags_encoded = 0
        self._header: Header | None = None
        self._previous_tag_size = 0

    @property
    def header(self) -> Header | None:
        return self._header

    @property
    def previous_tag_size(self) -> int:
        return self._previous_tag_size

    def encode_header(self, header: Header) -> bytes:
        data = encode_header(header)
        self._header = header
        self._previous_tag_size = 0
        self.tags_encoded = 0
        return data

    def encode_tag(self, tag: Tag) -> bytes:
        if self._header is None:
            raise RuntimeError("encode_header() must be called before encode_tag()")
        data = encode_tag(tag, self._previous_tag_size)
        self._previous_tag_size = tag.tag_size
        self.tags_encoded += 1
        return data

    def finish(self) -> bytes:
        """Return the trailing PreviousTagSize closing the stream."""
        if self._header is None:
            raise RuntimeError("encode_header() must be called before finish()")
        return encode_u32(self._previous_tag_size, "previous_tag_size")


def decode_stream(data: bytes, strict_previous_tag_size: bool | None = None) -> tuple[Header, list[Tag]]:
    """Decode a complete in-memory FLV stream."""
    decoder = FLVDecoder(strict_previous_tag_size=strict_previous_tag_size)
    decoder.feed(data)
    decoder.close()
    header = decoder.decode_header()
    tags = list(decoder.iter_tags())
    return header, tags


def encode_stream(header: Header, tags: Iterable[Tag], trailing_size: bool = True) -> bytes:
    """Encode a header and tags into a complete FLV stream."""
    encoder = FLVEncoder()
    parts = [encoder.encode_header(header)]
    parts.extend(encoder.encode_tag(tag) for tag in tags)
    if trailing_size:
        parts.append(encoder.finish())
    return b"".join(parts)
