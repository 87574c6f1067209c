"""
FLV file header codec.

Wire layout (9 bytes, canonical form):
  - Signature: "FLV" (3 bytes)
  - Version (1 byte), accepted but not interpreted
  - Flags (1 byte): bit 2 = audio present, bit 0 = video present
  - Header length (4 bytes BE), nominally 9; anything beyond the fixed
    9 bytes is vendor padding and is skipped
"""

import logging
from dataclasses import dataclass
from enum import Enum

from flvflow.flv.cursor import ByteCursor
from flvflow.flv.errors import BadHeaderLengthError, BadSignatureError, TruncatedInputError
from flvflow.flv.fields import PartialField, decode_flags_byte, decode_u8, encode_flags_byte, encode_u32

logger = logging.getLogger(__name__)

FLV_SIGNATURE = b"FLV"
FLV_VERSION = 1
HEADER_SIZE = 9


@dataclass(frozen=True)
class Header:
    """Stream-presence flags of an FLV file."""

    has_audio: bool = True
    has_video: bool = True


class HeaderState(Enum):
    SIGNATURE = "signature"
    VERSION = "version"
    FLAGS = "flags"
    HEADER_LENGTH = "header_length"
    PADDING = "padding"
    DONE = "done"


_FIELD_WIDTHS = {
    HeaderState.SIGNATURE: 3,
    HeaderState.VERSION: 1,
    HeaderState.FLAGS: 1,
    HeaderState.HEADER_LENGTH: 4,
}

_NEXT_STATE = {
    HeaderState.SIGNATURE: HeaderState.VERSION,
    HeaderState.VERSION: HeaderState.FLAGS,
    HeaderState.FLAGS: HeaderState.HEADER_LENGTH,
}


class HeaderDecoder:
    """
    Resumable decoder for the FLV file header.

    decode() returns None whenever the cursor runs dry; calling it again
    after feeding more bytes continues from the exact byte reached.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.state = HeaderState.SIGNATURE
        self.version: int | None = None
        self.header_length: int = 0
        self._field = PartialField(_FIELD_WIDTHS[HeaderState.SIGNATURE])
        self._flags = 0
        self._padding_remaining = 0
        self._start_offset: int | None = None
        self._header: Header | None = None

    def decode(self, cursor: ByteCursor) -> Header | None:
        if self._start_offset is None:
            self._start_offset = cursor.consumed

        while self.state is not HeaderState.DONE:
            if self.state is HeaderState.PADDING:
                self._padding_remaining -= cursor.skip(self._padding_remaining)
                if self._padding_remaining:
                    return self._suspend(cursor)
                self._finish()
                continue

            if not self._field.fill(cursor):
                return self._suspend(cursor)
            self._advance(cursor)

        return self._header

    def _advance(self, cursor: ByteCursor) -> None:
        raw = self._field.value()

        if self.state is HeaderState.SIGNATURE:
            if raw != FLV_SIGNATURE:
                raise BadSignatureError(FLV_SIGNATURE, raw, offset=self._start_offset)
        elif self.state is HeaderState.VERSION:
            self.version = decode_u8(raw)
        elif self.state is HeaderState.FLAGS:
            self._flags = decode_u8(raw)
        elif self.state is HeaderState.HEADER_LENGTH:
            self.header_length = self._field.as_uint()
            if self.header_length < HEADER_SIZE:
                raise BadHeaderLengthError(self.header_length, HEADER_SIZE, offset=self._start_offset)
            self._padding_remaining = self.header_length - HEADER_SIZE
            if self._padding_remaining:
                logger.debug("[flv_header] Skipping %d bytes of header padding", self._padding_remaining)
            self.state = HeaderState.PADDING
            return

        self.state = _NEXT_STATE[self.state]
        self._field = PartialField(_FIELD_WIDTHS[self.state])

    def _finish(self) -> None:
        has_audio, has_video = decode_flags_byte(self._flags)
        self._header = Header(has_audio=has_audio, has_video=has_video)
        self.state = HeaderState.DONE
        logger.debug(
            "[flv_header] Decoded header: version=%s audio=%s video=%s length=%d",
            self.version,
            has_audio,
            has_video,
            self.header_length,
        )

    def _suspend(self, cursor: ByteCursor) -> None:
        if not cursor.closed:
            return None
        if self.state is HeaderState.PADDING:
            expected, actual = self.header_length - HEADER_SIZE, self.header_length - HEADER_SIZE - self._padding_remaining
        else:
            expected, actual = self._field.width, self._field.collected
        raise TruncatedInputError(
            self.state.value,
            expected,
            actual,
            record_offset=cursor.consumed - self._start_offset,
            offset=cursor.consumed,
        )


def encode_header(header: Header) -> bytes:
    """Encode the canonical 9-byte header (no padding)."""
    flags = encode_flags_byte(header.has_audio, header.has_video)
    return FLV_SIGNATURE + bytes((FLV_VERSION, flags)) + encode_u32(HEADER_SIZE, "header_length")
