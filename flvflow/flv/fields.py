"""
Primitive FLV field codec.

Fixed-width big-endian integers (including the 24-bit fields FLV uses for
sizes, timestamps and stream ids), the header flags byte, and the bounded
slot used to assemble a field across partial reads.
"""

import struct

from flvflow.flv.cursor import ByteCursor
from flvflow.flv.errors import RangeError

U8_MAX = 0xFF
U24_MAX = 0xFF_FFFF
U32_MAX = 0xFFFF_FFFF

# Header flags byte
FLAG_VIDEO = 0x01  # bit 0
FLAG_AUDIO = 0x04  # bit 2

# Largest field ever assembled byte-by-byte (PreviousTagSize / header length)
MAX_FIELD_WIDTH = 4


def _check_range(value: int, maximum: int, field: str) -> None:
    if not 0 <= value <= maximum:
        raise RangeError(field, value, maximum)


def read_uint(data: bytes, pos: int, length: int) -> int:
    """Read an unsigned integer of N bytes (big-endian)."""
    if length == 0:
        return 0
    value = 0
    for i in range(length):
        value = (value << 8) | data[pos + i]
    return value


def decode_u8(data: bytes, pos: int = 0) -> int:
    return data[pos]


def encode_u8(value: int, field: str = "u8") -> bytes:
    _check_range(value, U8_MAX, field)
    return bytes((value,))


def decode_u24(data: bytes, pos: int = 0) -> int:
    """Read 3 bytes big-endian, zero-extended."""
    if pos + 3 > len(data):
        raise ValueError(f"u24: need 3 bytes at pos {pos}, only {len(data) - pos} available")
    return read_uint(data, pos, 3)


def encode_u24(value: int, field: str = "u24") -> bytes:
    _check_range(value, U24_MAX, field)
    return value.to_bytes(3, "big")


def decode_u32(data: bytes, pos: int = 0) -> int:
    return struct.unpack_from(">I", data, pos)[0]


def encode_u32(value: int, field: str = "u32") -> bytes:
    _check_range(value, U32_MAX, field)
    return struct.pack(">I", value)


def decode_flags_byte(flags: int) -> tuple[bool, bool]:
    """
    Extract the stream-presence bits from the header flags byte.

    Returns:
        (has_audio, has_video). Reserved bits are ignored.
    """
    return bool(flags & FLAG_AUDIO), bool(flags & FLAG_VIDEO)


def encode_flags_byte(has_audio: bool, has_video: bool) -> int:
    """Build the header flags byte with all reserved bits zero."""
    flags = 0
    if has_audio:
        flags |= FLAG_AUDIO
    if has_video:
        flags |= FLAG_VIDEO
    return flags


class PartialField:
    """
    Bytes collected so far for the field currently being assembled.

    The slot never holds more than the field width, so resuming after any
    split of the input only ever buffers a few bytes.
    """

    __slots__ = ("width", "_buf")

    def __init__(self, width: int) -> None:
        if not 0 < width <= MAX_FIELD_WIDTH:
            raise ValueError(f"PartialField width must be 1..{MAX_FIELD_WIDTH}, got {width}")
        self.width = width
        self._buf = bytearray()

    @property
    def collected(self) -> int:
        return len(self._buf)

    @property
    def complete(self) -> bool:
        return len(self._buf) == self.width

    def fill(self, cursor: ByteCursor) -> bool:
        """Take the missing bytes (or as many as are available) from cursor."""
        missing = self.width - len(self._buf)
        if missing:
            self._buf.extend(cursor.consume(missing))
        return len(self._buf) == self.width

    def value(self) -> bytes:
        return bytes(self._buf)

    def as_uint(self) -> int:
        return read_uint(self._buf, 0, self.width)
