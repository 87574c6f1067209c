"""
Tag frame codec.

Each record on the wire is:
  PreviousTagSize (4) | TagType (1) | DataSize (3) | Timestamp (3) |
  TimestampExtended (1) | StreamID (3) | Payload (DataSize)

TagDecoder walks those fields as an explicit state machine so decoding can
stop at any byte and resume later without re-reading anything.
"""

from enum import Enum

from flvflow.flv.cursor import ByteCursor
from flvflow.flv.errors import PreviousTagSizeMismatchError, RangeError, TruncatedInputError
from flvflow.flv.fields import U32_MAX, PartialField, encode_u24, encode_u32, encode_u8
from flvflow.flv.payload import build_tag, split_tag, tag_type_for
from flvflow.flv.tag import PREVIOUS_TAG_SIZE_WIDTH, Tag


class TagState(Enum):
    PREV_SIZE = "prev_size"
    TAG_TYPE = "tag_type"
    DATA_SIZE = "data_size"
    TIMESTAMP = "timestamp"
    TIMESTAMP_EXT = "timestamp_ext"
    STREAM_ID = "stream_id"
    PAYLOAD = "payload"


_FIELD_WIDTHS = {
    TagState.PREV_SIZE: PREVIOUS_TAG_SIZE_WIDTH,
    TagState.TAG_TYPE: 1,
    TagState.DATA_SIZE: 3,
    TagState.TIMESTAMP: 3,
    TagState.TIMESTAMP_EXT: 1,
    TagState.STREAM_ID: 3,
}

_NEXT_STATE = {
    TagState.PREV_SIZE: TagState.TAG_TYPE,
    TagState.TAG_TYPE: TagState.DATA_SIZE,
    TagState.DATA_SIZE: TagState.TIMESTAMP,
    TagState.TIMESTAMP: TagState.TIMESTAMP_EXT,
    TagState.TIMESTAMP_EXT: TagState.STREAM_ID,
    TagState.STREAM_ID: TagState.PAYLOAD,
}


class TagDecoder:
    """
    Resumable decoder for one PreviousTagSize-prefixed tag at a time.

    decode() returns a Tag, or None when it needs more input or the stream
    ended cleanly (check finished). A closed cursor with a partially read
    record raises TruncatedInputError.
    """

    def __init__(self) -> None:
        self.finished = False
        # Set when the stream ends right after a PreviousTagSize field
        self.trailing_previous_tag_size: int | None = None
        # PreviousTagSize read for the most recently returned tag
        self.last_previous_tag_size: int | None = None
        self._reset_record()

    def _reset_record(self) -> None:
        self.state = TagState.PREV_SIZE
        self.previous_tag_size: int | None = None
        self._field = PartialField(_FIELD_WIDTHS[TagState.PREV_SIZE])
        self._tag_type = None
        self._data_size = 0
        self._timestamp = 0
        self._stream_id = 0
        self._payload = bytearray()
        self._record_start: int | None = None
        self._expected_previous_tag_size: int | None = None

    def decode(self, cursor: ByteCursor, expected_previous_tag_size: int | None = None) -> Tag | None:
        """
        Decode the next tag from cursor.

        Args:
            cursor: Byte source.
            expected_previous_tag_size: When given, the PreviousTagSize field
                must match it or PreviousTagSizeMismatchError is raised.
        """
        if self.finished:
            return None
        if self._record_start is None:
            self._record_start = cursor.consumed
        self._expected_previous_tag_size = expected_previous_tag_size

        while True:
            if self.state is TagState.PAYLOAD:
                missing = self._data_size - len(self._payload)
                if missing:
                    self._payload.extend(cursor.consume(missing))
                if len(self._payload) < self._data_size:
                    return self._suspend(cursor)
                tag = build_tag(self._tag_type, self._timestamp, self._stream_id, bytes(self._payload))
                self.last_previous_tag_size = self.previous_tag_size
                self._reset_record()
                return tag

            if not self._field.fill(cursor):
                return self._suspend(cursor)
            self._advance()

    def _advance(self) -> None:
        value = self._field.as_uint()

        if self.state is TagState.PREV_SIZE:
            self.previous_tag_size = value
            expected = self._expected_previous_tag_size
            if expected is not None and value != expected:
                raise PreviousTagSizeMismatchError(expected, value, offset=self._record_start)
        elif self.state is TagState.TAG_TYPE:
            self._tag_type = tag_type_for(value, offset=self._record_start + PREVIOUS_TAG_SIZE_WIDTH)
        elif self.state is TagState.DATA_SIZE:
            self._data_size = value
        elif self.state is TagState.TIMESTAMP:
            self._timestamp = value
        elif self.state is TagState.TIMESTAMP_EXT:
            self._timestamp |= value << 24
        elif self.state is TagState.STREAM_ID:
            self._stream_id = value

        self.state = _NEXT_STATE[self.state]
        if self.state is not TagState.PAYLOAD:
            self._field = PartialField(_FIELD_WIDTHS[self.state])

    def _suspend(self, cursor: ByteCursor) -> None:
        if not cursor.closed:
            return None

        record_bytes = cursor.consumed - self._record_start
        if record_bytes == 0:
            self.finished = True
            return None
        if self.state is TagState.TAG_TYPE and self._field.collected == 0:
            # FLV files end with the PreviousTagSize of the last tag
            self.trailing_previous_tag_size = self.previous_tag_size
            self.finished = True
            return None

        if self.state is TagState.PAYLOAD:
            expected, actual = self._data_size, len(self._payload)
        else:
            expected, actual = self._field.width, self._field.collected
        raise TruncatedInputError(
            self.state.value,
            expected,
            actual,
            record_offset=record_bytes,
            offset=cursor.consumed,
        )


def encode_tag(tag: Tag, previous_tag_size: int) -> bytes:
    """Encode PreviousTagSize followed by the tag envelope and payload."""
    tag_type, data = split_tag(tag)
    if not 0 <= tag.timestamp <= U32_MAX:
        raise RangeError("timestamp", tag.timestamp, U32_MAX)
    return b"".join(
        (
            encode_u32(previous_tag_size, "previous_tag_size"),
            encode_u8(tag_type, "tag_type"),
            encode_u24(len(data), "data_size"),
            encode_u24(tag.timestamp & 0xFF_FFFF, "timestamp"),
            encode_u8(tag.timestamp >> 24, "timestamp_ext"),
            encode_u24(tag.stream_id, "stream_id"),
            data,
        )
    )
