"""
FLV tag data model.

A tag is one of exactly three variants (audio, video, script data), each
carrying a timestamp, a stream id and the payload bytes verbatim.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import ClassVar

from flvflow.flv.errors import RangeError
from flvflow.flv.fields import U32_MAX

# type(1) + data_size(3) + timestamp(3) + timestamp_ext(1) + stream_id(3)
TAG_HEADER_SIZE = 11
PREVIOUS_TAG_SIZE_WIDTH = 4


class TagType(IntEnum):
    AUDIO = 8
    VIDEO = 9
    SCRIPT_DATA = 18


@dataclass(frozen=True)
class Tag:
    """
    Base of the tag variants. Use AudioTag, VideoTag or ScriptDataTag.

    timestamp is in milliseconds (unsigned 32-bit), stream_id is 24-bit and
    conventionally 0.
    """

    tag_type: ClassVar[TagType]

    timestamp: int = 0
    stream_id: int = 0
    data: bytes = b""

    def __post_init__(self):
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    @property
    def tag_size(self) -> int:
        """On-wire size of this tag: envelope plus payload."""
        return TAG_HEADER_SIZE + len(self.data)

    @property
    def kind(self) -> str:
        return self.tag_type.name.lower()


@dataclass(frozen=True)
class AudioTag(Tag):
    tag_type: ClassVar[TagType] = TagType.AUDIO


@dataclass(frozen=True)
class VideoTag(Tag):
    tag_type: ClassVar[TagType] = TagType.VIDEO


@dataclass(frozen=True)
class ScriptDataTag(Tag):
    tag_type: ClassVar[TagType] = TagType.SCRIPT_DATA


def timestamp_to_timedelta(timestamp: int) -> timedelta:
    return timedelta(milliseconds=timestamp)


def timestamp_from_timedelta(duration: timedelta) -> int:
    """Convert a duration to a tag timestamp in whole milliseconds."""
    milliseconds = duration // timedelta(milliseconds=1)
    if not 0 <= milliseconds <= U32_MAX:
        raise RangeError("timestamp", milliseconds, U32_MAX)
    return milliseconds
