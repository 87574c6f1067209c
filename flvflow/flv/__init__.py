"""
FLV container codec.

Provides a resumable, pure Python implementation of the FLV file format:

- cursor: Byte cursor distinguishing "no bytes yet" from "end of stream"
- fields: Fixed-width big-endian field codec (u8/u24/u32, header flags)
- header: FLV file header codec
- tag: Tag variants (audio, video, script data)
- frame: PreviousTagSize-prefixed tag frame codec
- payload: Tag type dispatch and pluggable payload interpreters
- codec: Stream decoder/encoder driver
- media: Audio/video tag header interpretation
- demuxer: Async demuxer over an AsyncIterator[bytes]
"""

from flvflow.flv.codec import FLVDecoder, FLVEncoder, decode_stream, encode_stream
from flvflow.flv.cursor import ByteCursor
from flvflow.flv.errors import (
    BadHeaderLengthError,
    BadSignatureError,
    FLVError,
    FormatError,
    PreviousTagSizeMismatchError,
    RangeError,
    TruncatedInputError,
    UnknownTagTypeError,
)
from flvflow.flv.header import Header
from flvflow.flv.tag import AudioTag, ScriptDataTag, Tag, TagType, VideoTag

__all__ = [
    "AudioTag",
    "BadHeaderLengthError",
    "BadSignatureError",
    "ByteCursor",
    "FLVDecoder",
    "FLVEncoder",
    "FLVError",
    "FormatError",
    "Header",
    "PreviousTagSizeMismatchError",
    "RangeError",
    "ScriptDataTag",
    "Tag",
    "TagType",
    "TruncatedInputError",
    "UnknownTagTypeError",
    "VideoTag",
    "decode_stream",
    "encode_stream",
]
