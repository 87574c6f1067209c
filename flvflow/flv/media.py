"""
Audio and video tag header interpretation.

The codec core keeps tag payloads opaque. These helpers read the small
codec headers at the front of audio and video payloads for callers that
want them (the CLI, the payload interpreter registry).

Audio payload, first byte:
  sound_format(4) | sound_rate(2) | sound_size(1) | sound_type(1)
  AAC adds one byte: aac_packet_type

Video payload, first byte:
  frame_type(4) | codec_id(4)
  AVC (unless a video info/command frame) adds avc_packet_type(1) and a
  signed 24-bit composition time offset
"""

from dataclasses import dataclass
from enum import IntEnum

from flvflow.flv.errors import FormatError, RangeError, TruncatedInputError
from flvflow.flv.fields import U24_MAX, decode_u24, encode_u24

S24_MIN = -0x80_0000
S24_MAX = 0x7F_FFFF


class SoundFormat(IntEnum):
    LINEAR_PCM_PLATFORM_ENDIAN = 0
    ADPCM = 1
    MP3 = 2
    LINEAR_PCM_LITTLE_ENDIAN = 3
    NELLYMOSER_16KHZ_MONO = 4
    NELLYMOSER_8KHZ_MONO = 5
    NELLYMOSER = 6
    G711_A_LAW = 7
    G711_MU_LAW = 8
    AAC = 10
    SPEEX = 11
    MP3_8KHZ = 14
    DEVICE_SPECIFIC = 15


class SoundRate(IntEnum):
    """Sampling rate. AAC always signals KHZ44."""

    KHZ5 = 0  # 5.5 kHz
    KHZ11 = 1
    KHZ22 = 2
    KHZ44 = 3


class SoundSize(IntEnum):
    BIT8 = 0
    BIT16 = 1


class SoundType(IntEnum):
    MONO = 0
    STEREO = 1


class AacPacketType(IntEnum):
    SEQUENCE_HEADER = 0
    RAW = 1


class FrameType(IntEnum):
    KEY_FRAME = 1
    INTER_FRAME = 2
    DISPOSABLE_INTER_FRAME = 3  # H.263 only
    GENERATED_KEY_FRAME = 4
    VIDEO_INFO_OR_COMMAND_FRAME = 5


class CodecId(IntEnum):
    JPEG = 1
    H263 = 2
    SCREEN_VIDEO = 3
    VP6 = 4
    VP6_WITH_ALPHA = 5
    SCREEN_VIDEO_V2 = 6
    AVC = 7


class AvcPacketType(IntEnum):
    SEQUENCE_HEADER = 0
    NAL_UNIT = 1
    END_OF_SEQUENCE = 2


@dataclass(frozen=True)
class AudioTagHeader:
    sound_format: SoundFormat
    sound_rate: SoundRate
    sound_size: SoundSize
    sound_type: SoundType
    aac_packet_type: AacPacketType | None = None
    header_size: int = 1  # Bytes of payload taken by this header


@dataclass(frozen=True)
class VideoTagHeader:
    frame_type: FrameType
    codec_id: CodecId
    avc_packet_type: AvcPacketType | None = None
    composition_time: int | None = None  # Signed milliseconds
    header_size: int = 1

    @property
    def is_keyframe(self) -> bool:
        return self.frame_type in (FrameType.KEY_FRAME, FrameType.GENERATED_KEY_FRAME)


def decode_s24(data: bytes, pos: int = 0) -> int:
    """Read a signed 24-bit big-endian integer."""
    value = decode_u24(data, pos)
    if value & 0x80_0000:
        value -= 1 << 24
    return value


def encode_s24(value: int, field: str = "s24") -> bytes:
    if not S24_MIN <= value <= S24_MAX:
        raise RangeError(field, value, S24_MAX, S24_MIN)
    return encode_u24(value & U24_MAX, field)


def _enum_value(enum_cls, code: int, what: str):
    try:
        return enum_cls(code)
    except ValueError:
        raise FormatError(f"Unknown {what}: {code}") from None


def _require(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise TruncatedInputError(what, size, len(data))


def parse_audio_header(data: bytes) -> AudioTagHeader:
    _require(data, 1, "audio_header")
    b = data[0]
    sound_format = _enum_value(SoundFormat, b >> 4, "FLV sound format")
    sound_rate = SoundRate((b >> 2) & 0b11)
    sound_size = SoundSize((b >> 1) & 0b1)
    sound_type = SoundType(b & 0b1)

    if sound_format != SoundFormat.AAC:
        return AudioTagHeader(sound_format, sound_rate, sound_size, sound_type)

    _require(data, 2, "aac_packet_type")
    aac_packet_type = _enum_value(AacPacketType, data[1], "AAC packet type")
    return AudioTagHeader(sound_format, sound_rate, sound_size, sound_type, aac_packet_type, header_size=2)


def parse_video_header(data: bytes) -> VideoTagHeader:
    _require(data, 1, "video_header")
    frame_type = _enum_value(FrameType, data[0] >> 4, "video frame type")
    codec_id = _enum_value(CodecId, data[0] & 0x0F, "video codec ID")

    if codec_id != CodecId.AVC or frame_type == FrameType.VIDEO_INFO_OR_COMMAND_FRAME:
        return VideoTagHeader(frame_type, codec_id)

    _require(data, 5, "avc_header")
    avc_packet_type = _enum_value(AvcPacketType, data[1], "AVC packet type")
    composition_time = decode_s24(data, 2)
    return VideoTagHeader(frame_type, codec_id, avc_packet_type, composition_time, header_size=5)


def build_audio_header(header: AudioTagHeader) -> bytes:
    """Encode an audio tag header (the bytes to prepend to the codec data)."""
    b = (header.sound_format << 4) | (header.sound_rate << 2) | (header.sound_size << 1) | header.sound_type
    if header.sound_format == SoundFormat.AAC:
        if header.aac_packet_type is None:
            raise ValueError("AAC audio header requires aac_packet_type")
        return bytes((b, header.aac_packet_type))
    return bytes((b,))


def build_video_header(header: VideoTagHeader) -> bytes:
    """Encode a video tag header (the bytes to prepend to the codec data)."""
    first = bytes(((header.frame_type << 4) | header.codec_id,))
    if header.codec_id != CodecId.AVC or header.frame_type == FrameType.VIDEO_INFO_OR_COMMAND_FRAME:
        return first
    if header.avc_packet_type is None:
        raise ValueError("AVC video header requires avc_packet_type")
    return first + bytes((header.avc_packet_type,)) + encode_s24(header.composition_time or 0, "composition_time")
