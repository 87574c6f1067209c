import pytest

from flvflow.flv.cursor import ByteCursor
from flvflow.flv.errors import (
    FormatError,
    PreviousTagSizeMismatchError,
    RangeError,
    TruncatedInputError,
    UnknownTagTypeError,
)
from flvflow.flv.frame import TagDecoder, TagState, encode_tag
from flvflow.flv.payload import build_tag, split_tag, tag_class_for
from flvflow.flv.tag import AudioTag, ScriptDataTag, Tag, TagType, VideoTag

from samples import AUDIO_TAG_BYTES, VIDEO_TAG_BYTES, random_partition


def _decode_one(data: bytes, close: bool = True) -> tuple[Tag | None, TagDecoder]:
    cursor = ByteCursor()
    cursor.feed(data)
    if close:
        cursor.close()
    decoder = TagDecoder()
    return decoder.decode(cursor), decoder


def test_decode_audio_tag():
    tag, decoder = _decode_one(AUDIO_TAG_BYTES)
    assert tag == AudioTag(timestamp=0, stream_id=0, data=b"\xaf")
    assert decoder.last_previous_tag_size == 0
    assert tag.tag_size == 12


def test_decode_video_tag():
    tag, decoder = _decode_one(VIDEO_TAG_BYTES)
    assert isinstance(tag, VideoTag)
    assert tag.timestamp == 40
    assert tag.data == b"\x17"
    assert decoder.last_previous_tag_size == 12


def test_timestamp_extension_is_high_byte():
    data = b"\x00\x00\x00\x00" + b"\x12" + b"\x00\x00\x00" + b"\x56\x78\x9a" + b"\x01" + b"\x00\x00\x00"
    tag, _ = _decode_one(data)
    assert isinstance(tag, ScriptDataTag)
    assert tag.timestamp == 0x01_56789A
    assert tag.data == b""


def test_non_zero_stream_id_is_preserved():
    tag = VideoTag(timestamp=5, stream_id=0xABCDEF, data=b"xyz")
    data = encode_tag(tag, 0)
    assert data[12:15] == b"\xab\xcd\xef"
    decoded, _ = _decode_one(data)
    assert decoded == tag


@pytest.mark.parametrize("tag_cls", [AudioTag, VideoTag, ScriptDataTag])
@pytest.mark.parametrize("timestamp", [0, 40, 0xFF_FFFF, 0x0100_0000, 0xFFFF_FFFF])
def test_tag_round_trip(tag_cls, timestamp):
    tag = tag_cls(timestamp=timestamp, stream_id=7, data=bytes(range(256)) * 3)
    decoded, decoder = _decode_one(encode_tag(tag, 1234))
    assert decoded == tag
    assert decoder.last_previous_tag_size == 1234


def test_encode_tag_layout():
    data = encode_tag(AudioTag(timestamp=0, stream_id=0, data=b"\xaf"), 0)
    assert data == AUDIO_TAG_BYTES
    data = encode_tag(VideoTag(timestamp=40, stream_id=0, data=b"\x17"), 12)
    assert data == VIDEO_TAG_BYTES


@pytest.mark.parametrize("code", [0, 7, 10, 17, 19, 255])
def test_unknown_tag_type_rejected(code):
    data = b"\x00\x00\x00\x00" + bytes((code,)) + b"\x00\x00\x01" + b"\x00" * 7 + b"\x00"
    with pytest.raises(UnknownTagTypeError) as exc_info:
        _decode_one(data)
    assert isinstance(exc_info.value, FormatError)
    assert exc_info.value.code == code
    assert exc_info.value.offset == 4


def test_unknown_tag_type_rejected_before_payload_arrives():
    with pytest.raises(UnknownTagTypeError):
        _decode_one(b"\x00\x00\x00\x00\x63", close=False)


def test_field_split_matches_whole_field():
    cursor = ByteCursor()
    decoder = TagDecoder()

    cursor.feed(AUDIO_TAG_BYTES[:2])
    assert decoder.decode(cursor) is None
    assert decoder.state is TagState.PREV_SIZE
    cursor.feed(AUDIO_TAG_BYTES[2:4])
    assert decoder.decode(cursor) is None
    assert decoder.state is TagState.TAG_TYPE

    cursor.feed(AUDIO_TAG_BYTES[4:])
    assert decoder.decode(cursor) == _decode_one(AUDIO_TAG_BYTES)[0]


@pytest.mark.parametrize("seed", range(25))
def test_chunk_invariance(seed):
    tag = ScriptDataTag(timestamp=0x02_000010, stream_id=1, data=b"onMetaData" * 5)
    data = encode_tag(tag, 99)

    cursor = ByteCursor()
    decoder = TagDecoder()
    decoded = None
    for chunk in random_partition(data, seed):
        assert decoded is None
        cursor.feed(chunk)
        decoded = decoder.decode(cursor)
    assert decoded == tag


def test_byte_at_a_time():
    data = encode_tag(VideoTag(timestamp=1, stream_id=2, data=b"\x00" * 10), 3)
    cursor = ByteCursor()
    decoder = TagDecoder()
    results = []
    for b in data:
        cursor.feed(bytes((b,)))
        results.append(decoder.decode(cursor))
    assert results[:-1] == [None] * (len(data) - 1)
    assert results[-1] == VideoTag(timestamp=1, stream_id=2, data=b"\x00" * 10)


def test_truncated_payload():
    with pytest.raises(TruncatedInputError) as exc_info:
        _decode_one(encode_tag(AudioTag(data=b"abcdef"), 0)[:-2])
    err = exc_info.value
    assert err.state == "payload"
    assert err.expected == 6
    assert err.actual == 4
    assert err.record_offset == 15 + 4


def test_truncated_envelope():
    with pytest.raises(TruncatedInputError) as exc_info:
        _decode_one(AUDIO_TAG_BYTES[:6])
    assert exc_info.value.state == "data_size"
    assert exc_info.value.expected == 3
    assert exc_info.value.actual == 1


def test_partial_input_on_open_cursor_suspends():
    tag, decoder = _decode_one(AUDIO_TAG_BYTES[:-1], close=False)
    assert tag is None
    assert decoder.state is TagState.PAYLOAD
    assert not decoder.finished


def test_clean_end_before_record():
    tag, decoder = _decode_one(b"")
    assert tag is None
    assert decoder.finished
    assert decoder.trailing_previous_tag_size is None


def test_trailing_previous_tag_size_is_a_clean_end():
    tag, decoder = _decode_one(b"\x00\x00\x00\x0c")
    assert tag is None
    assert decoder.finished
    assert decoder.trailing_previous_tag_size == 12


def test_expected_previous_tag_size_mismatch():
    cursor = ByteCursor()
    cursor.feed(VIDEO_TAG_BYTES)
    with pytest.raises(PreviousTagSizeMismatchError) as exc_info:
        TagDecoder().decode(cursor, expected_previous_tag_size=0)
    assert exc_info.value.expected == 0
    assert exc_info.value.actual == 12


@pytest.mark.parametrize(
    "tag, previous_tag_size, field",
    [
        (AudioTag(timestamp=1 << 32), 0, "timestamp"),
        (AudioTag(timestamp=-1), 0, "timestamp"),
        (AudioTag(stream_id=1 << 24), 0, "stream_id"),
        (AudioTag(), 1 << 32, "previous_tag_size"),
    ],
)
def test_encode_range_errors(tag, previous_tag_size, field):
    with pytest.raises(RangeError) as exc_info:
        encode_tag(tag, previous_tag_size)
    assert exc_info.value.field == field


def test_encode_oversized_payload():
    with pytest.raises(RangeError) as exc_info:
        encode_tag(ScriptDataTag(data=bytes(0x100_0000)), 0)
    assert exc_info.value.field == "data_size"


def test_dispatch_table():
    assert tag_class_for(8) is AudioTag
    assert tag_class_for(9) is VideoTag
    assert tag_class_for(18) is ScriptDataTag
    with pytest.raises(UnknownTagTypeError):
        tag_class_for(20)


def test_build_and_split_are_inverse():
    tag = build_tag(TagType.VIDEO, 10, 0, b"\x01\x02")
    assert tag == VideoTag(timestamp=10, stream_id=0, data=b"\x01\x02")
    assert split_tag(tag) == (TagType.VIDEO, b"\x01\x02")


def test_split_rejects_base_tag():
    with pytest.raises(TypeError):
        split_tag(Tag())


def test_tag_variants_differ_by_type():
    assert AudioTag(data=b"x") != VideoTag(data=b"x")
    assert AudioTag(data=bytearray(b"x")) == AudioTag(data=b"x")
