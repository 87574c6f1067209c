"""
Hand-written FLV byte samples and chunking helpers.

The sample stream is written out byte by byte so the tests check the wire
layout independently of the encoder.
"""

import random

HEADER_BYTES = b"FLV\x01\x05\x00\x00\x00\x09"

AUDIO_TAG_BYTES = (
    b"\x00\x00\x00\x00"  # PreviousTagSize0
    b"\x08"  # audio
    b"\x00\x00\x01"  # data size
    b"\x00\x00\x00"  # timestamp
    b"\x00"  # timestamp extended
    b"\x00\x00\x00"  # stream id
    b"\xaf"
)

VIDEO_TAG_BYTES = (
    b"\x00\x00\x00\x0c"  # size of the audio tag (11 + 1)
    b"\x09"  # video
    b"\x00\x00\x01"
    b"\x00\x00\x28"  # 40 ms
    b"\x00"
    b"\x00\x00\x00"
    b"\x17"
)

TRAILING_SIZE_BYTES = b"\x00\x00\x00\x0c"

MINIMAL_STREAM = HEADER_BYTES + AUDIO_TAG_BYTES + VIDEO_TAG_BYTES + TRAILING_SIZE_BYTES


def split_bytes(data: bytes, sizes) -> list[bytes]:
    """Split data into chunks of the given sizes; the remainder forms the last chunk."""
    chunks = []
    pos = 0
    for size in sizes:
        if pos >= len(data):
            break
        chunks.append(data[pos : pos + size])
        pos += size
    if pos < len(data):
        chunks.append(data[pos:])
    return chunks


def random_partition(data: bytes, seed: int, max_chunk: int = 7) -> list[bytes]:
    """Split data into non-empty chunks of random sizes (deterministic per seed)."""
    rng = random.Random(seed)
    chunks = []
    pos = 0
    while pos < len(data):
        size = rng.randint(1, max_chunk)
        chunks.append(data[pos : pos + size])
        pos += size
    return chunks
