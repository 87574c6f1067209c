"""
Byte cursor feeding the FLV decoders.

Collects chunks as they arrive from any byte source and hands them out on
demand. An empty cursor that is still open means "no bytes yet, try again";
an empty cursor that has been closed means "no bytes ever again".
"""


class ByteCursor:
    """
    Accumulating byte buffer with end-of-stream tracking.

    Consumed bytes are dropped immediately so memory stays bounded by what
    has been fed but not yet decoded.
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._total: int = 0
        self._consumed: int = 0  # Logical bytes consumed (for offset tracking)
        self._closed: bool = False

    @property
    def available(self) -> int:
        """Number of buffered bytes available for reading."""
        return self._total

    @property
    def consumed(self) -> int:
        """Total bytes consumed so far (absolute stream offset)."""
        return self._consumed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def at_eof(self) -> bool:
        """True when the source is closed and every byte has been consumed."""
        return self._closed and self._total == 0

    def feed(self, data: bytes) -> None:
        """Add bytes to the buffer."""
        if self._closed:
            raise RuntimeError("Cannot feed a closed ByteCursor")
        if data:
            self._chunks.append(bytes(data))
            self._total += len(data)

    def close(self) -> None:
        """Signal that no more bytes will be fed."""
        self._closed = True

    def peek(self, size: int) -> bytes:
        """Read up to size bytes without consuming."""
        if size <= 0:
            return b""
        result = bytearray()
        remaining = size
        for chunk in self._chunks:
            if remaining <= 0:
                break
            take = min(len(chunk), remaining)
            result.extend(chunk[:take])
            remaining -= take
        return bytes(result)

    def consume(self, size: int) -> bytes:
        """Remove and return up to size bytes from the front of the buffer."""
        if size <= 0:
            return b""
        if size > self._total:
            size = self._total

        result = bytearray()
        remaining = size
        while remaining > 0 and self._chunks:
            chunk = self._chunks[0]
            if len(chunk) <= remaining:
                result.extend(chunk)
                remaining -= len(chunk)
                self._chunks.pop(0)
            else:
                result.extend(chunk[:remaining])
                self._chunks[0] = chunk[remaining:]
                remaining = 0

        consumed = len(result)
        self._total -= consumed
        self._consumed += consumed
        return bytes(result)

    def skip(self, size: int) -> int:
        """Discard up to size bytes from the front. Returns actual bytes skipped."""
        if size <= 0:
            return 0
        actual = min(size, self._total)
        remaining = actual
        while remaining > 0 and self._chunks:
            chunk = self._chunks[0]
            if len(chunk) <= remaining:
                remaining -= len(chunk)
                self._chunks.pop(0)
            else:
                self._chunks[0] = chunk[remaining:]
                remaining = 0
        self._total -= actual
        self._consumed += actual
        return actual
