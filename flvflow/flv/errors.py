"""
Exceptions raised by the FLV codec.

Every error is terminal for the call that raised it. The codec never retries
or resynchronizes; callers decide whether to abort or restart.
"""


class FLVError(Exception):
    """Base exception for all FLV codec errors."""

    def __init__(self, message: str, offset: int | None = None):
        self.offset = offset
        self.message = message
        if offset is not None:
            message = f"{message} (stream offset {offset})"
        super().__init__(message)


class FormatError(FLVError):
    """The bytes do not describe a valid FLV structure."""

    pass


class BadSignatureError(FormatError):
    def __init__(self, expected: bytes, actual: bytes, offset: int | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Bad FLV signature: expected {expected!r}, got {actual!r}", offset)


class BadHeaderLengthError(FormatError):
    def __init__(self, length: int, minimum: int, offset: int | None = None):
        self.length = length
        self.minimum = minimum
        super().__init__(f"FLV header length {length} is shorter than the {minimum} fixed header bytes", offset)


class UnknownTagTypeError(FormatError):
    def __init__(self, code: int, offset: int | None = None):
        self.code = code
        super().__init__(f"Unknown FLV tag type: {code}", offset)


class PreviousTagSizeMismatchError(FormatError):
    def __init__(self, expected: int, actual: int, offset: int | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(f"PreviousTagSize mismatch: got {actual}, expected {expected}", offset)


class RangeError(FLVError, ValueError):
    """A value does not fit the fixed-width field it is encoded into."""

    def __init__(self, field: str, value: int, maximum: int, minimum: int = 0):
        self.field = field
        self.value = value
        self.maximum = maximum
        self.minimum = minimum
        super().__init__(f"{field} value {value} out of range [{minimum}, {maximum}]")


class TruncatedInputError(FLVError):
    """The source ended while a record was partially read."""

    def __init__(
        self,
        state: str,
        expected: int,
        actual: int,
        record_offset: int = 0,
        offset: int | None = None,
    ):
        self.state = state
        self.expected = expected
        self.actual = actual
        self.record_offset = record_offset
        super().__init__(
            f"Input ended in {state}: need {expected} bytes, got {actual} (record offset {record_offset})",
            offset,
        )
