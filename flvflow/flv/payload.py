"""
Payload dispatcher: maps the tag type discriminant to a tag variant.

The variant set is closed. Unknown discriminants are rejected rather than
skipped, since dropping a record would break backward traversal via
PreviousTagSize.

Payload interpretation (reading codec headers, script data objects) is
delegated to interpreter callables registered per tag type. Interpreters
never run while decoding; callers ask for them explicitly via interpret().
"""

import logging
from collections.abc import Callable
from typing import Any

from flvflow.flv.errors import UnknownTagTypeError
from flvflow.flv.media import parse_audio_header, parse_video_header
from flvflow.flv.tag import AudioTag, ScriptDataTag, Tag, TagType, VideoTag

logger = logging.getLogger(__name__)

TAG_CLASSES: dict[TagType, type[Tag]] = {
    TagType.AUDIO: AudioTag,
    TagType.VIDEO: VideoTag,
    TagType.SCRIPT_DATA: ScriptDataTag,
}

PayloadInterpreter = Callable[[bytes], Any]

_interpreters: dict[TagType, PayloadInterpreter] = {
    TagType.AUDIO: parse_audio_header,
    TagType.VIDEO: parse_video_header,
}


def tag_type_for(code: int, offset: int | None = None) -> TagType:
    """Validate a raw tag type byte."""
    try:
        return TagType(code)
    except ValueError:
        raise UnknownTagTypeError(code, offset) from None


def tag_class_for(code: int, offset: int | None = None) -> type[Tag]:
    return TAG_CLASSES[tag_type_for(code, offset)]


def build_tag(tag_type: int, timestamp: int, stream_id: int, data: bytes) -> Tag:
    """Construct the variant for tag_type with the payload stored verbatim."""
    return tag_class_for(tag_type)(timestamp=timestamp, stream_id=stream_id, data=data)


def split_tag(tag: Tag) -> tuple[TagType, bytes]:
    """Return (discriminant, payload) for the frame codec."""
    if type(tag) not in TAG_CLASSES.values():
        raise TypeError(f"Not an FLV tag variant: {type(tag).__name__}")
    return tag.tag_type, tag.data


def register_interpreter(tag_type: TagType, interpreter: PayloadInterpreter | None) -> None:
    """
    Install (or with None, remove) the payload interpreter for a tag type.

    Example:
        register_interpreter(TagType.SCRIPT_DATA, my_amf0_decoder)
    """
    tag_type = TagType(tag_type)
    if interpreter is None:
        _interpreters.pop(tag_type, None)
    else:
        _interpreters[tag_type] = interpreter
    logger.debug("[flv_payload] Interpreter for %s set to %r", tag_type.name, interpreter)


def interpret(tag: Tag) -> Any:
    """
    Run the registered interpreter on a tag's payload.

    Returns None when no interpreter is registered for the tag type.
    """
    interpreter = _interpreters.get(tag.tag_type)
    if interpreter is None:
        return None
    return interpreter(tag.data)
