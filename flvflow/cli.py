"""flvflow-inspect: print the header and tags of an FLV file or URL."""

import argparse
import asyncio
import logging
import sys
from contextlib import aclosing

import aiohttp

from flvflow.configs import settings
from flvflow.flv.demuxer import FLVDemuxer
from flvflow.flv.errors import FLVError
from flvflow.flv.payload import interpret
from flvflow.media_source import MediaSource, open_media_source

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="flvflow-inspect", description="Print the header and tags of an FLV stream")
    p.add_argument("location", help="Path or http(s) URL of the FLV stream")
    p.add_argument("--strict", action="store_true", help="Reject mismatching PreviousTagSize fields")
    p.add_argument("--limit", type=int, default=None, help="Stop after this many tags")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=settings.log_level)
    return p.parse_args(argv)


def _describe(tag) -> list[str]:
    lines = [
        "[[tags]]",
        f"type = {tag.kind}",
        f"timestamp = {tag.timestamp}",
        f"stream_id = {tag.stream_id}",
        f"size = {tag.tag_size}",
    ]
    try:
        info = interpret(tag)
    except FLVError as e:
        lines.append(f"payload_error = {e}")
        return lines
    if info is not None:
        for name, value in vars(info).items():
            lines.append(f"{name} = {getattr(value, 'name', value)}")
    return lines


async def inspect(source: MediaSource, strict: bool = False, limit: int | None = None, out=None) -> int:
    """
    Print the stream to out; returns the number of tags printed.

    With a limit, no bytes past the last printed tag are decoded.
    """
    out = out or sys.stdout
    demuxer = FLVDemuxer(strict_previous_tag_size=strict or None)
    count = 0

    async with aclosing(source.stream()) as chunks:
        header = await demuxer.read_header(chunks)
        print("[header]", file=out)
        print(f"has_audio = {str(header.has_audio).lower()}", file=out)
        print(f"has_video = {str(header.has_video).lower()}", file=out)
        print("", file=out)

        if limit is not None and limit <= 0:
            return count
        async with aclosing(demuxer.iter_tags(chunks)) as tags:
            async for tag in tags:
                print("\n".join(_describe(tag)), file=out)
                print("", file=out)
                count += 1
                if count == limit:
                    break
    return count


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    source = open_media_source(args.location)
    try:
        count = asyncio.run(inspect(source, strict=args.strict, limit=args.limit))
    except FLVError as e:
        logger.error("Failed to decode %s: %s", source.name, e)
        return 1
    except (OSError, aiohttp.ClientError) as e:
        logger.error("Failed to read %s: %s", source.name, e)
        return 1
    logger.info("Decoded %d tags from %s", count, source.name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
