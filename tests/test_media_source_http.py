import asyncio
import threading

import aiohttp
import pytest
from aiohttp import test_utils, web

from flvflow.cli import main
from flvflow.configs import settings
from flvflow.flv.demuxer import FLVDemuxer
from flvflow.flv.header import Header
from flvflow.flv.tag import AudioTag, VideoTag
from flvflow.media_source import HTTPMediaSource

from samples import MINIMAL_STREAM


class _ServerThread(threading.Thread):
    """Serves an aiohttp app on its own event loop so sync and async tests can both reach it."""

    def __init__(self, app: web.Application, seen_headers: list) -> None:
        super().__init__(daemon=True)
        self.app = app
        self.seen_headers = seen_headers
        self.server: test_utils.TestServer | None = None
        self.ready = threading.Event()
        self._loop = None
        self._stop_event = None

    def run(self) -> None:
        asyncio.run(self._serve())

    async def _serve(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        self.server = test_utils.TestServer(self.app)
        await self.server.start_server()
        self.ready.set()
        await self._stop_event.wait()
        await self.server.close()

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    def stop(self) -> None:
        self._loop.call_soon_threadsafe(self._stop_event.set)
        self.join(timeout=5)


@pytest.fixture
def flv_server():
    seen_headers = []

    async def serve_flv(request: web.Request) -> web.Response:
        seen_headers.append(request.headers.copy())
        if "Range" not in request.headers:
            return web.Response(body=MINIMAL_STREAM, content_type="video/x-flv")
        requested = request.http_range
        return web.Response(body=MINIMAL_STREAM[requested], status=206, content_type="video/x-flv")

    async def serve_missing(request: web.Request) -> web.Response:
        return web.Response(status=404)

    app = web.Application()
    app.router.add_get("/live.flv", serve_flv)
    app.router.add_get("/missing.flv", serve_missing)

    thread = _ServerThread(app, seen_headers)
    thread.start()
    assert thread.ready.wait(timeout=5)
    yield thread
    thread.stop()


@pytest.mark.asyncio
async def test_http_source_full_get(flv_server):
    source = HTTPMediaSource(flv_server.url("/live.flv"), headers={"x-token": "abc"})
    assert source.name == flv_server.url("/live.flv")

    chunks = [chunk async for chunk in source.stream()]
    assert b"".join(chunks) == MINIMAL_STREAM

    headers = flv_server.seen_headers[-1]
    assert "Range" not in headers
    assert headers["User-Agent"] == settings.user_agent
    assert headers["X-Token"] == "abc"


@pytest.mark.asyncio
async def test_http_source_ranged_get(flv_server):
    source = HTTPMediaSource(flv_server.url("/live.flv"), headers={"user-agent": "flvflow-test"})

    data = b"".join([chunk async for chunk in source.stream(offset=9, limit=16)])
    assert data == MINIMAL_STREAM[9:25]
    headers = flv_server.seen_headers[-1]
    assert headers["Range"] == "bytes=9-24"
    assert headers["User-Agent"] == "flvflow-test"

    tail = b"".join([chunk async for chunk in source.stream(offset=25)])
    assert tail == MINIMAL_STREAM[25:]
    assert flv_server.seen_headers[-1]["Range"] == "bytes=25-"


@pytest.mark.asyncio
async def test_http_source_feeds_demuxer(flv_server):
    chunks = HTTPMediaSource(flv_server.url("/live.flv")).stream()
    demuxer = FLVDemuxer()
    assert await demuxer.read_header(chunks) == Header(True, True)
    tags = [tag async for tag in demuxer.iter_tags(chunks)]
    assert tags == [AudioTag(data=b"\xaf"), VideoTag(timestamp=40, data=b"\x17")]


@pytest.mark.asyncio
async def test_http_source_error_status(flv_server):
    source = HTTPMediaSource(flv_server.url("/missing.flv"))
    with pytest.raises(aiohttp.ClientResponseError) as exc_info:
        async for _ in source.stream():
            pass
    assert exc_info.value.status == 404


def test_main_over_http(flv_server, capsys):
    assert main([flv_server.url("/live.flv")]) == 0
    assert capsys.readouterr().out.count("[[tags]]") == 2
    assert main([flv_server.url("/missing.flv")]) == 1
