"""Pytest configuration and shared fakes for clipframes tests."""

import asyncio
import json
from collections import deque

import pytest


def pytest_configure(config):
    # Register custom markers
    config.addinivalue_line("markers", "ffmpeg: mark test as requiring ffmpeg binaries")


class ScriptedStream:
    """Async byte stream replaying scripted chunks, ``StreamReader``-style.

    Items may be ``bytes`` or an exception instance to raise.  A chunk
    longer than the requested size is split and the rest kept for the
    next read.  With ``hang=True`` the stream never reaches EOF.
    """

    def __init__(self, chunks, hang=False):
        self._chunks = deque(chunks)
        self._hang = hang
        self.reads = 0

    async def read(self, n=-1):
        self.reads += 1
        await asyncio.sleep(0)
        if self._chunks:
            item = self._chunks.popleft()
            if isinstance(item, BaseException):
                raise item
            if 0 < n < len(item):
                self._chunks.appendleft(item[n:])
                item = item[:n]
            return item
        if self._hang:
            await asyncio.Event().wait()
        return b""


class FakeProcess:
    """Stand-in for ``asyncio.subprocess.Process``."""

    def __init__(self, stdout=b"", stderr=b"", returncode=0, hang=False):
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        if stdout:
            self.stdout.feed_data(stdout)
        if not hang:
            self.stdout.feed_eof()
        if stderr:
            self.stderr.feed_data(stderr)
        self.stderr.feed_eof()
        self.returncode = None
        self.killed = False
        self._final_returncode = returncode
        self._hang = hang
        self._exited = asyncio.Event()

    async def communicate(self):
        out = await self.stdout.read()
        err = await self.stderr.read()
        self.returncode = self._final_returncode
        return out, err

    async def wait(self):
        if self._hang:
            await self._exited.wait()
        elif self.returncode is None:
            self.returncode = self._final_returncode
        return self.returncode

    def kill(self):
        self.killed = True
        self.returncode = -9
        self._exited.set()
        self.stdout.feed_eof()


def probe_payload(codec_name="h264", width=1000, height=500, with_audio=True):
    streams = []
    if with_audio:
        streams.append({"index": 0, "codec_type": "audio", "codec_name": "aac"})
    streams.append({
        "index": len(streams),
        "codec_type": "video",
        "codec_name": codec_name,
        "width": width,
        "height": height,
    })
    return json.dumps({"streams": streams}).encode()


def byte_pattern(length, start=0):
    """Incrementing byte pattern, wrapping at 256."""
    return bytes((start + i) % 256 for i in range(length))


@pytest.fixture
def scripted_stream():
    return ScriptedStream


@pytest.fixture
def fake_process():
    return FakeProcess


@pytest.fixture
def pattern():
    return byte_pattern


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    """Patch subprocess spawning with scripted ffprobe/ffmpeg fakes.

    Returns a controller; set ``probe`` and ``decoder`` (a zero-argument
    factory returning a :class:`FakeProcess`) before opening a source.
    """

    class Controller:
        def __init__(self):
            self.calls = []
            self.probe = lambda: FakeProcess(stdout=probe_payload())
            self.decoder = lambda: FakeProcess()
            self.processes = []

        @property
        def decoder_calls(self):
            return [c for c in self.calls if "ffprobe" not in c[0]]

    controller = Controller()

    async def fake_exec(*cmd, **kwargs):
        controller.calls.append(list(cmd))
        if "ffprobe" in cmd[0]:
            proc = controller.probe()
        else:
            proc = controller.decoder()
        controller.processes.append(proc)
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    return controller


@pytest.fixture
def probe_json():
    return probe_payload
