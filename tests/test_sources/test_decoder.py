"""Tests for the ffmpeg decoder process wrapper."""

import asyncio
import sys

import pytest

from clipframes.sources import DecoderProcess
from clipframes.sources.decoder import STDERR_TAIL_LINES


def progress_output(count):
    """ffmpeg-style stats, one carriage return per update and no newline."""
    return "".join(
        "frame=%5d fps=25.0 q=-0.0 size=N/A time=00:00:%02d.00 speed=1x\r" % (i, i % 60)
        for i in range(count)
    ).encode()


# Writes ~1.6 MB of progress to stderr before any frame bytes reach stdout
VERBOSE_CHILD = """
import sys
for i in range(20000):
    sys.stderr.write("frame=%5d fps=25.0 q=-0.0 size=N/A time=00:00:%02d.00 speed=1x\\r" % (i, i % 60))
sys.stderr.flush()
sys.stdout.buffer.write(bytes(range(16)))
sys.stdout.buffer.flush()
"""


class TestStderrDrain:
    @pytest.mark.asyncio
    async def test_verbose_child_keeps_writing_frames(self):
        decoder = DecoderProcess(sys.executable, ["-c", VERBOSE_CHILD], name="verbose", log_output=True)
        await decoder.start()
        try:
            data = await asyncio.wait_for(decoder.stdout.readexactly(16), timeout=10)
            assert data == bytes(range(16))
            assert await decoder.wait_exit(timeout=10) == 0
            assert decoder.stderr_tail.splitlines()[-1].startswith("frame=19999")
        finally:
            await decoder.aclose()

    @pytest.mark.asyncio
    async def test_carriage_return_lines_fill_tail(self, fake_ffmpeg, fake_process, pattern):
        stderr = progress_output(2000)
        assert len(stderr) > 64 * 1024
        fake_ffmpeg.decoder = lambda: fake_process(stdout=pattern(16), stderr=stderr)

        decoder = DecoderProcess("ffmpeg", ["-i", "clip.mp4"], log_output=True)
        await decoder.start()

        assert await decoder.stdout.readexactly(16) == pattern(16)
        assert await decoder.wait_exit() == 0
        lines = decoder.stderr_tail.splitlines()
        assert len(lines) == STDERR_TAIL_LINES
        assert lines[-1].startswith("frame= 1999")
        assert lines[0].startswith("frame= %d" % (2000 - STDERR_TAIL_LINES))
        await decoder.aclose()

    @pytest.mark.asyncio
    async def test_unterminated_output_is_split(self, fake_ffmpeg, fake_process):
        fake_ffmpeg.decoder = lambda: fake_process(stderr=b"x" * 100_000)

        decoder = DecoderProcess("ffmpeg", [])
        await decoder.start()

        assert await decoder.wait_exit() == 0
        lines = decoder.stderr_tail.splitlines()
        assert len(lines) > 1
        assert "".join(lines) == "x" * 100_000
        await decoder.aclose()

    @pytest.mark.asyncio
    async def test_exit_error_reports_last_lines(self, fake_ffmpeg, fake_process):
        stderr = progress_output(500) + b"Conversion failed!\n"
        fake_ffmpeg.decoder = lambda: fake_process(stderr=stderr, returncode=1)

        decoder = DecoderProcess("ffmpeg", [])
        await decoder.start()

        returncode = await decoder.wait_exit()
        error = decoder.exit_error(returncode)
        assert error.returncode == 1
        assert error.stderr_tail.endswith("Conversion failed!")
        assert "frame=  499" in error.stderr_tail
        await decoder.aclose()
