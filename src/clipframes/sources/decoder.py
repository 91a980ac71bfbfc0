"""External ffmpeg decoder process writing raw frames to a pipe."""

import asyncio
import codecs
import logging
import re
from collections import deque
from typing import Optional

from clipframes.core import DecoderProcessError

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 40
STDERR_CHUNK_SIZE = 4096
# An unterminated run longer than this is recorded as its own line
STDERR_MAX_LINE_CHARS = 4096
LINE_BREAK = re.compile(r"[\r\n]+")


class DecoderProcess:
    """Owns one ffmpeg process and its stdout pipe.

    stderr is drained continuously so a chatty decoder can never block on
    a full pipe; the last lines are kept for error reports.

    Args:
        ffmpeg_path: ffmpeg binary.
        args: Arguments after the binary.
        name: Label used in log messages.
        log_output: Forward decoder stderr to the debug log.
    """

    def __init__(
        self,
        ffmpeg_path: str,
        args: list[str],
        name: str = "",
        log_output: bool = False,
    ):
        self._ffmpeg_path = ffmpeg_path
        self._args = list(args)
        self._name = name or ffmpeg_path
        self._log_output = log_output

        self._process: Optional[asyncio.subprocess.Process] = None
        self._stderr_task: Optional[asyncio.Task] = None
        self._stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)

    @property
    def command(self) -> list[str]:
        return [self._ffmpeg_path, *self._args]

    async def start(self) -> None:
        """Spawn the decoder.

        Raises:
            DecoderProcessError: the binary could not be executed.
        """
        if self._process is not None:
            return
        logger.debug("%s: %s", self._name, " ".join(self.command))
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise DecoderProcessError(f"Failed to start ffmpeg ({self._ffmpeg_path}): {e}") from e
        self._stderr_task = asyncio.create_task(self._drain_stderr())

    async def _drain_stderr(self) -> None:
        # ffmpeg progress stats are separated by "\r" only, so read in chunks
        # rather than lines; a line-based reader hits its limit and stops.
        stderr = self._process.stderr
        if stderr is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        try:
            while True:
                chunk = await stderr.read(STDERR_CHUNK_SIZE)
                if not chunk:
                    break
                pending += decoder.decode(chunk)
                *lines, pending = LINE_BREAK.split(pending)
                for line in lines:
                    self._record_stderr_line(line)
                if len(pending) > STDERR_MAX_LINE_CHARS:
                    self._record_stderr_line(pending)
                    pending = ""
        except (OSError, ValueError) as e:
            logger.warning("%s: stopped reading ffmpeg stderr: %s", self._name, e)
        pending += decoder.decode(b"", final=True)
        self._record_stderr_line(pending)

    def _record_stderr_line(self, line: str) -> None:
        line = line.rstrip()
        if not line:
            return
        self._stderr_tail.append(line)
        if self._log_output:
            logger.debug("%s ffmpeg: %s", self._name, line)

    @property
    def stdout(self) -> asyncio.StreamReader:
        if self._process is None or self._process.stdout is None:
            raise RuntimeError("Decoder process is not running")
        return self._process.stdout

    @property
    def returncode(self) -> Optional[int]:
        return None if self._process is None else self._process.returncode

    @property
    def stderr_tail(self) -> str:
        return "\n".join(self._stderr_tail)

    def terminate(self) -> None:
        """Kill the decoder if it is still running.  Returns immediately."""
        if self._process is None or self._process.returncode is not None:
            return
        try:
            self._process.kill()
        except ProcessLookupError:
            pass

    async def wait_exit(self, timeout: float = 5.0) -> Optional[int]:
        """Wait for the decoder to exit; ``None`` if it is still running."""
        if self._process is None:
            return None
        try:
            returncode = await asyncio.wait_for(self._process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        if self._stderr_task is not None:
            await asyncio.wait({self._stderr_task}, timeout=1.0)
        return returncode

    def exit_error(self, returncode: int) -> DecoderProcessError:
        """Build the error reported for a failed decoder exit."""
        tail = self.stderr_tail
        message = f"ffmpeg failed (code {returncode})"
        if tail:
            message += f". Output:\n{tail}"
        return DecoderProcessError(message, returncode=returncode, stderr_tail=tail)

    async def aclose(self) -> None:
        """Kill the decoder and reap it."""
        self.terminate()
        await self.wait_exit()
        if self._stderr_task is not None and not self._stderr_task.done():
            self._stderr_task.cancel()
