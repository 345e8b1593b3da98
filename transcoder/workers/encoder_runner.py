import asyncio
import logging
import re
from collections import deque
from typing import Deque, List, Optional

from transcoder.constants import EncoderDefaults
from transcoder.dtos.internal import EncodeResult

logger = logging.getLogger(__name__)

# ffmpeg redraws its progress line with bare carriage returns
_LINE_BREAK_RE = re.compile(r"[\r\n]+")


class EncoderRunner:
    """Builds and runs the ffmpeg command that normalizes a video to MP4."""

    def __init__(
        self,
        binary: str = EncoderDefaults.BINARY,
        video_codec: str = EncoderDefaults.VIDEO_CODEC,
        preset: str = EncoderDefaults.PRESET,
        crf: int = EncoderDefaults.CRF,
        audio_codec: str = EncoderDefaults.AUDIO_CODEC,
        audio_bitrate: str = EncoderDefaults.AUDIO_BITRATE,
        timeout: Optional[float] = None,
        stderr_tail_lines: int = EncoderDefaults.STDERR_TAIL_LINES,
    ):
        self.binary = binary
        self.video_codec = video_codec
        self.preset = preset
        self.crf = crf
        self.audio_codec = audio_codec
        self.audio_bitrate = audio_bitrate
        self.timeout = timeout
        self.stderr_tail_lines = stderr_tail_lines

    @classmethod
    def from_settings(cls, settings) -> "EncoderRunner":
        return cls(
            binary=settings.ENCODER_BINARY,
            video_codec=settings.VIDEO_CODEC,
            preset=settings.PRESET,
            crf=settings.CRF,
            audio_codec=settings.AUDIO_CODEC,
            audio_bitrate=settings.AUDIO_BITRATE,
            timeout=settings.MAX_ENCODE_SECONDS,
        )

    def build_command(self, input_path: str, output_path: str) -> List[str]:
        return [
            self.binary,
            "-y",
            "-i", str(input_path),
            "-c:v", self.video_codec,
            "-preset", self.preset,
            "-crf", str(self.crf),
            "-c:a", self.audio_codec,
            "-b:a", self.audio_bitrate,
            "-movflags", "+faststart",
            str(output_path),
        ]

    async def run(self, input_path: str, output_path: str) -> EncodeResult:
        """Run the encoder to completion.

        Args:
            input_path: Source video
            output_path: Destination; overwritten if it exists

        Returns:
            EncodeResult with the exit code and the last stderr lines.
            On timeout the process is killed and `timed_out` is set.

        Raises:
            OSError: If the encoder cannot be launched (missing binary,
                permission denied)
        """
        cmd = self.build_command(input_path, output_path)
        logger.info(f"Running encoder: {' '.join(cmd)}")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        logger.debug(f"Encoder started (pid {process.pid})")

        tail: Deque[str] = deque(maxlen=self.stderr_tail_lines)
        drain_task = asyncio.create_task(self._drain_stderr(process.stderr, tail))
        timed_out = False
        try:
            if self.timeout:
                try:
                    await asyncio.wait_for(process.wait(), timeout=self.timeout)
                except asyncio.TimeoutError:
                    timed_out = True
                    logger.warning(f"Encoder exceeded {self.timeout}s, killing pid {process.pid}")
                    self._kill(process)
                    await process.wait()
            else:
                await process.wait()
            await drain_task
        except asyncio.CancelledError:
            self._kill(process)
            drain_task.cancel()
            try:
                await asyncio.wait_for(asyncio.shield(process.wait()), timeout=5)
            except asyncio.TimeoutError:
                logger.warning(f"Encoder pid {process.pid} did not exit after kill")
            raise

        return EncodeResult(
            returncode=None if timed_out else process.returncode,
            stderr_tail=list(tail),
            timed_out=timed_out,
        )

    @staticmethod
    def _kill(process: asyncio.subprocess.Process):
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass

    @staticmethod
    async def _drain_stderr(stream: asyncio.StreamReader, tail: Deque[str]):
        """Keep the last lines of stderr without letting the pipe fill up."""
        pending = ""
        while True:
            chunk = await stream.read(4096)
            if not chunk:
                break
            pending += chunk.decode(errors="replace")
            *lines, pending = _LINE_BREAK_RE.split(pending)
            for line in lines:
                if line.strip():
                    tail.append(line.strip())
        if pending.strip():
            tail.append(pending.strip())
