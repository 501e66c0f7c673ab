"""
Encoder sinks: ordered consumers of raw RGBA frames.

FFmpegEncoderSink pipes frames into a long-lived ffmpeg process. write() queues a frame and
returns False once the queue is at its high-water mark ("buffer full"); wait_for_drain()
blocks until the writer thread has caught up. A broken pipe or early exit marks the sink
failed, and every later call raises EncoderProcessError so the producer stops promptly.
"""
import collections
import logging
import subprocess
import threading
from pathlib import Path
from typing import Any, Callable, Protocol

from ..errors import EncoderProcessError

logger = logging.getLogger(__name__)

AUDIO_CODEC = "aac"
AUDIO_BITRATE = "192k"
STDERR_TAIL_LINES = 40


class EncoderSink(Protocol):
    """What the frame producer needs from an encoder."""

    def start(self) -> None: ...

    def write(self, frame: bytes) -> bool: ...

    def wait_for_drain(self) -> None: ...

    def close(self) -> int: ...

    def abort(self) -> None: ...

    @property
    def failed(self) -> bool: ...


def resolve_ffmpeg_bin(ffmpeg_bin: str | None = None) -> str:
    """Configured binary, else the one bundled with imageio-ffmpeg."""
    if ffmpeg_bin:
        return ffmpeg_bin
    try:
        import imageio_ffmpeg
    except ImportError as e:
        raise EncoderProcessError(
            "No ffmpeg configured and imageio-ffmpeg is not installed. Install with: pip install imageio-ffmpeg"
        ) from e
    try:
        return imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError as e:
        raise EncoderProcessError(f"ffmpeg not found: {e}") from e


def build_ffmpeg_command(
    ffmpeg_bin: str,
    output_path: Path,
    *,
    width: int,
    height: int,
    fps: float,
    preset: str = "fast",
    crf: int = 18,
    audio_path: Path | None = None,
) -> list[str]:
    """Raw RGBA on stdin → H.264 MP4 with fast-start metadata (+ optional audio track)."""
    cmd = [
        ffmpeg_bin,
        "-y",
        "-f", "rawvideo",
        "-pix_fmt", "rgba",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "-",
    ]
    if audio_path is not None:
        cmd.extend(["-i", str(audio_path), "-map", "0:v:0", "-map", "1:a:0"])
    else:
        cmd.append("-an")
    cmd.extend([
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", str(crf),
        "-pix_fmt", "yuv420p",
    ])
    if audio_path is not None:
        cmd.extend(["-c:a", AUDIO_CODEC, "-b:a", AUDIO_BITRATE, "-shortest"])
    cmd.extend(["-movflags", "+faststart", "-f", "mp4", str(output_path)])
    return cmd


class FFmpegEncoderSink:
    """Streams frames to ffmpeg's stdin from a writer thread, strictly in order."""

    def __init__(
        self,
        output_path: Path,
        *,
        width: int,
        height: int,
        fps: float,
        preset: str = "fast",
        crf: int = 18,
        audio_path: Path | None = None,
        ffmpeg_bin: str | None = None,
        max_pending_frames: int = 8,
        popen: Callable[..., Any] = subprocess.Popen,
    ):
        self.output_path = Path(output_path)
        self.width = width
        self.height = height
        self.fps = fps
        self.preset = preset
        self.crf = crf
        self.audio_path = Path(audio_path) if audio_path else None
        self.ffmpeg_bin = ffmpeg_bin
        self.max_pending_frames = max(1, max_pending_frames)
        self.frame_size = width * height * 4
        self.frames_written = 0
        self._popen = popen
        self._proc: Any = None
        self._queue: collections.deque[bytes] = collections.deque()
        self._cond = threading.Condition()
        self._closing = False
        self._error: EncoderProcessError | None = None
        self._stderr_tail: collections.deque[str] = collections.deque(maxlen=STDERR_TAIL_LINES)
        self._writer: threading.Thread | None = None
        self._reader: threading.Thread | None = None

    @property
    def failed(self) -> bool:
        return self._error is not None

    @property
    def error(self) -> EncoderProcessError | None:
        return self._error

    @property
    def stderr_tail(self) -> str:
        return "\n".join(self._stderr_tail)

    def command(self) -> list[str]:
        return build_ffmpeg_command(
            resolve_ffmpeg_bin(self.ffmpeg_bin),
            self.output_path,
            width=self.width,
            height=self.height,
            fps=self.fps,
            preset=self.preset,
            crf=self.crf,
            audio_path=self.audio_path,
        )

    def start(self) -> None:
        cmd = self.command()
        logger.info("Starting encoder: %s", " ".join(cmd))
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._proc = self._popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise EncoderProcessError(f"ffmpeg not found: {cmd[0]}") from e
        self._writer = threading.Thread(target=self._write_loop, name="encoder-writer", daemon=True)
        self._reader = threading.Thread(target=self._read_stderr, name="encoder-stderr", daemon=True)
        self._writer.start()
        self._reader.start()

    def write(self, frame: bytes) -> bool:
        """Queue one frame. False means the queue is full: call wait_for_drain() before the next write."""
        self._raise_if_failed()
        if self._proc is None:
            raise EncoderProcessError("Encoder not started")
        if len(frame) != self.frame_size:
            raise ValueError(f"Frame is {len(frame)} bytes, expected {self.frame_size}")
        if self._proc.poll() is not None:
            self._fail(f"ffmpeg exited early with code {self._proc.returncode}", self._proc.returncode)
            self._raise_if_failed()
        with self._cond:
            self._queue.append(frame)
            self._cond.notify_all()
            return len(self._queue) < self.max_pending_frames

    def wait_for_drain(self) -> None:
        """Block until the queue is below half the high-water mark (or the sink failed)."""
        low_water = self.max_pending_frames // 2
        with self._cond:
            while len(self._queue) > low_water and self._error is None:
                self._cond.wait(timeout=0.5)
        self._raise_if_failed()

    def close(self) -> int:
        """Signal end of stream, wait for ffmpeg to exit. Non-zero exit raises EncoderProcessError."""
        if self._proc is None:
            raise EncoderProcessError("Encoder not started")
        with self._cond:
            self._closing = True
            self._cond.notify_all()
        if self._writer is not None:
            self._writer.join()
        if self._error is not None:
            # writer stopped early and left stdin open; ffmpeg would wait on it forever
            error = self._error
            self.abort()
            raise error
        returncode = self._proc.wait()
        if self._reader is not None:
            self._reader.join(timeout=5)
        if returncode != 0:
            self._fail(f"ffmpeg failed with exit code {returncode}", returncode)
        self._raise_if_failed()
        logger.info("Encoder finished: %d frames → %s", self.frames_written, self.output_path)
        return returncode

    def abort(self) -> None:
        """Drop queued frames and stop ffmpeg. Safe to call more than once."""
        with self._cond:
            self._closing = True
            self._queue.clear()
            if self._error is None:
                self._error = EncoderProcessError("Encoder aborted")
            self._cond.notify_all()
        if self._proc is not None and self._proc.poll() is None:
            self._proc.kill()
            self._proc.wait()
        if self._writer is not None:
            self._writer.join(timeout=5)
        if self._reader is not None:
            self._reader.join(timeout=5)
        if self._proc is not None:
            self._close_pipes()

    def _close_pipes(self) -> None:
        for name in ("stdin", "stderr"):
            pipe = getattr(self._proc, name, None)
            if pipe is None or pipe.closed:
                continue
            try:
                pipe.close()
            except OSError as e:
                # unflushed frames after a kill
                logger.debug("Closing encoder %s failed: %s", name, e)

    def _write_loop(self) -> None:
        stdin = self._proc.stdin
        while True:
            with self._cond:
                while not self._queue and not self._closing and self._error is None:
                    self._cond.wait()
                if self._error is not None:
                    return
                if not self._queue:
                    break
                frame = self._queue[0]
            try:
                stdin.write(frame)
            except (BrokenPipeError, OSError, ValueError) as e:
                self._fail(f"Encoder pipe broke after {self.frames_written} frames: {e}")
                return
            with self._cond:
                self._queue.popleft()
                self.frames_written += 1
                self._cond.notify_all()
        try:
            stdin.close()
        except (BrokenPipeError, OSError) as e:
            self._fail(f"Closing encoder input failed: {e}")

    def _read_stderr(self) -> None:
        stderr = self._proc.stderr
        if stderr is None:
            return
        buf = b""
        for chunk in iter(lambda: stderr.read(4096), b""):
            buf += chunk
            *lines, buf = buf.replace(b"\r", b"\n").split(b"\n")
            for raw in lines:
                line = raw.decode("utf-8", errors="replace").strip()
                if not line:
                    continue
                self._stderr_tail.append(line)
                if "frame=" in line or "time=" in line:
                    logger.debug("ffmpeg: %s", line)
        if buf.strip():
            self._stderr_tail.append(buf.decode("utf-8", errors="replace").strip())

    def _fail(self, message: str, returncode: int | None = None) -> None:
        with self._cond:
            if self._error is None:
                self._error = EncoderProcessError(message, returncode=returncode, stderr=self.stderr_tail)
                logger.error("%s\n%s", message, self.stderr_tail)
            self._cond.notify_all()

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            raise self._error


class MemorySink:
    """In-process sink: counts (and optionally keeps) frames. fail_after simulates a dying encoder."""

    def __init__(self, *, keep_frames: bool = False, fail_after: int | None = None, max_pending_frames: int = 8):
        self.keep_frames = keep_frames
        self.fail_after = fail_after
        self.max_pending_frames = max_pending_frames
        self.frames: list[bytes] = []
        self.frames_written = 0
        self.started = False
        self.closed = False
        self.aborted = False
        self._error: EncoderProcessError | None = None

    @property
    def failed(self) -> bool:
        return self._error is not None

    @property
    def error(self) -> EncoderProcessError | None:
        return self._error

    def start(self) -> None:
        self.started = True

    def write(self, frame: bytes) -> bool:
        if self._error is not None:
            raise self._error
        if self.fail_after is not None and self.frames_written >= self.fail_after:
            self._error = EncoderProcessError(
                f"Encoder pipe broke after {self.frames_written} frames", returncode=1
            )
            raise self._error
        self.frames_written += 1
        if self.keep_frames:
            self.frames.append(frame)
        return True

    def wait_for_drain(self) -> None:
        if self._error is not None:
            raise self._error

    def close(self) -> int:
        self.closed = True
        if self._error is not None:
            raise self._error
        return 0

    def abort(self) -> None:
        self.aborted = True
