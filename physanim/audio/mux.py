"""
Mux an audio track into an already-encoded video. The track is trimmed or padded with
silence (pydub) to the video's duration; video is stream-copied. Writes to a temp file
first when replacing the input in place.
Requires: pydub, and ffmpeg (imageio-ffmpeg's bundled binary unless configured).
"""
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from ..errors import EncoderProcessError
from ..render.encoder import AUDIO_BITRATE, AUDIO_CODEC, resolve_ffmpeg_bin

logger = logging.getLogger(__name__)


def video_duration(video_path: Path) -> float:
    """Duration in seconds, as read by imageio-ffmpeg."""
    import imageio_ffmpeg

    _, seconds = imageio_ffmpeg.count_frames_and_secs(str(video_path))
    return float(seconds)


def fit_audio_to_duration(audio, duration_ms: int):
    """Trim to duration_ms, or pad the tail with silence. Returns a new AudioSegment."""
    from pydub import AudioSegment

    if len(audio) >= duration_ms:
        return audio[:duration_ms]
    pad = AudioSegment.silent(duration=duration_ms - len(audio), frame_rate=audio.frame_rate)
    return audio + pad


def mux_audio_into_video(
    video_path: Path,
    audio_path: Path,
    output_path: Path | None = None,
    *,
    duration: float | None = None,
    ffmpeg_bin: str | None = None,
) -> Path:
    """
    Add audio_path as the audio track of video_path. duration defaults to the video's own.
    output_path defaults to <stem>_with_audio<suffix>; passing video_path replaces it.
    """
    try:
        from pydub import AudioSegment
    except ImportError as e:
        raise RuntimeError("pydub is required for audio. Install with: pip install pydub") from e

    video_path = Path(video_path)
    audio_path = Path(audio_path)
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")
    output_path = Path(output_path) if output_path else video_path.with_name(
        video_path.stem + "_with_audio" + video_path.suffix
    )
    in_place = output_path.resolve() == video_path.resolve()
    final_output = output_path
    if in_place:
        fd, tmp_out = tempfile.mkstemp(suffix=video_path.suffix or ".mp4", prefix="mux_")
        os.close(fd)
        output_path = Path(tmp_out)

    if duration is None:
        duration = video_duration(video_path)
    audio = fit_audio_to_duration(AudioSegment.from_file(str(audio_path)), int(round(duration * 1000)))

    with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as f:
        tmp_wav = f.name
    try:
        audio.export(tmp_wav, format="wav")
        cmd = [
            resolve_ffmpeg_bin(ffmpeg_bin),
            "-y",
            "-i", str(video_path),
            "-i", tmp_wav,
            "-map", "0:v:0", "-map", "1:a:0",
            "-c:v", "copy",
            "-c:a", AUDIO_CODEC, "-b:a", AUDIO_BITRATE,
            "-movflags", "+faststart",
            str(output_path),
        ]
        result = subprocess.run(cmd, capture_output=True)
    finally:
        Path(tmp_wav).unlink(missing_ok=True)

    if result.returncode != 0:
        if in_place:
            output_path.unlink(missing_ok=True)
        stderr = result.stderr.decode("utf-8", errors="replace") if result.stderr else ""
        raise EncoderProcessError(
            f"Audio mux failed with exit code {result.returncode}",
            returncode=result.returncode,
            stderr=stderr[-2000:],
        )
    if in_place:
        shutil.move(str(output_path), str(final_output))
    logger.info("Muxed %s into %s (%.2fs)", audio_path.name, final_output, duration)
    return final_output
