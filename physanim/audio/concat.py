"""
Join voiceover clips into one track, in order. Uses ffmpeg's concat demuxer with stream copy,
so every clip must share codec and sample rate (true for one TTS voice).
"""
import logging
import subprocess
from pathlib import Path

from ..errors import EncoderProcessError
from ..render.encoder import resolve_ffmpeg_bin

logger = logging.getLogger(__name__)


def concat_audio_tracks(
    track_paths: list[Path],
    output_path: Path,
    *,
    ffmpeg_bin: str | None = None,
) -> Path:
    """
    Concatenate audio files in order into output_path. A single track is returned as is
    (no copy). Raises ValueError on an empty list, EncoderProcessError if ffmpeg fails.
    """
    if not track_paths:
        raise ValueError("concat_audio_tracks: track_paths cannot be empty")
    missing = [p for p in track_paths if not Path(p).exists()]
    if missing:
        raise FileNotFoundError(f"Audio track not found: {missing[0]}")
    if len(track_paths) == 1:
        logger.info("Single audio track, skipping concatenation")
        return Path(track_paths[0])

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    list_file = output_path.with_suffix(".concat_list.txt")
    with open(list_file, "w", encoding="utf-8") as f:
        for p in track_paths:
            f.write(f"file '{Path(p).resolve().as_posix()}'\n")

    cmd = [
        resolve_ffmpeg_bin(ffmpeg_bin),
        "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", str(list_file),
        "-c", "copy",
        str(output_path),
    ]
    logger.info("Concatenating %d audio tracks → %s", len(track_paths), output_path)
    try:
        result = subprocess.run(cmd, capture_output=True)
    finally:
        list_file.unlink(missing_ok=True)
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace") if result.stderr else ""
        raise EncoderProcessError(
            f"Audio concat failed with exit code {result.returncode}",
            returncode=result.returncode,
            stderr=stderr[-2000:],
        )
    return output_path
