"""
Audio collaborators: voiceover concatenation (ffmpeg mocked) and track fitting (pydub).
Run from project root: python -m pytest tests/ -v
"""
import importlib.util
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from physanim.audio.concat import concat_audio_tracks
from physanim.errors import EncoderProcessError

HAS_PYDUB = importlib.util.find_spec("pydub") is not None


class TestConcatAudioTracks(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.tracks = []
        for i in range(3):
            p = self.tmp / f"phase_{i}.mp3"
            p.write_bytes(b"ID3")
            self.tracks.append(p)

    def tearDown(self):
        self._tmp.cleanup()

    def test_empty_list_raises(self):
        with self.assertRaises(ValueError):
            concat_audio_tracks([], self.tmp / "out.mp3")

    def test_missing_track_raises(self):
        with self.assertRaises(FileNotFoundError):
            concat_audio_tracks([self.tmp / "nope.mp3"], self.tmp / "out.mp3")

    def test_single_track_is_returned_as_is(self):
        with mock.patch("physanim.audio.concat.subprocess.run") as run:
            out = concat_audio_tracks(self.tracks[:1], self.tmp / "out.mp3")
        self.assertEqual(out, self.tracks[0])
        run.assert_not_called()

    def test_concat_demuxer_list_in_order(self):
        seen = {}

        def fake_run(cmd, **kwargs):
            list_file = Path(cmd[cmd.index("-i") + 1])
            seen["cmd"] = cmd
            seen["list"] = list_file.read_text(encoding="utf-8")
            return subprocess.CompletedProcess(cmd, 0, b"", b"")

        with mock.patch("physanim.audio.concat.subprocess.run", side_effect=fake_run):
            out = concat_audio_tracks(self.tracks, self.tmp / "out.mp3", ffmpeg_bin="ffmpeg")
        self.assertEqual(out, self.tmp / "out.mp3")
        lines = seen["list"].strip().splitlines()
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[0].endswith("phase_0.mp3'"))
        self.assertTrue(lines[2].endswith("phase_2.mp3'"))
        self.assertIn("concat", seen["cmd"])
        self.assertEqual(seen["cmd"][seen["cmd"].index("-c") + 1], "copy")
        self.assertFalse((self.tmp / "out.concat_list.txt").exists())

    def test_ffmpeg_failure_raises(self):
        done = subprocess.CompletedProcess([], 1, b"", b"Invalid data found")
        with mock.patch("physanim.audio.concat.subprocess.run", return_value=done):
            with self.assertRaises(EncoderProcessError) as ctx:
                concat_audio_tracks(self.tracks, self.tmp / "out.mp3", ffmpeg_bin="ffmpeg")
        self.assertIn("Invalid data", ctx.exception.stderr)
        self.assertFalse((self.tmp / "out.concat_list.txt").exists())


@unittest.skipUnless(HAS_PYDUB, "pydub not installed")
class TestFitAudio(unittest.TestCase):

    def test_short_track_is_padded(self):
        from pydub import AudioSegment

        from physanim.audio.mux import fit_audio_to_duration

        fitted = fit_audio_to_duration(AudioSegment.silent(duration=1500), 4000)
        self.assertEqual(len(fitted), 4000)

    def test_long_track_is_trimmed(self):
        from pydub import AudioSegment

        from physanim.audio.mux import fit_audio_to_duration

        fitted = fit_audio_to_duration(AudioSegment.silent(duration=9000), 2500)
        self.assertEqual(len(fitted), 2500)


class TestMuxArguments(unittest.TestCase):

    def test_missing_audio_file_raises(self):
        if not HAS_PYDUB:
            self.skipTest("pydub not installed")
        from physanim.audio.mux import mux_audio_into_video

        with self.assertRaises(FileNotFoundError):
            mux_audio_into_video(Path("video.mp4"), Path("/nonexistent/voice.mp3"))


if __name__ == "__main__":
    unittest.main()
