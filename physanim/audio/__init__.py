"""
Audio collaborators: voiceover concatenation and post-encode muxing.
"""
from .concat import concat_audio_tracks
from .mux import fit_audio_to_duration, mux_audio_into_video

__all__ = ["concat_audio_tracks", "fit_audio_to_duration", "mux_audio_into_video"]
