"""
Rendering: item dispatch, scene clock, frame producer and encoder sinks.
"""
from .dispatch import RENDERERS, RenderResult, RenderStatus, render_item
from .encoder import EncoderSink, FFmpegEncoderSink, MemorySink, build_ffmpeg_command
from .producer import FrameProducer, FrameReport, ProducerState, RenderReport
from .sampler import ActivePhase, SceneSampler

__all__ = [
    "RENDERERS",
    "ActivePhase",
    "EncoderSink",
    "FFmpegEncoderSink",
    "FrameProducer",
    "FrameReport",
    "MemorySink",
    "ProducerState",
    "RenderReport",
    "RenderResult",
    "RenderStatus",
    "SceneSampler",
    "build_ffmpeg_command",
    "render_item",
]
