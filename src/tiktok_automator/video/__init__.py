"""Video composition for TikTok shorts.

This module turns four inputs into one finished vertical video:
- A voiceover track (sets the length of everything)
- A background music bed (attenuated, silence if none is available)
- A stock clip (looped or trimmed to the voiceover length)
- Time-coded text segments (burned in with ffmpeg drawtext)

Example usage:
    from tiktok_automator.video import CompositionPipeline, CompositionRequest, TextSegment

    pipeline = CompositionPipeline()

    result = await pipeline.compose(CompositionRequest(
        voice_path=Path("voice.mp3"),
        music_path=None,  # silence
        video_path=Path("stock.mp4"),
        output_path=Path("output/final.mp4"),
        segments=[
            TextSegment(kind="hook", start=0.0, end=3.0, text="Stop scrolling"),
            TextSegment(kind="subtitle", start=6.0, end=10.0, text="This is the secret"),
        ],
    ))

    print(result.unwrap())

Each stage is also usable on its own:
    probe = MediaProbe()
    seconds = probe.duration(Path("voice.mp3"))
"""

from .composer import CompositionPipeline, CompositionRun, make_run_token
from .config import CompositionConfig, OutputConfig, OverlayStyle
from .conformer import VideoConformer, loop_repetitions
from .ffmpeg import (
    FFmpegError,
    FFmpegRunner,
    escape_filter_path,
    escape_filter_value,
    extract_error_lines,
)
from .mixer import AudioMixer
from .models import (
    CompositionError,
    CompositionRequest,
    CompositionResult,
    CompositionStage,
    ConformFailure,
    MediaAsset,
    MixFailure,
    MuxFailure,
    OverlayFailure,
    ProbeFailure,
    SegmentKind,
    TextSegment,
)
from .muxer import Muxer
from .overlays import (
    OverlayRenderer,
    build_drawtext_filter,
    build_overlay_filter,
    color_from_style_hint,
)
from .probe import MediaProbe

__all__ = [
    # Pipeline
    "CompositionPipeline",
    "CompositionRun",
    "make_run_token",
    # Stages
    "MediaProbe",
    "AudioMixer",
    "VideoConformer",
    "loop_repetitions",
    "Muxer",
    "OverlayRenderer",
    "build_drawtext_filter",
    "build_overlay_filter",
    "color_from_style_hint",
    # ffmpeg
    "FFmpegRunner",
    "FFmpegError",
    "escape_filter_value",
    "escape_filter_path",
    "extract_error_lines",
    # Config
    "CompositionConfig",
    "OutputConfig",
    "OverlayStyle",
    # Models
    "MediaAsset",
    "SegmentKind",
    "TextSegment",
    "CompositionRequest",
    "CompositionResult",
    "CompositionStage",
    # Exceptions
    "CompositionError",
    "ProbeFailure",
    "MixFailure",
    "ConformFailure",
    "MuxFailure",
    "OverlayFailure",
]
