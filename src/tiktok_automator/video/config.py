"""Configuration for video composition."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from tiktok_automator.constants import (
    VIDEO_WIDTH,
    VIDEO_HEIGHT,
    VIDEO_FPS,
    VIDEO_CODEC,
    VIDEO_PRESET,
    VIDEO_PIXEL_FORMAT,
    AUDIO_CODEC,
    AUDIO_BITRATE,
    AUDIO_SAMPLE_RATE,
    DEFAULT_MUSIC_VOLUME,
    LOOP_HEADROOM_SECONDS,
    OVERLAY_FONT_SIZE_HOOK,
    OVERLAY_FONT_SIZE_EMPHASIS,
    OVERLAY_FONT_SIZE_SUBTITLE,
    OVERLAY_FONT_COLOR,
    OVERLAY_BORDER_COLOR,
    OVERLAY_BORDER_WIDTH,
    OVERLAY_SUBTITLE_MARGIN_BOTTOM,
    get_temp_dir,
)
from .models import SegmentKind


class OutputConfig(BaseModel):
    """Video output configuration."""

    width: int = VIDEO_WIDTH
    height: int = VIDEO_HEIGHT
    fps: int = VIDEO_FPS
    codec: str = VIDEO_CODEC
    preset: str = VIDEO_PRESET
    pixel_format: str = VIDEO_PIXEL_FORMAT
    audio_codec: str = AUDIO_CODEC
    audio_bitrate: str = AUDIO_BITRATE
    audio_sample_rate: int = AUDIO_SAMPLE_RATE
    normalize_frame: bool = True  # Scale + center crop to width x height


class OverlayStyle(BaseModel):
    """Text overlay styling shared by all segments."""

    hook_font_size: int = OVERLAY_FONT_SIZE_HOOK
    emphasis_font_size: int = OVERLAY_FONT_SIZE_EMPHASIS
    subtitle_font_size: int = OVERLAY_FONT_SIZE_SUBTITLE
    font_color: str = OVERLAY_FONT_COLOR
    border_color: str = OVERLAY_BORDER_COLOR
    border_width: int = Field(default=OVERLAY_BORDER_WIDTH, ge=0)
    subtitle_margin_bottom: int = Field(default=OVERLAY_SUBTITLE_MARGIN_BOTTOM, ge=0)
    font_path: Optional[Path] = None

    @model_validator(mode="after")
    def _check_size_order(self) -> "OverlayStyle":
        if not (self.hook_font_size > self.emphasis_font_size > self.subtitle_font_size):
            raise ValueError("font sizes must be ordered hook > emphasis > subtitle")
        return self

    def font_size_for(self, kind: SegmentKind) -> int:
        return {
            SegmentKind.HOOK: self.hook_font_size,
            SegmentKind.EMPHASIS: self.emphasis_font_size,
            SegmentKind.SUBTITLE: self.subtitle_font_size,
        }[kind]


class CompositionConfig(BaseModel):
    """Composition pipeline configuration."""

    output: OutputConfig = Field(default_factory=OutputConfig)
    overlay: OverlayStyle = Field(default_factory=OverlayStyle)
    scratch_dir: Optional[Path] = None
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    default_music_volume: float = Field(default=DEFAULT_MUSIC_VOLUME, ge=0.0, le=1.0)
    loop_headroom_seconds: float = Field(default=LOOP_HEADROOM_SECONDS, ge=0.0)
    timeout_seconds: Optional[float] = None

    def get_scratch_dir(self) -> Path:
        """Get the scratch directory, creating it if needed."""
        if self.scratch_dir is None:
            return get_temp_dir()
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        return self.scratch_dir

    @classmethod
    def default(cls) -> "CompositionConfig":
        """Create default configuration."""
        return cls()
