"""Output format, mixing and overlay defaults for composed videos.

Every ffmpeg invocation in the pipeline encodes with these values, so the
intermediate files of one run are always stream-compatible with each other.
TikTok expects 9:16 portrait video.

Overlay font sizes keep the order hook > emphasis > subtitle; the music
volume stays low enough that the voice is always intelligible.
"""

from typing import Final

# =============================================================================
# VIDEO RESOLUTION
# =============================================================================

VIDEO_WIDTH: Final[int] = 1080

VIDEO_HEIGHT: Final[int] = 1920
"""Portrait 1080x1920 frame."""

VIDEO_FPS: Final[int] = 30

VIDEO_DEFAULT_DURATION_SECONDS: Final[float] = 30.0
"""Timeline length the content generator plans segments for."""


# =============================================================================
# ENCODING
# =============================================================================

VIDEO_CODEC: Final[str] = "libx264"

VIDEO_PRESET: Final[str] = "fast"
"""x264 preset; one video a day does not need a slower one."""

VIDEO_PIXEL_FORMAT: Final[str] = "yuv420p"
"""Mobile players reject 4:4:4 H.264."""

VIDEO_FORMAT: Final[str] = "mp4"

AUDIO_CODEC: Final[str] = "aac"

AUDIO_BITRATE: Final[str] = "192k"
"""Audio bitrate for mixed and muxed tracks."""

AUDIO_SAMPLE_RATE: Final[int] = 44100

AUDIO_FORMAT: Final[str] = "m4a"
"""Extension of intermediate AAC audio (mixed track, silence fill)."""


# =============================================================================
# AUDIO MIXING
# =============================================================================

DEFAULT_MUSIC_VOLUME: Final[float] = 0.15
"""Linear gain applied to background music before it is summed with the voice."""

LOOP_HEADROOM_SECONDS: Final[float] = 0.1
"""Extra loop is added when a looped clip would overshoot the target by less than this."""


# =============================================================================
# TEXT OVERLAY STYLING
# =============================================================================

OVERLAY_FONT_SIZE_HOOK: Final[int] = 72
"""Font size for hook segments. Largest, centered vertically."""

OVERLAY_FONT_SIZE_EMPHASIS: Final[int] = 56
"""Font size for emphasis segments. Centered vertically."""

OVERLAY_FONT_SIZE_SUBTITLE: Final[int] = 42
"""Font size for subtitle segments. Smallest, anchored near the bottom."""

OVERLAY_FONT_COLOR: Final[str] = "white"
"""Default text color for overlays."""

OVERLAY_BORDER_COLOR: Final[str] = "black"
"""Outline color for overlay text."""

OVERLAY_BORDER_WIDTH: Final[int] = 3
"""Outline width in pixels."""

OVERLAY_SUBTITLE_MARGIN_BOTTOM: Final[int] = 100
"""Distance in pixels between subtitle text and the bottom edge."""
