"""Global constants package for TikTok Automator.

PACKAGE STRUCTURE:
-----------------
- video.py    : Resolution, codecs, mixing and overlay styling
- paths.py    : Directory paths, file names, scratch naming

USAGE EXAMPLES:
--------------
    from tiktok_automator.constants import VIDEO_WIDTH, VIDEO_HEIGHT
    from tiktok_automator.constants import get_temp_dir
"""

# =============================================================================
# VIDEO CONSTANTS
# =============================================================================
from .video import (
    # Resolution
    VIDEO_WIDTH,
    VIDEO_HEIGHT,
    VIDEO_FPS,
    VIDEO_DEFAULT_DURATION_SECONDS,
    # Codec and format
    VIDEO_CODEC,
    VIDEO_PRESET,
    VIDEO_PIXEL_FORMAT,
    VIDEO_FORMAT,
    AUDIO_CODEC,
    AUDIO_BITRATE,
    AUDIO_SAMPLE_RATE,
    AUDIO_FORMAT,
    # Mixing
    DEFAULT_MUSIC_VOLUME,
    LOOP_HEADROOM_SECONDS,
    # Overlays
    OVERLAY_FONT_SIZE_HOOK,
    OVERLAY_FONT_SIZE_EMPHASIS,
    OVERLAY_FONT_SIZE_SUBTITLE,
    OVERLAY_FONT_COLOR,
    OVERLAY_BORDER_COLOR,
    OVERLAY_BORDER_WIDTH,
    OVERLAY_SUBTITLE_MARGIN_BOTTOM,
)

# =============================================================================
# PATH CONSTANTS
# =============================================================================
from .paths import (
    PROJECT_ROOT,
    OUTPUT_DIR_NAME,
    MUSIC_DIR_NAME,
    STOCK_DIR_NAME,
    TEMP_DIR_NAME,
    LOGS_DIR_NAME,
    POST_ID_DATE_FORMAT,
    VOICE_FILENAME,
    FINAL_VIDEO_FILENAME,
    CONTENT_FILENAME,
    MUSIC_MANIFEST_FILENAME,
    STOCK_INDEX_FILENAME,
    TOKEN_FILENAME,
    SCRATCH_NAME_PATTERN,
    SCRATCH_SILENCE_PREFIX,
    SCRATCH_MIXED_AUDIO_PREFIX,
    SCRATCH_CONFORMED_PREFIX,
    SCRATCH_MUXED_PREFIX,
    SCRATCH_RENDERED_PREFIX,
    get_project_root,
    get_temp_dir,
    get_logs_dir,
)

__all__ = [
    # Video
    "VIDEO_WIDTH",
    "VIDEO_HEIGHT",
    "VIDEO_FPS",
    "VIDEO_DEFAULT_DURATION_SECONDS",
    "VIDEO_CODEC",
    "VIDEO_PRESET",
    "VIDEO_PIXEL_FORMAT",
    "VIDEO_FORMAT",
    "AUDIO_CODEC",
    "AUDIO_BITRATE",
    "AUDIO_SAMPLE_RATE",
    "AUDIO_FORMAT",
    "DEFAULT_MUSIC_VOLUME",
    "LOOP_HEADROOM_SECONDS",
    "OVERLAY_FONT_SIZE_HOOK",
    "OVERLAY_FONT_SIZE_EMPHASIS",
    "OVERLAY_FONT_SIZE_SUBTITLE",
    "OVERLAY_FONT_COLOR",
    "OVERLAY_BORDER_COLOR",
    "OVERLAY_BORDER_WIDTH",
    "OVERLAY_SUBTITLE_MARGIN_BOTTOM",
    # Paths
    "PROJECT_ROOT",
    "OUTPUT_DIR_NAME",
    "MUSIC_DIR_NAME",
    "STOCK_DIR_NAME",
    "TEMP_DIR_NAME",
    "LOGS_DIR_NAME",
    "POST_ID_DATE_FORMAT",
    "VOICE_FILENAME",
    "FINAL_VIDEO_FILENAME",
    "CONTENT_FILENAME",
    "MUSIC_MANIFEST_FILENAME",
    "STOCK_INDEX_FILENAME",
    "TOKEN_FILENAME",
    "SCRATCH_NAME_PATTERN",
    "SCRATCH_SILENCE_PREFIX",
    "SCRATCH_MIXED_AUDIO_PREFIX",
    "SCRATCH_CONFORMED_PREFIX",
    "SCRATCH_MUXED_PREFIX",
    "SCRATCH_RENDERED_PREFIX",
    "get_project_root",
    "get_temp_dir",
    "get_logs_dir",
]
