"""Path-related constants for the TikTok Automator.

Layout under the project root:
  output/<post-id>/   voice.mp3, content.json, final.mp4
  music/              manifest.json and the tracks it lists
  stock-videos/       index.json and pexels-<id>.mp4 clips
  temp/               composition scratch files, removed after each run
  logs/               one log file per generate run

Scratch names carry a token that is unique per composition run, so two
runs sharing temp/ never touch each other's files.
"""

from pathlib import Path
from typing import Final

# =============================================================================
# PROJECT ROOT
# =============================================================================

ROOT_MARKER: Final[str] = "pyproject.toml"


def get_project_root() -> Path:
    """Nearest ancestor of this package holding pyproject.toml.

    An installed (non-editable) package has no such ancestor; the working
    directory is used then.
    """
    here = Path(__file__).resolve()
    for candidate in here.parents:
        if (candidate / ROOT_MARKER).is_file():
            return candidate
    return Path.cwd()


PROJECT_ROOT: Path = get_project_root()

OUTPUT_DIR_NAME: Final[str] = "output"
MUSIC_DIR_NAME: Final[str] = "music"
STOCK_DIR_NAME: Final[str] = "stock-videos"
TEMP_DIR_NAME: Final[str] = "temp"
LOGS_DIR_NAME: Final[str] = "logs"


# =============================================================================
# FILE NAMING
# =============================================================================

POST_ID_DATE_FORMAT: Final[str] = "%Y%m%d-%H%M%S"
"""strftime format shared by post ids and scratch tokens."""

VOICE_FILENAME: Final[str] = "voice.mp3"
FINAL_VIDEO_FILENAME: Final[str] = "final.mp4"
CONTENT_FILENAME: Final[str] = "content.json"
MUSIC_MANIFEST_FILENAME: Final[str] = "manifest.json"
STOCK_INDEX_FILENAME: Final[str] = "index.json"
TOKEN_FILENAME: Final[str] = "tokens.json"


# =============================================================================
# SCRATCH FILES
# =============================================================================

SCRATCH_NAME_PATTERN: Final[str] = "{prefix}-{token}.{ext}"

SCRATCH_SILENCE_PREFIX: Final[str] = "silence"
SCRATCH_MIXED_AUDIO_PREFIX: Final[str] = "mixed-audio"
SCRATCH_CONFORMED_PREFIX: Final[str] = "conformed-video"
SCRATCH_MUXED_PREFIX: Final[str] = "muxed-video"
SCRATCH_RENDERED_PREFIX: Final[str] = "rendered-video"


def _project_dir(name: str) -> Path:
    path = PROJECT_ROOT / name
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_temp_dir() -> Path:
    """Scratch directory for composition runs (created on first use)."""
    return _project_dir(TEMP_DIR_NAME)


def get_logs_dir() -> Path:
    """Directory for run log files (created on first use)."""
    return _project_dir(LOGS_DIR_NAME)
