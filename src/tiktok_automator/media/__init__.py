"""Media collaborators that feed the composition pipeline.

- voice.py          : edge-tts voiceover
- stock_footage.py  : Pexels search, download and local index
- music.py          : manifest-based background music library
"""

from .music import NICHE_MOODS, Mood, MusicLibrary, MusicLibraryError, MusicTrack
from .stock_footage import (
    NICHE_QUERIES,
    PexelsClient,
    StockFootageError,
    StockFootageService,
    select_video_file,
)
from .voice import VoiceError, VoiceGenerator, VoiceoverResult, sanitize_for_tts

__all__ = [
    # Voice
    "VoiceGenerator",
    "VoiceoverResult",
    "VoiceError",
    "sanitize_for_tts",
    # Stock footage
    "PexelsClient",
    "StockFootageService",
    "StockFootageError",
    "NICHE_QUERIES",
    "select_video_file",
    # Music
    "Mood",
    "MusicTrack",
    "MusicLibrary",
    "MusicLibraryError",
    "NICHE_MOODS",
]
