"""Background music library backed by an explicit manifest.

Tracks are never discovered by scanning file names. The library directory
holds a ``manifest.json`` listing every track with its mood:

    {
      "tracks": [
        {"id": "rise-up", "name": "Rise Up", "mood": "inspirational", "file": "rise-up.mp3"}
      ]
    }

The manifest is loaded once at startup. ``add_track`` copies a file in and
rewrites the manifest.
"""

import json
import logging
import random
import re
import shutil
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from tiktok_automator.constants import MUSIC_MANIFEST_FILENAME
from tiktok_automator.content.niches import Niche

logger = logging.getLogger(__name__)


class MusicLibraryError(Exception):
    """Music library manifest is invalid or a track cannot be added."""

    pass


class Mood(str, Enum):
    """Musical mood of a track."""

    ENERGETIC = "energetic"
    INSPIRATIONAL = "inspirational"
    RELAXED = "relaxed"
    HYPE = "hype"


# Preferred moods per niche, most fitting first
NICHE_MOODS: dict[Niche, tuple[Mood, ...]] = {
    Niche.AI_TOOLS: (Mood.ENERGETIC, Mood.HYPE),
    Niche.ONLINE_BUSINESS: (Mood.INSPIRATIONAL, Mood.ENERGETIC),
    Niche.FACELESS_STORIES: (Mood.INSPIRATIONAL, Mood.RELAXED),
}


class MusicTrack(BaseModel):
    """One entry of the manifest."""

    id: str
    name: str
    mood: Mood
    file: str  # Relative to the library directory
    duration: Optional[float] = None


class MusicManifest(BaseModel):
    tracks: list[MusicTrack] = []


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "track"


class MusicLibrary:
    """Index of background music tracks."""

    def __init__(self, directory: Path, tracks: Optional[list[MusicTrack]] = None):
        self.directory = Path(directory)
        self.manifest_path = self.directory / MUSIC_MANIFEST_FILENAME
        self.tracks: list[MusicTrack] = list(tracks or [])

    @classmethod
    def load(cls, directory: Path) -> "MusicLibrary":
        """Load the library from ``directory/manifest.json``.

        A missing manifest gives an empty library. Tracks whose files are
        missing are skipped with a warning.

        Raises:
            MusicLibraryError: If the manifest is not valid JSON or has bad entries.
        """
        library = cls(directory)
        if not library.manifest_path.exists():
            logger.info(f"No music manifest at {library.manifest_path}, library is empty")
            return library

        try:
            with open(library.manifest_path, "r", encoding="utf-8") as f:
                manifest = MusicManifest.model_validate(json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            raise MusicLibraryError(f"Invalid music manifest {library.manifest_path}: {e}") from e

        for track in manifest.tracks:
            if library.path_for(track).is_file():
                library.tracks.append(track)
            else:
                logger.warning(f"Music track '{track.name}' missing file {track.file}, skipping")

        logger.info(f"Music library loaded: {len(library.tracks)} track(s)")
        return library

    def save(self) -> Path:
        """Write the manifest."""
        self.directory.mkdir(parents=True, exist_ok=True)
        manifest = MusicManifest(tracks=self.tracks)
        with open(self.manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest.model_dump(mode="json"), f, indent=2)
        return self.manifest_path

    def path_for(self, track: MusicTrack) -> Path:
        return self.directory / track.file

    def tracks_for_mood(self, mood: "Mood | str") -> list[MusicTrack]:
        mood = Mood(mood)
        return [track for track in self.tracks if track.mood == mood]

    def select_for_niche(
        self,
        niche: "Niche | str",
        rng: Optional[random.Random] = None,
    ) -> Optional[Path]:
        """Pick a track for a niche.

        Tries one of the niche's preferred moods first, then any preferred
        mood, then any track at all.

        Returns:
            Path to the track, or None if the library is empty.
        """
        niche = Niche.parse(niche)
        rng = rng or random.Random()

        if not self.tracks:
            logger.warning("Music library is empty, video will have no music")
            return None

        moods = NICHE_MOODS[niche]
        first_choice = rng.choice(moods)
        pools = [
            self.tracks_for_mood(first_choice),
            [t for t in self.tracks if t.mood in moods],
            self.tracks,
        ]
        pool = next(p for p in pools if p)

        track = rng.choice(pool)
        logger.info(f"Selected music: {track.name} ({track.mood.value})")
        return self.path_for(track)

    def add_track(
        self,
        source: Path,
        name: str,
        mood: "Mood | str",
        duration: Optional[float] = None,
    ) -> MusicTrack:
        """Copy an audio file into the library and record it in the manifest.

        Raises:
            MusicLibraryError: If the source file does not exist.
        """
        source = Path(source)
        if not source.is_file():
            raise MusicLibraryError(f"Music file not found: {source}")

        mood = Mood(mood)
        base_id = f"{mood.value}-{slugify(name)}"
        track_id = base_id
        existing = {t.id for t in self.tracks}
        counter = 2
        while track_id in existing:
            track_id = f"{base_id}-{counter}"
            counter += 1

        self.directory.mkdir(parents=True, exist_ok=True)
        filename = f"{track_id}{source.suffix.lower() or '.mp3'}"
        shutil.copyfile(source, self.directory / filename)

        track = MusicTrack(id=track_id, name=name, mood=mood, file=filename, duration=duration)
        self.tracks.append(track)
        self.save()

        logger.info(f"Added music track '{name}' ({mood.value})")
        return track
