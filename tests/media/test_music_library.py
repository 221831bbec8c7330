"""Tests for the manifest-based music library."""

import json
import random

import pytest

from tiktok_automator.media import Mood, MusicLibrary, MusicLibraryError, MusicTrack


def write_manifest(directory, tracks, files=True):
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "manifest.json").write_text(json.dumps({"tracks": tracks}), encoding="utf-8")
    if files:
        for track in tracks:
            (directory / track["file"]).write_bytes(b"audio")


@pytest.fixture
def music_dir(temp_dir):
    return temp_dir / "music"


class TestLoad:
    """Tests for MusicLibrary.load."""

    def test_missing_manifest_gives_empty_library(self, music_dir):
        """Test a directory without manifest.json is an empty library."""
        assert MusicLibrary.load(music_dir).tracks == []

    def test_loads_tracks(self, music_dir):
        """Test manifest entries become MusicTrack objects."""
        write_manifest(music_dir, [
            {"id": "rise", "name": "Rise", "mood": "inspirational", "file": "rise.mp3"},
            {"id": "go", "name": "Go", "mood": "hype", "file": "go.mp3", "duration": 62.5},
        ])

        library = MusicLibrary.load(music_dir)

        assert [t.id for t in library.tracks] == ["rise", "go"]
        assert library.tracks[1].mood is Mood.HYPE
        assert library.tracks[1].duration == 62.5

    def test_missing_files_are_skipped(self, music_dir):
        """Test entries whose audio file is absent are left out."""
        write_manifest(music_dir, [
            {"id": "rise", "name": "Rise", "mood": "inspirational", "file": "rise.mp3"},
        ], files=False)

        assert MusicLibrary.load(music_dir).tracks == []

    def test_invalid_json(self, music_dir):
        """Test a corrupt manifest raises MusicLibraryError."""
        music_dir.mkdir()
        (music_dir / "manifest.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(MusicLibraryError, match="Invalid music manifest"):
            MusicLibrary.load(music_dir)

    def test_unknown_mood(self, music_dir):
        """Test an entry with an unknown mood raises MusicLibraryError."""
        write_manifest(music_dir, [{"id": "x", "name": "X", "mood": "spooky", "file": "x.mp3"}])

        with pytest.raises(MusicLibraryError):
            MusicLibrary.load(music_dir)


class TestSelectForNiche:
    """Tests for MusicLibrary.select_for_niche."""

    def make_library(self, music_dir, moods):
        tracks = [
            MusicTrack(id=f"t{i}", name=f"Track {i}", mood=mood, file=f"t{i}.mp3")
            for i, mood in enumerate(moods)
        ]
        return MusicLibrary(music_dir, tracks)

    def test_empty_library_returns_none(self, music_dir):
        """Test no tracks means no music."""
        assert MusicLibrary(music_dir).select_for_niche("ai_tools") is None

    def test_prefers_niche_moods(self, music_dir):
        """Test a track in one of the niche's moods is chosen when available."""
        library = self.make_library(music_dir, [Mood.RELAXED, Mood.ENERGETIC, Mood.RELAXED])

        for seed in range(10):
            path = library.select_for_niche("ai_tools", random.Random(seed))
            assert path == music_dir / "t1.mp3"

    def test_falls_back_to_any_track(self, music_dir):
        """Test a library without matching moods still provides music."""
        library = self.make_library(music_dir, [Mood.RELAXED])

        assert library.select_for_niche("ai_tools", random.Random(0)) == music_dir / "t0.mp3"

    def test_unknown_niche(self, music_dir):
        """Test unknown niches are rejected."""
        library = self.make_library(music_dir, [Mood.RELAXED])
        with pytest.raises(ValueError):
            library.select_for_niche("gardening")


class TestAddTrack:
    """Tests for MusicLibrary.add_track."""

    def test_copies_file_and_updates_manifest(self, music_dir, make_media):
        """Test the file is copied in and the manifest rewritten."""
        source = make_media("downloads/My Song!.MP3", b"song")
        library = MusicLibrary.load(music_dir)

        track = library.add_track(source, "My Song!", "energetic", 95.0)

        assert track.id == "energetic-my-song"
        assert (music_dir / "energetic-my-song.mp3").read_bytes() == b"song"
        reloaded = MusicLibrary.load(music_dir)
        assert reloaded.tracks == [track]

    def test_duplicate_names_get_unique_ids(self, music_dir, make_media):
        """Test adding the same name twice does not overwrite."""
        source = make_media("song.mp3")
        library = MusicLibrary(music_dir)

        first = library.add_track(source, "Song", Mood.HYPE)
        second = library.add_track(source, "Song", Mood.HYPE)

        assert (first.id, second.id) == ("hype-song", "hype-song-2")
        assert len(MusicLibrary.load(music_dir).tracks) == 2

    def test_missing_source(self, music_dir, temp_dir):
        """Test a missing source file raises MusicLibraryError."""
        with pytest.raises(MusicLibraryError, match="not found"):
            MusicLibrary(music_dir).add_track(temp_dir / "nope.mp3", "Nope", "hype")
