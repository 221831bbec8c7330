"""Tests for video/audio muxing."""

import pytest

from tiktok_automator.video import MediaAsset, Muxer, MuxFailure


class TestMuxer:
    """Tests for Muxer.mux."""

    def test_maps_one_video_and_one_audio_stream(self, fake_runner_factory, make_media, temp_dir):
        """Test stream mapping, codecs and -shortest."""
        runner = fake_runner_factory()

        Muxer(runner).mux(make_media("v.mp4"), make_media("a.m4a"), temp_dir / "out.mp4")

        cmd = runner.last_ffmpeg()
        maps = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-map"]
        assert maps == ["0:v:0", "1:a:0"]
        assert runner.value_of(cmd, "-c:v") == "copy"
        assert runner.value_of(cmd, "-c:a") == "aac"
        assert "-shortest" in cmd

    def test_duration_is_shorter_stream(self, fake_runner_factory, make_media, temp_dir):
        """Test the result duration follows the shorter known input."""
        runner = fake_runner_factory()
        video = MediaAsset(path=make_media("v.mp4"), duration=12.0)
        audio = MediaAsset(path=make_media("a.m4a"), duration=11.98)

        result = Muxer(runner).mux(video, audio, temp_dir / "out.mp4")

        assert result.duration == pytest.approx(11.98)

    def test_missing_input(self, fake_runner_factory, make_media, temp_dir):
        """Test a missing audio file fails before ffmpeg runs."""
        runner = fake_runner_factory()

        with pytest.raises(MuxFailure, match="Input not found"):
            Muxer(runner).mux(make_media("v.mp4"), temp_dir / "gone.m4a", temp_dir / "out.mp4")
        assert runner.commands == []

    def test_ffmpeg_error_is_wrapped(self, fake_runner_factory, make_media, temp_dir):
        """Test ffmpeg failures become MuxFailure."""
        runner = fake_runner_factory(fail_on="-shortest")

        with pytest.raises(MuxFailure) as exc_info:
            Muxer(runner).mux(make_media("v.mp4"), make_media("a.m4a"), temp_dir / "out.mp4")

        assert exc_info.value.stage == "mux"
