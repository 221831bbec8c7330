"""Shared test fixtures and configuration.

The composition stages talk to ffmpeg only through FFmpegRunner. Tests swap
in FakeRunner, which records every command line, answers ffprobe from a
table of durations and "renders" by writing a small placeholder file to the
command's output path.
"""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import Optional

import pytest

from tiktok_automator.video import CompositionConfig, FFmpegRunner, OutputConfig


class FakeRunner(FFmpegRunner):
    """FFmpegRunner that never spawns a process.

    Args:
        durations: Maps a file name prefix to the duration ffprobe reports.
            Files with no matching prefix are reported as unreadable.
        fail_on: If this substring appears in a command line, that command
            exits with code 1 and an ffmpeg-like error on stderr.
    """

    def __init__(self, durations: Optional[dict[str, float]] = None, fail_on: Optional[str] = None):
        super().__init__(ffmpeg_path="ffmpeg", ffprobe_path="ffprobe")
        self.durations = dict(durations or {})
        self.fail_on = fail_on
        self.commands: list[list[str]] = []

    @property
    def ffmpeg_commands(self) -> list[list[str]]:
        return [cmd for cmd in self.commands if cmd[0] == self.ffmpeg_path]

    @property
    def ffprobe_commands(self) -> list[list[str]]:
        return [cmd for cmd in self.commands if cmd[0] == self.ffprobe_path]

    def last_ffmpeg(self) -> list[str]:
        return self.ffmpeg_commands[-1]

    @staticmethod
    def value_of(cmd: list[str], flag: str) -> str:
        """Value following ``flag`` in a command line."""
        return cmd[cmd.index(flag) + 1]

    def _execute(self, cmd: list[str]) -> subprocess.CompletedProcess:
        self.commands.append(list(cmd))

        if self.fail_on and self.fail_on in " ".join(cmd):
            return subprocess.CompletedProcess(
                cmd, 1, stdout="", stderr="frame=0\nError: simulated failure\n"
            )

        if cmd[0] == self.ffprobe_path:
            name = Path(cmd[-1]).name
            for prefix, seconds in self.durations.items():
                if name.startswith(prefix):
                    return subprocess.CompletedProcess(cmd, 0, stdout=f"{seconds}\n", stderr="")
            return subprocess.CompletedProcess(
                cmd, 1, stdout="", stderr=f"{cmd[-1]}: Invalid data found when processing input\n"
            )

        Path(cmd[-1]).write_bytes(b"rendered by " + " ".join(cmd[:3]).encode())
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_media(temp_dir):
    """Factory writing placeholder media files into temp_dir."""
    def _make(name: str, content: bytes = b"media") -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def fake_runner_factory():
    """Factory for FakeRunner instances."""
    return FakeRunner


@pytest.fixture
def small_output():
    """Tiny output frame so real ffmpeg runs stay fast."""
    return OutputConfig(width=180, height=320, fps=15, preset="ultrafast")


@pytest.fixture
def composition_config(temp_dir, small_output):
    """Composition config writing scratch files under temp_dir/scratch."""
    return CompositionConfig(output=small_output, scratch_dir=temp_dir / "scratch")
