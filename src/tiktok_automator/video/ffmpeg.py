"""Thin wrapper around the ffmpeg/ffprobe command line tools.

Every media operation in the composition pipeline is one out-of-process
call made through FFmpegRunner. The runner does not interpret results; it
only raises FFmpegError with the relevant stderr lines when a tool exits
non-zero or cannot be started.

Escaping helpers for filter graph values also live here, since the same
rules apply to any literal (caption text, font path) placed in a filter.
"""

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

logger = logging.getLogger(__name__)

# Keywords that mark the useful part of ffmpeg's stderr
ERROR_KEYWORDS = ("error", "invalid", "failed", "no such", "cannot", "unable", "not found")

# Characters that delimit options inside a filter's argument string
_OPTION_SPECIAL = re.compile(r"([\\':])")

# Characters that delimit filters, chains and link labels in a filter graph
_GRAPH_SPECIAL = re.compile(r"([\\',;\[\]])")


class FFmpegError(Exception):
    """ffmpeg or ffprobe failed.

    Attributes:
        command: Full argument list that was executed.
        returncode: Process exit code, or None if it never started.
        diagnostic: Extracted error lines from stderr.
    """

    def __init__(self, message: str, command: Sequence[str] = (), returncode: Optional[int] = None, diagnostic: str = ""):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.diagnostic = diagnostic


def extract_error_lines(stderr: str, limit: int = 5) -> str:
    """Pull the meaningful error lines out of ffmpeg's stderr.

    Falls back to the last 500 characters when no line matches a known
    error keyword.
    """
    stderr = stderr or ""
    error_lines = [
        line.strip()
        for line in stderr.splitlines()
        if any(keyword in line.lower() for keyword in ERROR_KEYWORDS)
    ]
    if error_lines:
        return "\n".join(error_lines[:limit])
    return stderr[-500:].strip()


def escape_filter_value(value: str) -> str:
    """Escape a literal for use as an option value inside a filter graph.

    FFmpeg parses filter graphs in two passes, so escaping is applied twice:
    first for the option parser (``\\``, ``'``, ``:``), then for the graph
    parser (``\\``, ``'``, ``,``, ``;``, ``[``, ``]``). Backslashes are
    handled first within each pass so no escape is doubled by accident.
    See: https://ffmpeg.org/ffmpeg-filters.html#Notes-on-filtergraph-escaping

    The result must be used unquoted, e.g. ``f"drawtext=text={escaped}"``.
    """
    option_level = _OPTION_SPECIAL.sub(r"\\\1", value)
    return _GRAPH_SPECIAL.sub(r"\\\1", option_level)


def escape_filter_path(path: Union[str, Path]) -> str:
    """Escape a file path for use in filter arguments (e.g. drawtext fontfile).

    Windows backslashes are converted to forward slashes before escaping.
    """
    return escape_filter_value(str(path).replace("\\", "/"))


def format_seconds(value: float) -> str:
    """Format a duration for ffmpeg arguments (millisecond precision)."""
    return f"{value:.3f}"


class FFmpegRunner:
    """Runs ffmpeg and ffprobe as blocking subprocesses."""

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        timeout: Optional[float] = None,
    ):
        """Initialize runner.

        Args:
            ffmpeg_path: ffmpeg executable name or path.
            ffprobe_path: ffprobe executable name or path.
            timeout: Per-invocation timeout in seconds. None waits forever.
        """
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout

    def ffmpeg(self, args: Sequence[str]) -> str:
        """Run ffmpeg with the given arguments.

        Output files are always overwritten and stdin is never read.

        Returns:
            ffmpeg's stderr (it writes all logging there).

        Raises:
            FFmpegError: If ffmpeg exits non-zero or cannot be started.
        """
        cmd = [self.ffmpeg_path, "-hide_banner", "-nostdin", "-y", "-loglevel", "error", *args]
        return self._run(cmd).stderr

    def ffprobe(self, args: Sequence[str]) -> str:
        """Run ffprobe with the given arguments.

        Returns:
            ffprobe's stdout.

        Raises:
            FFmpegError: If ffprobe exits non-zero or cannot be started.
        """
        cmd = [self.ffprobe_path, *args]
        return self._run(cmd).stdout

    def is_available(self) -> bool:
        """Check that both executables can be found."""
        return all(shutil.which(tool) for tool in (self.ffmpeg_path, self.ffprobe_path))

    def _run(self, cmd: list[str]) -> subprocess.CompletedProcess:
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = self._execute(cmd)
        except FileNotFoundError as e:
            raise FFmpegError(f"{cmd[0]} not found", command=cmd, diagnostic=str(e)) from e
        except subprocess.TimeoutExpired as e:
            raise FFmpegError(
                f"{Path(cmd[0]).name} timed out after {self.timeout}s",
                command=cmd,
                diagnostic=str(e),
            ) from e

        if result.returncode != 0:
            diagnostic = extract_error_lines(result.stderr)
            logger.debug(f"{Path(cmd[0]).name} failed ({result.returncode}): {diagnostic}")
            raise FFmpegError(
                f"{Path(cmd[0]).name} exited with code {result.returncode}",
                command=cmd,
                returncode=result.returncode,
                diagnostic=diagnostic,
            )

        return result

    def _execute(self, cmd: list[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )
