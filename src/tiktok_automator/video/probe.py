"""Media duration probing with ffprobe."""

import logging
from pathlib import Path
from typing import Optional, Union

from .ffmpeg import FFmpegError, FFmpegRunner
from .models import MediaAsset, ProbeFailure

logger = logging.getLogger(__name__)


class MediaProbe:
    """Reports the duration of audio and video files."""

    def __init__(self, runner: Optional[FFmpegRunner] = None):
        self.runner = runner or FFmpegRunner()

    def duration(self, asset: Union[MediaAsset, str, Path]) -> float:
        """Get the container duration of a media file in seconds.

        Args:
            asset: Media asset or path to probe.

        Returns:
            Duration in seconds (fractional).

        Raises:
            ProbeFailure: If the file is missing, unreadable, or reports no duration.
        """
        asset = MediaAsset.of(asset)
        if not asset.exists:
            raise ProbeFailure(f"File not found: {asset.path}", paths=[asset.path])

        try:
            output = self.runner.ffprobe([
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                str(asset.path),
            ])
        except FFmpegError as e:
            raise ProbeFailure(
                f"Could not read {asset.path.name}",
                paths=[asset.path],
                diagnostic=e.diagnostic,
            ) from e

        value = output.strip().splitlines()[0].strip() if output.strip() else ""
        try:
            seconds = float(value)
        except ValueError:
            raise ProbeFailure(
                f"No duration reported for {asset.path.name}",
                paths=[asset.path],
                diagnostic=value or "empty ffprobe output",
            ) from None

        logger.debug(f"Probed {asset.path.name}: {seconds:.3f}s")
        return seconds

    def ensure_duration(self, asset: MediaAsset) -> float:
        """Fill ``asset.duration`` if it is not known yet and return it."""
        if asset.duration is None:
            asset.duration = self.duration(asset)
        return asset.duration
