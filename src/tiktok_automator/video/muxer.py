"""Combine a video stream and an audio stream into one container."""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import OutputConfig
from .ffmpeg import FFmpegError, FFmpegRunner
from .models import MediaAsset, MuxFailure

logger = logging.getLogger(__name__)


class Muxer:
    """Joins conformed video with mixed audio.

    The output stops at the shorter stream. After conforming both streams
    already match, so this only absorbs rounding drift.
    """

    def __init__(
        self,
        runner: Optional[FFmpegRunner] = None,
        output: Optional[OutputConfig] = None,
    ):
        self.runner = runner or FFmpegRunner()
        self.output = output or OutputConfig()

    def mux(
        self,
        video: Union[MediaAsset, Path],
        audio: Union[MediaAsset, Path],
        output_path: Path,
    ) -> MediaAsset:
        """Mux ``video`` and ``audio`` into ``output_path``.

        Raises:
            MuxFailure: If an input is missing or the streams cannot be combined.
        """
        video = MediaAsset.of(video)
        audio = MediaAsset.of(audio)
        paths = [video.path, audio.path]

        for asset in (video, audio):
            if not asset.exists:
                raise MuxFailure(f"Input not found: {asset.path}", paths=paths)

        logger.info(f"Muxing {video.path.name} + {audio.path.name}")

        try:
            self.runner.ffmpeg([
                "-i", str(video.path),
                "-i", str(audio.path),
                "-map", "0:v:0",
                "-map", "1:a:0",
                "-c:v", "copy",
                "-c:a", self.output.audio_codec,
                "-b:a", self.output.audio_bitrate,
                "-shortest",
                "-movflags", "+faststart",
                str(output_path),
            ])
        except FFmpegError as e:
            raise MuxFailure(
                "Muxing failed",
                paths=paths,
                diagnostic=e.diagnostic,
            ) from e

        durations = [d for d in (video.duration, audio.duration) if d is not None]
        return MediaAsset(path=output_path, duration=min(durations) if durations else None)
