"""Loop or trim a stock clip to an exact target duration."""

import logging
import math
from pathlib import Path
from typing import Optional, Union

from tiktok_automator.constants import LOOP_HEADROOM_SECONDS

from .config import OutputConfig
from .ffmpeg import FFmpegError, FFmpegRunner, format_seconds
from .models import ConformFailure, MediaAsset, ProbeFailure
from .probe import MediaProbe

logger = logging.getLogger(__name__)


def loop_repetitions(
    source_duration: float,
    target_duration: float,
    headroom: float = LOOP_HEADROOM_SECONDS,
) -> int:
    """Number of times a clip must play back to back to cover the target.

    This is ceil(target / source), plus one more play when the covered
    length would exceed the target by less than ``headroom`` seconds
    (container durations often overstate the real stream by a frame or two).

    Raises:
        ValueError: If either duration is not positive.
    """
    if source_duration <= 0:
        raise ValueError(f"source duration must be positive, got {source_duration}")
    if target_duration <= 0:
        raise ValueError(f"target duration must be positive, got {target_duration}")

    repetitions = max(1, math.ceil(target_duration / source_duration))
    if repetitions > 1 and repetitions * source_duration - target_duration < headroom:
        repetitions += 1
    return repetitions


class VideoConformer:
    """Reconciles a clip's length with the voiceover length.

    - Source >= target: keep the first ``target`` seconds.
    - Source < target: play the source ``loop_repetitions`` times, then cut.

    Both paths re-encode so the cut is frame accurate. The source audio
    track is dropped.
    """

    def __init__(
        self,
        runner: Optional[FFmpegRunner] = None,
        probe: Optional[MediaProbe] = None,
        output: Optional[OutputConfig] = None,
        loop_headroom: float = LOOP_HEADROOM_SECONDS,
    ):
        self.runner = runner or FFmpegRunner()
        self.probe = probe or MediaProbe(self.runner)
        self.output = output or OutputConfig()
        self.loop_headroom = loop_headroom

    def conform(
        self,
        video: Union[MediaAsset, Path],
        target_duration: float,
        output_path: Path,
    ) -> MediaAsset:
        """Produce a copy of ``video`` that lasts exactly ``target_duration``.

        Args:
            video: Source clip.
            target_duration: Desired length in seconds.
            output_path: Where to write the conformed clip (.mp4).

        Returns:
            MediaAsset for the conformed clip, duration set to the target.

        Raises:
            ConformFailure: If the source is unreadable, either duration is
                zero or negative, or ffmpeg fails.
        """
        video = MediaAsset.of(video)

        if target_duration <= 0:
            raise ConformFailure(
                f"Target duration must be positive, got {target_duration}",
                paths=[video.path],
            )

        try:
            source_duration = self.probe.ensure_duration(video)
        except ProbeFailure as e:
            raise ConformFailure(
                f"Unreadable source video: {e.message}",
                paths=[video.path],
                diagnostic=e.diagnostic,
            ) from e

        if source_duration <= 0:
            raise ConformFailure(
                f"Source video has no playable length ({source_duration}s)",
                paths=[video.path],
            )

        args: list[str] = []
        if source_duration >= target_duration:
            logger.info(
                f"Trimming {video.path.name} from {source_duration:.2f}s "
                f"to {target_duration:.2f}s"
            )
        else:
            repetitions = loop_repetitions(source_duration, target_duration, self.loop_headroom)
            logger.info(
                f"Looping {video.path.name} ({source_duration:.2f}s) "
                f"{repetitions}x to cover {target_duration:.2f}s"
            )
            # -stream_loop counts additional plays
            args.extend(["-stream_loop", str(repetitions - 1)])

        args.extend([
            "-i", str(video.path),
            "-t", format_seconds(target_duration),
            "-an",
        ])
        if self.output.normalize_frame:
            args.extend(["-vf", self._frame_filter()])
        args.extend([
            "-c:v", self.output.codec,
            "-preset", self.output.preset,
            "-pix_fmt", self.output.pixel_format,
            str(output_path),
        ])

        try:
            self.runner.ffmpeg(args)
        except FFmpegError as e:
            raise ConformFailure(
                "Video conform failed",
                paths=[video.path],
                diagnostic=e.diagnostic,
            ) from e

        return MediaAsset(path=output_path, duration=target_duration)

    def _frame_filter(self) -> str:
        """Scale to cover the output frame, center crop, fix SAR and fps."""
        width, height = self.output.width, self.output.height
        return ",".join([
            f"scale={width}:{height}:force_original_aspect_ratio=increase",
            f"crop={width}:{height}",
            "setsar=1",
            f"fps={self.output.fps}",
        ])
