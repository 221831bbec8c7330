"""Composition pipeline: voice + music + stock clip + captions -> final video.

The pipeline is an explicit state machine. Each state runs one ffmpeg
operation and hands its artifact to the next:

    MIXING_AUDIO -> PROBING_DURATION -> CONFORMING_VIDEO -> MUXING
        -> RENDERING_OVERLAYS -> CLEANING_UP -> DONE

Any CompositionError moves the run to FAILED. FAILED is terminal, so the
cleanup that follows a failure is not a separate history entry; it is
logged and its outcome recorded on the run. Scratch files are removed in
both cases; caller-supplied inputs are never touched.

Usage:
    pipeline = CompositionPipeline()
    result = await pipeline.compose(CompositionRequest(
        voice_path=Path("voice.mp3"),
        music_path=Path("music/track.mp3"),
        video_path=Path("stock.mp4"),
        output_path=Path("output/final.mp4"),
        segments=[TextSegment(kind="hook", start=0, end=3, text="Stop scrolling")],
    ))
    if result.success:
        print(result.output_path)
"""

import asyncio
import logging
import shutil
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TypeVar

from tiktok_automator.constants import (
    AUDIO_FORMAT,
    POST_ID_DATE_FORMAT,
    SCRATCH_CONFORMED_PREFIX,
    SCRATCH_MIXED_AUDIO_PREFIX,
    SCRATCH_MUXED_PREFIX,
    SCRATCH_NAME_PATTERN,
    SCRATCH_RENDERED_PREFIX,
    SCRATCH_SILENCE_PREFIX,
    VIDEO_FORMAT,
)

from .config import CompositionConfig
from .conformer import VideoConformer
from .ffmpeg import FFmpegRunner
from .mixer import AudioMixer
from .models import (
    CompositionError,
    CompositionRequest,
    CompositionResult,
    CompositionStage,
    MediaAsset,
    MixFailure,
    OverlayFailure,
    ProbeFailure,
)
from .muxer import Muxer
from .overlays import OverlayRenderer
from .probe import MediaProbe

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Stages that may transition to FAILED
FAILABLE_STAGES = (
    CompositionStage.MIXING_AUDIO,
    CompositionStage.PROBING_DURATION,
    CompositionStage.CONFORMING_VIDEO,
    CompositionStage.MUXING,
    CompositionStage.RENDERING_OVERLAYS,
)

STAGE_ORDER = (
    *FAILABLE_STAGES,
    CompositionStage.CLEANING_UP,
    CompositionStage.DONE,
)


def make_run_token(request_id: str) -> str:
    """Unique token for one run: timestamp + request id + random suffix."""
    timestamp = datetime.now().strftime(POST_ID_DATE_FORMAT)
    return f"{timestamp}-{request_id}-{uuid.uuid4().hex[:8]}"


@dataclass
class CompositionRun:
    """Per-request state: current stage, history and scratch files."""

    request: CompositionRequest
    token: str
    scratch_dir: Optional[Path] = None
    stage: Optional[CompositionStage] = None
    history: list[CompositionStage] = field(default_factory=list)
    scratch_files: list[Path] = field(default_factory=list)
    stage_started: float = 0.0
    cleaned_up: bool = False

    def enter(self, stage: CompositionStage) -> None:
        """Advance to the next state. States must be entered in order."""
        if self.stage is not None and self.stage.is_terminal:
            raise RuntimeError(f"Run {self.token} already finished ({self.stage.value})")

        if stage == CompositionStage.FAILED:
            if self.stage not in FAILABLE_STAGES:
                raise RuntimeError(f"Cannot fail from {self.stage}")
        else:
            expected = STAGE_ORDER[len(self.history)] if len(self.history) < len(STAGE_ORDER) else None
            if stage != expected:
                raise RuntimeError(
                    f"Invalid transition {self.stage} -> {stage.value} "
                    f"(expected {expected.value if expected else 'nothing'})"
                )

        if self.stage is not None and not self.stage.is_terminal:
            elapsed = time.monotonic() - self.stage_started
            logger.debug(f"[{self.token}] {self.stage.value} finished in {elapsed:.2f}s")

        self.stage = stage
        self.history.append(stage)
        self.stage_started = time.monotonic()
        logger.info(f"[{self.token}] -> {stage.value}")

    def scratch_path(self, prefix: str, ext: str) -> Path:
        """Reserve a scratch file name for this run and track it for cleanup."""
        if self.scratch_dir is None:
            raise RuntimeError(f"Run {self.token} has no scratch directory yet")
        path = self.scratch_dir / SCRATCH_NAME_PATTERN.format(prefix=prefix, token=self.token, ext=ext)
        self.scratch_files.append(path)
        return path


class CompositionPipeline:
    """Composes a finished video from a CompositionRequest.

    One instance may serve many concurrent requests. All per-request state
    lives in a CompositionRun, and scratch names are unique per run.
    """

    def __init__(
        self,
        config: Optional[CompositionConfig] = None,
        runner: Optional[FFmpegRunner] = None,
        probe: Optional[MediaProbe] = None,
        mixer: Optional[AudioMixer] = None,
        conformer: Optional[VideoConformer] = None,
        muxer: Optional[Muxer] = None,
        renderer: Optional[OverlayRenderer] = None,
    ):
        """Initialize pipeline.

        Args:
            config: Composition configuration. Uses defaults if not provided.
            runner: ffmpeg runner shared by all stages.
            probe, mixer, conformer, muxer, renderer: Stage overrides.
        """
        self.config = config or CompositionConfig.default()
        self.runner = runner or FFmpegRunner(
            ffmpeg_path=self.config.ffmpeg_path,
            ffprobe_path=self.config.ffprobe_path,
            timeout=self.config.timeout_seconds,
        )
        output = self.config.output
        self.probe = probe or MediaProbe(self.runner)
        self.mixer = mixer or AudioMixer(self.runner, output)
        self.conformer = conformer or VideoConformer(
            self.runner, self.probe, output, self.config.loop_headroom_seconds
        )
        self.muxer = muxer or Muxer(self.runner, output)
        self.renderer = renderer or OverlayRenderer(self.runner, self.config.overlay, output)

    async def compose(self, request: CompositionRequest) -> CompositionResult:
        """Run the full pipeline for one request.

        Returns:
            CompositionResult. On failure it carries the CompositionError and
            no output path.
        """
        run = CompositionRun(request=request, token=make_run_token(request.request_id))
        logger.info(f"[{run.token}] Composing {request.output_path.name}")

        try:
            duration = await self._run_stages(run)
        except CompositionError as e:
            logger.error(f"[{run.token}] Failed in {run.stage.value}: {e}")
            run.enter(CompositionStage.FAILED)
            self._cleanup(run)
            return CompositionResult(success=False, error=e, stages=list(run.history))
        except BaseException:
            self._cleanup(run)
            raise

        run.enter(CompositionStage.CLEANING_UP)
        self._cleanup(run)
        run.enter(CompositionStage.DONE)

        logger.info(f"[{run.token}] Done: {request.output_path} ({duration:.2f}s)")
        return CompositionResult(
            success=True,
            output_path=request.output_path,
            duration_seconds=duration,
            stages=list(run.history),
        )

    def compose_sync(self, request: CompositionRequest) -> CompositionResult:
        """Synchronous wrapper for compose()."""
        return asyncio.run(self.compose(request))

    async def _run_stages(self, run: CompositionRun) -> float:
        request = run.request

        run.enter(CompositionStage.MIXING_AUDIO)
        run.scratch_dir = self._prepare_scratch_dir()
        mixed = await self._in_thread(self._mix_audio, run)

        run.enter(CompositionStage.PROBING_DURATION)
        duration = await self._in_thread(self.probe.ensure_duration, mixed)

        run.enter(CompositionStage.CONFORMING_VIDEO)
        conformed = await self._in_thread(
            self.conformer.conform,
            MediaAsset.of(request.video_path),
            duration,
            run.scratch_path(SCRATCH_CONFORMED_PREFIX, VIDEO_FORMAT),
        )

        run.enter(CompositionStage.MUXING)
        muxed = await self._in_thread(
            self.muxer.mux,
            conformed,
            mixed,
            run.scratch_path(SCRATCH_MUXED_PREFIX, VIDEO_FORMAT),
        )

        run.enter(CompositionStage.RENDERING_OVERLAYS)
        rendered = await self._in_thread(
            self.renderer.render,
            muxed,
            request.segments,
            run.scratch_path(SCRATCH_RENDERED_PREFIX, VIDEO_FORMAT),
        )
        self._promote(rendered, request.output_path)

        return duration

    def _prepare_scratch_dir(self) -> Path:
        try:
            return self.config.get_scratch_dir()
        except OSError as e:
            raise MixFailure(
                "Could not create the scratch directory",
                paths=[self.config.scratch_dir] if self.config.scratch_dir else [],
                diagnostic=str(e),
            ) from e

    def _mix_audio(self, run: CompositionRun) -> MediaAsset:
        request = run.request
        voice = MediaAsset.of(request.voice_path)

        if request.music_path is None:
            try:
                voice_duration = self.probe.ensure_duration(voice)
            except ProbeFailure as e:
                raise MixFailure(
                    f"Unreadable voice track: {e.message}",
                    paths=[voice.path],
                    diagnostic=e.diagnostic,
                ) from e
            music = self.mixer.silence(
                voice_duration,
                run.scratch_path(SCRATCH_SILENCE_PREFIX, AUDIO_FORMAT),
            )
        else:
            music = MediaAsset.of(request.music_path)

        return self.mixer.mix(
            voice,
            music,
            request.music_volume,
            run.scratch_path(SCRATCH_MIXED_AUDIO_PREFIX, AUDIO_FORMAT),
        )

    @staticmethod
    def _promote(rendered: MediaAsset, destination: Path) -> None:
        """Move the last intermediate to the caller's destination."""
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(rendered.path), str(destination))
        except OSError as e:
            raise OverlayFailure(
                f"Could not move result to {destination}",
                paths=[rendered.path, destination],
                diagnostic=str(e),
            ) from e

    @staticmethod
    def _cleanup(run: CompositionRun) -> None:
        """Delete this run's scratch files. Never raises."""
        leftovers = 0
        for path in run.scratch_files:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                leftovers += 1
                logger.warning(f"[{run.token}] Could not remove {path.name}: {e}")
        run.cleaned_up = leftovers == 0
        logger.info(
            f"[{run.token}] Cleaned up {len(run.scratch_files) - leftovers} scratch file(s)"
            f" after {run.stage.value if run.stage else 'start'}"
        )

    @staticmethod
    async def _in_thread(func: Callable[..., T], *args) -> T:
        """Run a blocking stage without stalling other compositions."""
        return await asyncio.to_thread(func, *args)
