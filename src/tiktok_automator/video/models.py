"""Data models and exceptions for the composition pipeline.

The pipeline takes one CompositionRequest (voice, music, stock video and
caption segments) and produces one CompositionResult. Every failure is a
CompositionError subclass tagged with the stage that raised it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tiktok_automator.constants import DEFAULT_MUSIC_VOLUME


# =============================================================================
# Enums
# =============================================================================


class SegmentKind(str, Enum):
    """Kind of caption cue. Decides font size and vertical anchor."""

    HOOK = "hook"
    SUBTITLE = "subtitle"
    EMPHASIS = "emphasis"


class CompositionStage(str, Enum):
    """States of the composition pipeline, in execution order."""

    MIXING_AUDIO = "mixing_audio"
    PROBING_DURATION = "probing_duration"
    CONFORMING_VIDEO = "conforming_video"
    MUXING = "muxing"
    RENDERING_OVERLAYS = "rendering_overlays"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CompositionStage.DONE, CompositionStage.FAILED)


# =============================================================================
# Exceptions
# =============================================================================


class CompositionError(Exception):
    """Base exception for composition failures.

    Attributes:
        stage: Name of the stage that failed.
        paths: Assets involved in the failed operation.
        diagnostic: Relevant toolchain output (ffmpeg/ffprobe stderr lines).
    """

    stage: str = "composition"

    def __init__(
        self,
        message: str,
        paths: Sequence[Union[str, Path]] = (),
        diagnostic: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.paths: tuple[Path, ...] = tuple(Path(p) for p in paths)
        self.diagnostic = diagnostic

    def __str__(self) -> str:
        text = f"[{self.stage}] {self.message}"
        if self.diagnostic:
            text += f": {self.diagnostic}"
        return text


class ProbeFailure(CompositionError):
    """Media file is missing, unreadable or has no duration."""

    stage = "probe"


class MixFailure(CompositionError):
    """Audio mixing failed."""

    stage = "mix"


class ConformFailure(CompositionError):
    """Video could not be looped or trimmed to the target duration."""

    stage = "conform"


class MuxFailure(CompositionError):
    """Video and audio streams could not be combined."""

    stage = "mux"


class OverlayFailure(CompositionError):
    """Text overlays could not be rendered."""

    stage = "overlay"


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class MediaAsset:
    """A media file on disk.

    Duration is filled lazily by MediaProbe.ensure_duration, or set by the
    stage that produced the file when it is known exactly.
    """

    path: Path
    duration: Optional[float] = None

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @classmethod
    def of(cls, value: Union["MediaAsset", str, Path]) -> "MediaAsset":
        """Wrap a path, or return an existing asset unchanged."""
        if isinstance(value, MediaAsset):
            return value
        return cls(path=Path(value))

    @property
    def exists(self) -> bool:
        return self.path.is_file()


class TextSegment(BaseModel):
    """One caption cue, visible during [start, end) of the output timeline.

    Accepts both field names and the content generator's JSON keys
    (``type``, ``start_second``, ``end_second``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: SegmentKind = Field(alias="type")
    start: float = Field(alias="start_second", ge=0.0)
    end: float = Field(alias="end_second")
    text: str
    style_hint: str = ""

    @model_validator(mode="after")
    def _check_window(self) -> "TextSegment":
        if not self.start < self.end:
            raise ValueError(
                f"segment start ({self.start}) must be before end ({self.end})"
            )
        return self

    @property
    def duration(self) -> float:
        return self.end - self.start


class CompositionRequest(BaseModel):
    """Everything the pipeline needs to produce one video.

    ``music_path=None`` means no music is available; silence is mixed instead.
    """

    model_config = ConfigDict(frozen=True)

    voice_path: Path
    video_path: Path
    output_path: Path
    music_path: Optional[Path] = None
    segments: list[TextSegment] = Field(default_factory=list)
    music_volume: float = Field(default=DEFAULT_MUSIC_VOLUME, ge=0.0, le=1.0)
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])


@dataclass
class CompositionResult:
    """Outcome of one pipeline run."""

    success: bool
    output_path: Optional[Path] = None
    duration_seconds: Optional[float] = None
    error: Optional[CompositionError] = None
    stages: list[CompositionStage] = field(default_factory=list)

    @property
    def failed_stage(self) -> Optional[str]:
        return self.error.stage if self.error else None

    @property
    def message(self) -> str:
        if self.success:
            return f"Composed {self.output_path} ({self.duration_seconds:.2f}s)"
        return str(self.error) if self.error else "Composition failed"

    def unwrap(self) -> Path:
        """Return the output path, or raise the stored error."""
        if not self.success or self.output_path is None:
            raise self.error or CompositionError("Composition failed")
        return self.output_path
