"""Publisher interface shared by upload targets.

A publisher takes a finished video plus its caption and reports the outcome
as a PublishResult. Upload failures are returned, not raised, so the
orchestrator can record them next to the composed video.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional


@dataclass(frozen=True)
class PublishProgress:
    """One progress update: stage name, percent complete (0-100), message."""

    stage: str
    percent: float
    message: str = ""


ProgressCallback = Optional[Callable[[PublishProgress], Awaitable[None]]]


@dataclass
class PublishResult:
    """Outcome of a single upload."""

    success: bool
    platform: str
    media_id: Optional[str] = None
    permalink: Optional[str] = None
    error: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def reference(self) -> str:
        """Best identifier to show a user: permalink, else media id."""
        return self.permalink or self.media_id or "-"

    def __str__(self) -> str:
        if not self.success:
            return f"{self.platform}: failed ({self.error})"
        return f"{self.platform}: {self.reference}"


class PlatformPublisher(ABC):
    """Base class for upload targets."""

    platform_name: str = ""

    def __init__(self, progress_callback: ProgressCallback = None):
        self._progress_callback = progress_callback

    @abstractmethod
    async def publish_reel(self, video_path: Path, caption: str, **kwargs: Any) -> PublishResult:
        """Upload ``video_path`` with ``caption`` (hashtags included)."""
        ...

    @abstractmethod
    async def check_credentials(self) -> tuple[bool, str]:
        """Return (usable, message) without uploading anything."""
        ...

    async def report(self, stage: str, percent: float, message: str = "") -> None:
        if self._progress_callback is not None:
            await self._progress_callback(PublishProgress(stage, percent, message))

    def succeeded(self, media_id: str, permalink: Optional[str] = None, **details: Any) -> PublishResult:
        return PublishResult(
            success=True,
            platform=self.platform_name,
            media_id=media_id,
            permalink=permalink,
            details=details,
        )

    def failed(self, error: str, **details: Any) -> PublishResult:
        return PublishResult(success=False, platform=self.platform_name, error=error, details=details)
