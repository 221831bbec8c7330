"""Daily video orchestrator.

Coordinates everything needed to publish one video:
1. Select today's topic
2. Generate script, on-screen text, caption and hashtags
3. [PARALLEL] Generate voiceover + fetch stock footage
4. Pick background music
5. Compose the final video (ffmpeg pipeline)
6. Publish to TikTok

Each run writes into its own post directory:

    output/20250101-090000/
        content.json
        voice.mp3
        final.mp4
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .config import AutomatorConfig
from .constants import (
    CONTENT_FILENAME,
    FINAL_VIDEO_FILENAME,
    POST_ID_DATE_FORMAT,
    VOICE_FILENAME,
    get_logs_dir,
)
from .content import Topic, VideoContent, generate_video_content, topic_for_day
from .media import MusicLibrary, StockFootageService, VoiceGenerator
from .media.stock_footage import PexelsClient
from .platforms import CredentialStore, PublishResult, TikTokPublisher
from .video import CompositionPipeline, CompositionRequest

logger = logging.getLogger(__name__)


ContentFactory = Callable[[Topic], VideoContent]


def make_post_id(now: Optional[datetime] = None) -> str:
    """Post directory name, e.g. 20250101-090000."""
    return (now or datetime.now()).strftime(POST_ID_DATE_FORMAT)


@dataclass
class GenerationResult:
    """Outcome of one orchestrated run."""

    success: bool
    post_id: str
    topic: Optional[Topic] = None
    content: Optional[VideoContent] = None
    video_path: Optional[Path] = None
    publish_result: Optional[PublishResult] = None
    error: Optional[str] = None
    stage: Optional[str] = None  # Stage that failed
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def elapsed_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()


class StepFailed(Exception):
    """Internal: a step failed with a user-facing message."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage


class VideoOrchestrator:
    """Runs the daily generate-compose-publish flow.

    All collaborators can be injected; missing ones are built from config.
    """

    def __init__(
        self,
        config: Optional[AutomatorConfig] = None,
        *,
        content_fn: Optional[ContentFactory] = None,
        voice: Optional[VoiceGenerator] = None,
        stock: Optional[StockFootageService] = None,
        music: Optional[MusicLibrary] = None,
        pipeline: Optional[CompositionPipeline] = None,
        publisher: Optional[TikTokPublisher] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or AutomatorConfig()
        self.rng = rng or random.Random()
        self.content_fn = content_fn or (lambda topic: generate_video_content(topic, self.rng))
        self.voice = voice or VoiceGenerator(self.config.tts)
        self._stock = stock
        self._music = music
        self.pipeline = pipeline or CompositionPipeline(self.config.composition)
        self._publisher = publisher

    @property
    def stock(self) -> StockFootageService:
        if self._stock is None:
            self._stock = StockFootageService(
                self.config.stock_dir,
                PexelsClient(self.config.pexels),
                reuse_probability=self.config.stock_reuse_probability,
                keep_count=self.config.stock_keep_count,
            )
        return self._stock

    @property
    def music(self) -> MusicLibrary:
        if self._music is None:
            self._music = MusicLibrary.load(self.config.music_dir)
        return self._music

    @property
    def publisher(self) -> TikTokPublisher:
        if self._publisher is None:
            tiktok = self.config.tiktok
            store = CredentialStore(tiktok.token_file, tiktok.client_key, tiktok.client_secret)
            self._publisher = TikTokPublisher(tiktok, store)
        return self._publisher

    def generate_content(self, day_of_year: Optional[int] = None) -> VideoContent:
        """Content for a day without producing any media."""
        topic = topic_for_day(day_of_year)
        logger.info(f"Topic: [{topic.niche.value}] {topic.angle}")
        return self.content_fn(topic)

    async def generate_and_post(
        self,
        day_of_year: Optional[int] = None,
        publish: bool = True,
    ) -> GenerationResult:
        """Produce today's video and (optionally) publish it.

        Args:
            day_of_year: Day used to pick the topic. Defaults to today.
            publish: Upload to TikTok after composing.

        Returns:
            GenerationResult. Failures are reported in it, never raised.
        """
        result = GenerationResult(success=False, post_id=make_post_id())
        post_dir = self.config.output_dir / result.post_id
        logger.info(f"Starting daily video generation: {result.post_id}")

        try:
            await self._run(result, post_dir, day_of_year, publish)
        except StepFailed as e:
            result.stage = e.stage
            result.error = str(e)
            result.video_path = None
            logger.error(f"Generation failed at {e.stage}: {e}")
        else:
            result.success = True
        finally:
            result.finished_at = datetime.now()

        if result.success:
            logger.info(f"Daily video completed in {result.elapsed_seconds:.1f}s")
        return result

    async def _run(
        self,
        result: GenerationResult,
        post_dir: Path,
        day_of_year: Optional[int],
        publish: bool,
    ) -> None:
        topic = topic_for_day(day_of_year)
        result.topic = topic
        logger.info(f"Topic: [{topic.niche.value}] {topic.angle}")
        try:
            content = self.content_fn(topic)
            content.save(post_dir / CONTENT_FILENAME)
        except Exception as e:
            raise StepFailed("content", f"Content generation failed: {e}") from e
        result.content = content

        # Voice and stock footage only depend on the content
        voice_task = self.voice.generate(content.script, post_dir / VOICE_FILENAME)
        stock_task = self.stock.get_video_for_niche(content.niche, self.rng)
        voice_result, stock_result = await asyncio.gather(
            voice_task, stock_task, return_exceptions=True
        )
        if isinstance(voice_result, BaseException):
            raise StepFailed("voice", f"Voiceover failed: {voice_result}") from voice_result
        if isinstance(stock_result, BaseException):
            raise StepFailed("stock", f"Stock footage failed: {stock_result}") from stock_result

        try:
            music_path = self.music.select_for_niche(content.niche, self.rng)
        except Exception as e:
            raise StepFailed("music", f"Music selection failed: {e}") from e

        request = CompositionRequest(
            voice_path=voice_result.audio_path,
            video_path=stock_result,
            music_path=music_path,
            output_path=post_dir / FINAL_VIDEO_FILENAME,
            segments=content.segments,
            music_volume=self.config.composition.default_music_volume,
        )
        try:
            composed = await self.pipeline.compose(request)
        except Exception as e:
            raise StepFailed("compose", f"Composition failed: {e}") from e
        if not composed.success:
            raise StepFailed("compose", f"Composition failed: {composed.message}")
        result.video_path = composed.output_path

        if not publish:
            logger.info(f"Publishing skipped, video at {result.video_path}")
            return

        try:
            published = await self.publisher.publish_reel(result.video_path, content.full_caption)
        except Exception as e:
            raise StepFailed("publish", f"Publishing failed: {e}") from e
        result.publish_result = published
        if not published.success:
            raise StepFailed("publish", f"Publishing failed: {published.error}")
        logger.info(f"Published to TikTok: {published.media_id}")

    async def check_connections(self) -> dict[str, tuple[bool, str]]:
        """Check every external dependency.

        Returns:
            Mapping of service name to (ok, message).
        """
        results: dict[str, tuple[bool, str]] = {}

        runner = self.pipeline.runner
        results["ffmpeg"] = (
            (True, f"{runner.ffmpeg_path} / {runner.ffprobe_path} found")
            if runner.is_available()
            else (False, f"{runner.ffmpeg_path} or {runner.ffprobe_path} not on PATH")
        )

        results["pexels"] = await self.stock.client.check_connection()
        results["tiktok"] = await self.publisher.check_credentials()

        try:
            count = len(self.music.tracks)
            results["music"] = (count > 0, f"{count} track(s) in {self.config.music_dir}")
        except Exception as e:
            results["music"] = (False, str(e))

        for name, (ok, message) in results.items():
            logger.info(f"{name}: {'OK' if ok else 'FAIL'} {message}")
        return results

    async def close(self) -> None:
        """Release HTTP clients."""
        if self._stock is not None:
            await self._stock.client.close()


# =============================================================================
# Logging
# =============================================================================


class ColoredToolFormatter(logging.Formatter):
    """Prints the logger as a short colored tag, e.g. "stock" in yellow."""

    COLORS = {
        "tiktok_automator.video": "\033[32m",    # Green - ffmpeg pipeline
        "tiktok_automator.media.voice": "\033[34m",  # Blue - TTS
        "tiktok_automator.media": "\033[33m",    # Yellow - stock/music
        "tiktok_api": "\033[35m",                # Magenta - TikTok
        "httpx": "\033[36m",                     # Cyan - HTTP
        "tiktok_automator": "\033[37m",          # White - everything else
    }
    RESET = "\033[0m"

    SHORT_NAMES = {
        "composer": "compose",
        "stock_footage": "stock",
        "tiktok_api": "tiktok",
        "orchestrator": "main",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = next(
            (col for prefix, col in self.COLORS.items() if record.name.startswith(prefix)),
            self.RESET,
        )
        leaf = record.name.rsplit(".", 1)[-1]
        tag = self.SHORT_NAMES.get(leaf, leaf)

        # Records are shared between handlers; the file handler needs the real name
        name = record.name
        record.name = f"{color}{tag:8}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.name = name


def setup_logging(level: int = logging.INFO, log_dir: Optional[Path] = None) -> None:
    """Colored console logging plus a TikTok API log file.

    Args:
        level: Console logging level.
        log_dir: Directory for tiktok_api.log. Defaults to <project>/logs.
    """
    formatter = ColoredToolFormatter(
        fmt="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    # Library chatter stays out of the console
    for logger_name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    api_logger = logging.getLogger("tiktok_api")
    api_logger.setLevel(logging.DEBUG)
    for handler in api_logger.handlers[:]:
        api_logger.removeHandler(handler)
    if log_dir is None:
        log_dir = get_logs_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_dir / "tiktok_api.log", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    api_logger.addHandler(file_handler)
