"""Burn time-coded text captions onto video with ffmpeg drawtext."""

import logging
import re
import shutil
from pathlib import Path
from typing import Optional, Sequence, Union

from .config import OutputConfig, OverlayStyle
from .ffmpeg import FFmpegError, FFmpegRunner, escape_filter_path, escape_filter_value
from .models import MediaAsset, OverlayFailure, SegmentKind, TextSegment

logger = logging.getLogger(__name__)

# Color words recognized in a segment's style hint (first match wins)
STYLE_COLORS = (
    "white", "black", "yellow", "gold", "orange", "red", "pink",
    "purple", "blue", "cyan", "green", "lime",
)

_HEX_COLOR = re.compile(r"#([0-9a-fA-F]{6})\b")


def color_from_style_hint(style_hint: str, default: str) -> str:
    """Pick a drawtext color from a free-form style hint.

    Examples:
        >>> color_from_style_hint("bold yellow text", "white")
        'yellow'
        >>> color_from_style_hint("accent #FF5500", "white")
        '0xFF5500'
        >>> color_from_style_hint("large font", "white")
        'white'
    """
    if not style_hint:
        return default

    hex_match = _HEX_COLOR.search(style_hint)
    if hex_match:
        return f"0x{hex_match.group(1)}"

    words = re.findall(r"[a-z]+", style_hint.lower())
    for word in words:
        if word in STYLE_COLORS:
            return word
    return default


def build_drawtext_filter(segment: TextSegment, style: OverlayStyle) -> str:
    """Build one drawtext filter for a segment.

    Text is centered horizontally. Subtitles sit near the bottom, hooks and
    emphasis are centered vertically. The filter is enabled for t in
    [start, end).
    """
    if segment.kind == SegmentKind.SUBTITLE:
        y = f"h-text_h-{style.subtitle_margin_bottom}"
    else:
        y = "(h-text_h)/2"

    options = [
        f"text={escape_filter_value(segment.text)}",
        "expansion=none",
        f"fontsize={style.font_size_for(segment.kind)}",
        f"fontcolor={color_from_style_hint(segment.style_hint, style.font_color)}",
        f"borderw={style.border_width}",
        f"bordercolor={style.border_color}",
        "x=(w-text_w)/2",
        f"y={y}",
        f"enable='gte(t,{segment.start:.3f})*lt(t,{segment.end:.3f})'",
    ]
    if style.font_path:
        options.insert(0, f"fontfile={escape_filter_path(style.font_path)}")

    return "drawtext=" + ":".join(options)


def build_overlay_filter(segments: Sequence[TextSegment], style: OverlayStyle) -> str:
    """Chain one drawtext filter per segment, in list order."""
    return ",".join(build_drawtext_filter(segment, style) for segment in segments)


class OverlayRenderer:
    """Renders caption segments onto a video.

    Segments are independent: overlapping windows simply draw on top of each
    other in list order.
    """

    def __init__(
        self,
        runner: Optional[FFmpegRunner] = None,
        style: Optional[OverlayStyle] = None,
        output: Optional[OutputConfig] = None,
    ):
        self.runner = runner or FFmpegRunner()
        self.style = style or OverlayStyle()
        self.output = output or OutputConfig()

    def render(
        self,
        video: Union[MediaAsset, Path],
        segments: Sequence[TextSegment],
        output_path: Path,
    ) -> MediaAsset:
        """Draw all segments onto ``video``.

        With no segments the input file is copied unchanged.

        Raises:
            OverlayFailure: If the input is missing or drawtext fails.
        """
        video = MediaAsset.of(video)
        if not video.exists:
            raise OverlayFailure(f"Input not found: {video.path}", paths=[video.path])

        if not segments:
            logger.info("No text segments, copying video unchanged")
            try:
                shutil.copyfile(video.path, output_path)
            except OSError as e:
                raise OverlayFailure(
                    "Could not copy video",
                    paths=[video.path, output_path],
                    diagnostic=str(e),
                ) from e
            return MediaAsset(path=output_path, duration=video.duration)

        filter_str = build_overlay_filter(segments, self.style)
        logger.info(f"Rendering {len(segments)} text overlay(s)")
        logger.debug(f"Overlay filter: {filter_str[:300]}")

        try:
            self.runner.ffmpeg([
                "-i", str(video.path),
                "-vf", filter_str,
                "-c:v", self.output.codec,
                "-preset", self.output.preset,
                "-pix_fmt", self.output.pixel_format,
                "-c:a", "copy",
                "-movflags", "+faststart",
                str(output_path),
            ])
        except FFmpegError as e:
            raise OverlayFailure(
                "Overlay rendering failed",
                paths=[video.path],
                diagnostic=e.diagnostic,
            ) from e

        return MediaAsset(path=output_path, duration=video.duration)
