"""Script, on-screen text, caption and hashtag generation.

All generation is template based and deterministic for a given random
source. Each niche maps to its own pure script builder through
SCRIPT_BUILDERS, so adding a niche to the Niche enum without a builder is
caught at import time.
"""

import json
import logging
import random
import re
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, Field

from tiktok_automator.constants import VIDEO_DEFAULT_DURATION_SECONDS
from tiktok_automator.video.models import SegmentKind, TextSegment

from .niches import ContentError, Niche
from .topics import Topic

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150
HOOK_TEXT_MAX_CHARS = 35
MAX_HASHTAGS = 8


# =============================================================================
# Script templates
# =============================================================================

AI_TOOLS_SCRIPTS = (
    "Stop scrolling. {hook} Most people are still doing everything manually. "
    "But there's an AI that changes the game completely. It handles tasks that used "
    "to take hours and does them in seconds. The interface is simple, the results are "
    "instant, and it keeps learning what works. While others are grinding, this tool "
    "is doing the heavy lifting. This is how top creators scale without burning out.",

    "Listen up. {hook} Everyone's talking about AI, but nobody shows you the tools "
    "that actually matter. This one automates the boring stuff so you can focus on "
    "what makes money. You connect it once, set your preferences, and it runs on "
    "autopilot. It saves you hours every single day. This is the unfair advantage "
    "smart entrepreneurs are using right now.",

    "Real talk. {hook} If you're not using AI yet, you're already behind. This tool "
    "replaces tedious manual work with smart automation. You don't need to be "
    "technical. You don't need a huge budget. Set it up once and let it run. Faster "
    "output, better quality, zero burnout.",
)

ONLINE_BUSINESS_SCRIPTS = (
    "Pay attention. {hook} Most people overcomplicate making money online. They think "
    "they need a massive following or thousands of dollars to start. Wrong. You need "
    "a laptop, a simple idea, and the willingness to test fast. Find a problem people "
    "have, solve it better than anyone else, and charge for it. The people winning "
    "right now started small and stayed consistent. You can start today.",

    "Stop scrolling. {hook} What used to take months now takes days if you know the "
    "shortcuts. You don't need a degree. You need execution speed. Pick one business "
    "model, go all in for 90 days, and track what works. The winners aren't smarter. "
    "They're just faster at testing. This is your sign to stop researching and start "
    "building.",

    "Listen. {hook} Everyone's selling you complicated systems and expensive courses. "
    "The truth? Making money online is simple but not easy. You need a clear offer, a "
    "way to reach people, and relentless consistency. Solve a painful problem, package "
    "your solution, find your audience, and deliver results. Then do it again.",
)

FACELESS_STORY_SCRIPTS = (
    "{hook} Nobody saw it coming. Three months ago, everything was different. No "
    "audience. No income. Just frustration and doubt. Then one decision changed "
    "everything. It wasn't luck. It was consistency mixed with smart pivots. The first "
    "month was silent. The second brought small wins. The third, everything clicked. "
    "Success isn't a straight line. But it's possible.",

    "{hook} This is the part they don't show you on social media. Behind every "
    "overnight success is months of invisible work. Early mornings. Late nights. "
    "Constant doubt. Then something shifts. You figure out what works and you double "
    "down. The breakthrough happens when you're exhausted but keep going anyway. "
    "That's the real story.",

    "{hook} Let me tell you what really happened. It started with a simple decision to "
    "try something different. No grand plan. Just action. The first attempts failed. "
    "Hard. But each failure taught something. Slowly the pieces connected. The "
    "audience grew and the income followed. You don't need it all figured out. You "
    "just need to start.",
)


def build_ai_tools_script(topic: Topic, variant: int) -> str:
    return AI_TOOLS_SCRIPTS[variant % len(AI_TOOLS_SCRIPTS)].format(hook=topic.hook_format)


def build_online_business_script(topic: Topic, variant: int) -> str:
    return ONLINE_BUSINESS_SCRIPTS[variant % len(ONLINE_BUSINESS_SCRIPTS)].format(hook=topic.hook_format)


def build_faceless_story_script(topic: Topic, variant: int) -> str:
    return FACELESS_STORY_SCRIPTS[variant % len(FACELESS_STORY_SCRIPTS)].format(hook=topic.hook_format)


SCRIPT_BUILDERS: dict[Niche, Callable[[Topic, int], str]] = {
    Niche.AI_TOOLS: build_ai_tools_script,
    Niche.ONLINE_BUSINESS: build_online_business_script,
    Niche.FACELESS_STORIES: build_faceless_story_script,
}

_missing = set(Niche) - set(SCRIPT_BUILDERS)
if _missing:
    raise RuntimeError(f"No script builder for niche(s): {sorted(n.value for n in _missing)}")


# =============================================================================
# Captions and hashtags
# =============================================================================

CAPTION_TEMPLATES = (
    'This changed everything 🚀 Comment "LINK" for access',
    "The secret nobody talks about 💡 Drop a 🔥 if you needed this",
    "This is how winners do it ⚡ Save this for later",
    "Game changer alert 🎯 Follow for daily tips",
    'Wait for the ending 💥 Comment "MORE" for part 2',
)

BASE_HASHTAGS = ("#fyp", "#viral", "#trending")

NICHE_HASHTAGS: dict[Niche, tuple[str, ...]] = {
    Niche.AI_TOOLS: (
        "#AItools", "#automation", "#productivity", "#aiautomation", "#techtools", "#contentcreation",
    ),
    Niche.ONLINE_BUSINESS: (
        "#makemoneyonline", "#sidehustle", "#entrepreneur", "#businesstips", "#onlinebusiness", "#passiveincome",
    ),
    Niche.FACELESS_STORIES: (
        "#successstory", "#motivation", "#entrepreneurship", "#businessgrowth", "#inspiration", "#mindset",
    ),
}


# =============================================================================
# Models
# =============================================================================


class VideoContent(BaseModel):
    """Everything needed to voice, compose and publish one video."""

    niche: Niche
    angle: str
    script: str
    segments: list[TextSegment] = Field(default_factory=list)
    caption: str
    hashtags: list[str] = Field(default_factory=list)
    estimated_duration: float

    @property
    def full_caption(self) -> str:
        """Caption followed by hashtags, as posted."""
        if not self.hashtags:
            return self.caption
        return f"{self.caption}\n\n{' '.join(self.hashtags)}"

    def save(self, path: Path) -> Path:
        """Write content as JSON (segments use the on-screen text keys)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(mode="json", by_alias=True), f, indent=2, ensure_ascii=False)
        return path


# =============================================================================
# Generation
# =============================================================================


def estimate_speech_duration(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> float:
    """Estimate spoken length of ``text`` in seconds."""
    words = len(text.split())
    return words / words_per_minute * 60


def hook_text(hook_format: str, max_chars: int = HOOK_TEXT_MAX_CHARS) -> str:
    """First sentence of the hook, shortened on a word boundary."""
    first = re.split(r"(?<=[.!?])\s", hook_format.strip(), maxsplit=1)[0].rstrip(".")
    if len(first) <= max_chars:
        return first
    cut = first[:max_chars].rsplit(" ", 1)[0]
    return cut.rstrip(",;:") + "..."


def build_text_segments(topic: Topic, duration: float) -> list[TextSegment]:
    """On-screen text for a video of ``duration`` seconds.

    Segments starting after the end of the video are dropped, the rest are
    clamped to it.
    """
    planned = [
        (SegmentKind.HOOK, 0.0, 3.5, hook_text(topic.hook_format),
         "huge bold white text with purple glow, centered"),
        (SegmentKind.EMPHASIS, 8.0, 12.0, "Game changer",
         "bold yellow text, centered"),
        (SegmentKind.SUBTITLE, 15.0, 20.0, "This is the secret",
         "white text, lower third"),
        (SegmentKind.EMPHASIS, 25.0, 30.0, "Start today",
         "bold purple text, centered"),
    ]

    segments = []
    for kind, start, end, text, style in planned:
        if start >= duration:
            continue
        segments.append(
            TextSegment(kind=kind, start=start, end=min(end, duration), text=text, style_hint=style)
        )
    return segments


def build_hashtags(niche: Niche, limit: int = MAX_HASHTAGS) -> list[str]:
    """Base tags followed by niche tags, without duplicates."""
    tags: list[str] = []
    for tag in (*BASE_HASHTAGS, *NICHE_HASHTAGS[niche]):
        if tag.lower() not in (t.lower() for t in tags):
            tags.append(tag)
    return tags[:limit]


def generate_video_content(topic: Topic, rng: Optional[random.Random] = None) -> VideoContent:
    """Generate script, on-screen text, caption and hashtags for a topic.

    Args:
        topic: Topic to build content for.
        rng: Random source for template choice. Pass a seeded Random for
            reproducible output.

    Raises:
        ContentError: If the topic has no usable hook.
    """
    rng = rng or random.Random()
    niche = Niche.parse(topic.niche)

    if not topic.hook_format.strip():
        raise ContentError(f"Topic '{topic.angle}' has no hook")

    script = SCRIPT_BUILDERS[niche](topic, rng.randrange(3))
    duration = estimate_speech_duration(script)
    # Segments are planned on the default timeline, capped by the speech length
    timeline = min(duration, VIDEO_DEFAULT_DURATION_SECONDS)

    content = VideoContent(
        niche=niche,
        angle=topic.angle,
        script=script,
        segments=build_text_segments(topic, timeline),
        caption=rng.choice(CAPTION_TEMPLATES),
        hashtags=build_hashtags(niche),
        estimated_duration=duration,
    )

    logger.info(
        f"Generated content for '{topic.angle}': {len(script.split())} words, "
        f"~{duration:.0f}s, {len(content.segments)} segments"
    )
    return content
