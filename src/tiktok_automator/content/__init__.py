"""Topic selection and template-based content generation.

Example usage:
    from tiktok_automator.content import topic_for_day, generate_video_content

    topic = topic_for_day()
    content = generate_video_content(topic)
    print(content.script)
    print(content.full_caption)
"""

from .generator import (
    CAPTION_TEMPLATES,
    NICHE_HASHTAGS,
    SCRIPT_BUILDERS,
    VideoContent,
    build_hashtags,
    build_text_segments,
    estimate_speech_duration,
    generate_video_content,
    hook_text,
)
from .niches import ContentError, Niche, UnknownNicheError
from .topics import TOPIC_DATABASE, Topic, day_of_year, topic_for_day, topics_by_niche

__all__ = [
    # Niches
    "Niche",
    "ContentError",
    "UnknownNicheError",
    # Topics
    "Topic",
    "TOPIC_DATABASE",
    "day_of_year",
    "topic_for_day",
    "topics_by_niche",
    # Generation
    "VideoContent",
    "SCRIPT_BUILDERS",
    "CAPTION_TEMPLATES",
    "NICHE_HASHTAGS",
    "generate_video_content",
    "build_text_segments",
    "build_hashtags",
    "estimate_speech_duration",
    "hook_text",
]
