"""TikTok platform adapter (Content Posting API)."""

from .publisher import TikTokAPIError, TikTokPublisher, plan_chunks

__all__ = [
    "TikTokAPIError",
    "TikTokPublisher",
    "plan_chunks",
]
