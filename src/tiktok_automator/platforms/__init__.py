"""Publishing layer.

Usage:
    from tiktok_automator.platforms import CredentialStore, TikTokPublisher

    store = CredentialStore(config.tiktok.token_file, key, secret)
    publisher = TikTokPublisher(config.tiktok, store)
    result = await publisher.publish_reel(video_path, caption)
"""

from .base import PlatformPublisher, ProgressCallback, PublishProgress, PublishResult
from .credentials import CredentialError, CredentialStore, TokenData
from .tiktok import TikTokAPIError, TikTokPublisher

__all__ = [
    "PlatformPublisher",
    "ProgressCallback",
    "PublishProgress",
    "PublishResult",
    "CredentialError",
    "CredentialStore",
    "TokenData",
    "TikTokAPIError",
    "TikTokPublisher",
]
