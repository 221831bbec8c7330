"""Application configuration.

Secrets and paths come from the environment (a .env file is loaded if
present). Everything else has sensible defaults.

Environment variables:
    OUTPUT_DIR            Where generated posts are written (default: ./output)
    MUSIC_DIR             Music library with manifest.json (default: ./music)
    STOCK_DIR             Downloaded stock clips (default: ./stock-videos)
    PEXELS_API_KEY        Pexels API key
    TIKTOK_CLIENT_KEY     TikTok app client key
    TIKTOK_CLIENT_SECRET  TikTok app client secret
    TIKTOK_TOKEN_FILE     Credential file (default: ./tokens.json)
    TTS_VOICE             edge-tts voice or preset name
    FFMPEG_PATH           ffmpeg executable
    FFPROBE_PATH          ffprobe executable
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from tiktok_automator.constants import (
    MUSIC_DIR_NAME,
    OUTPUT_DIR_NAME,
    PROJECT_ROOT,
    STOCK_DIR_NAME,
    TOKEN_FILENAME,
)
from tiktok_automator.video.config import CompositionConfig


# Friendly names for edge-tts neural voices
VOICE_PRESETS = {
    "professional_male": "en-US-GuyNeural",
    "professional_female": "en-US-AriaNeural",
    "friendly_male": "en-US-DavisNeural",
    "friendly_female": "en-US-JennyNeural",
    "energetic": "en-US-AndrewNeural",
    "british_male": "en-GB-RyanNeural",
    "british_female": "en-GB-SoniaNeural",
}


class TTSConfig(BaseModel):
    """edge-tts voice and prosody. Prosody values use edge-tts signed offsets."""

    voice: str = "en-US-GuyNeural"
    rate: str = "+8%"
    pitch: str = "+0Hz"
    volume: str = "+0%"

    @classmethod
    def from_preset(cls, preset: str) -> "TTSConfig":
        """Preset name, or any edge-tts voice name used as is."""
        return cls(voice=VOICE_PRESETS.get(preset, preset))


class PexelsConfig(BaseModel):
    """Pexels search parameters. The key itself is read from the environment."""

    api_key_env: str = "PEXELS_API_KEY"
    orientation: str = "portrait"
    size: str = "medium"  # medium downloads faster than large
    quality: str = "hd"
    per_page: int = Field(default=15, ge=1, le=80)
    candidates: int = Field(default=5, ge=1)  # pick among the first N results

    @property
    def api_key(self) -> Optional[str]:
        return os.environ.get(self.api_key_env)


class TikTokConfig(BaseModel):
    """TikTok app credentials and API settings.

    The access token itself is not configuration; it lives in the
    CredentialStore file.
    """

    client_key: str = ""
    client_secret: str = ""
    api_base_url: str = "https://open.tiktokapis.com/v2"
    privacy_level: str = "SELF_ONLY"  # Posts stay private until the app passes audit
    token_file: Path = Path(TOKEN_FILENAME)

    def validate_credentials(self) -> tuple[bool, str]:
        """Check that the app credentials are present."""
        if not self.client_key:
            return False, "TikTok client_key is required (TIKTOK_CLIENT_KEY)"
        if not self.client_secret:
            return False, "TikTok client_secret is required (TIKTOK_CLIENT_SECRET)"
        return True, ""


class AutomatorConfig(BaseModel):
    """Top-level configuration for the whole automation."""

    output_dir: Path = PROJECT_ROOT / OUTPUT_DIR_NAME
    music_dir: Path = PROJECT_ROOT / MUSIC_DIR_NAME
    stock_dir: Path = PROJECT_ROOT / STOCK_DIR_NAME
    stock_reuse_probability: float = Field(default=0.7, ge=0.0, le=1.0)
    stock_keep_count: int = Field(default=20, ge=1)
    composition: CompositionConfig = Field(default_factory=CompositionConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    pexels: PexelsConfig = Field(default_factory=PexelsConfig)
    tiktok: TikTokConfig = Field(default_factory=TikTokConfig)

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "AutomatorConfig":
        """Load configuration from environment variables (and .env)."""
        load_dotenv(env_file)

        def env_path(name: str, default: Path) -> Path:
            value = os.getenv(name)
            return Path(value) if value else default

        composition = CompositionConfig(
            ffmpeg_path=os.getenv("FFMPEG_PATH", "ffmpeg"),
            ffprobe_path=os.getenv("FFPROBE_PATH", "ffprobe"),
        )
        tts = TTSConfig.from_preset(os.getenv("TTS_VOICE", TTSConfig().voice))
        tiktok = TikTokConfig(
            client_key=os.getenv("TIKTOK_CLIENT_KEY", ""),
            client_secret=os.getenv("TIKTOK_CLIENT_SECRET", ""),
            token_file=env_path("TIKTOK_TOKEN_FILE", PROJECT_ROOT / TOKEN_FILENAME),
        )

        return cls(
            output_dir=env_path("OUTPUT_DIR", PROJECT_ROOT / OUTPUT_DIR_NAME),
            music_dir=env_path("MUSIC_DIR", PROJECT_ROOT / MUSIC_DIR_NAME),
            stock_dir=env_path("STOCK_DIR", PROJECT_ROOT / STOCK_DIR_NAME),
            composition=composition,
            tts=tts,
            tiktok=tiktok,
        )
