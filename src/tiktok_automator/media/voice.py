"""Voiceover synthesis through Microsoft Edge's online TTS (edge-tts).

The script is cleaned of tokens a narrator should never read out, streamed
from the service straight into an MP3 file, and returned with a rough
duration estimate. The composition pipeline probes the real duration.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import edge_tts

from tiktok_automator.config import TTSConfig
from tiktok_automator.content.generator import estimate_speech_duration

logger = logging.getLogger(__name__)

# Emoticons, pictographs, transport, supplemental symbols, dingbats
_EMOJI = re.compile("[\U0001F300-\U0001F6FF\U0001F900-\U0001F9FF\u2600-\u27BF]+")
_UNSPOKEN_TAG = re.compile(r"[#@]\w+")
_SPACES = re.compile(r"\s+")


class VoiceError(Exception):
    """Voiceover generation failed."""


@dataclass
class VoiceoverResult:
    audio_path: Path
    estimated_duration: float
    characters: int


def sanitize_for_tts(text: str) -> str:
    """Drop hashtags, mentions and emojis, then collapse whitespace."""
    if not text:
        return text
    text = _EMOJI.sub("", _UNSPOKEN_TAG.sub("", text))
    return _SPACES.sub(" ", text).strip()


class VoiceGenerator:
    """Turns a script into a narrated MP3."""

    def __init__(self, config: Optional[TTSConfig] = None):
        self.config = config or TTSConfig()

    async def _stream_to_file(self, text: str, output_path: Path) -> int:
        """Write the audio chunks of one synthesis; returns bytes written."""
        communicate = edge_tts.Communicate(
            text,
            voice=self.config.voice,
            rate=self.config.rate,
            pitch=self.config.pitch,
            volume=self.config.volume,
        )
        written = 0
        with output_path.open("wb") as sink:
            async for chunk in communicate.stream():
                # WordBoundary and other metadata chunks carry no audio
                if chunk["type"] != "audio":
                    continue
                sink.write(chunk["data"])
                written += len(chunk["data"])
        return written

    async def generate(self, text: str, output_path: Path) -> VoiceoverResult:
        """Synthesize ``text`` into ``output_path``.

        Raises:
            VoiceError: Nothing speakable remains, the service fails, or it
                streams no audio. No partial file is left behind in the
                last case.
        """
        spoken = sanitize_for_tts(text)
        if not spoken:
            raise VoiceError("Nothing to speak after removing hashtags and emojis")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Synthesizing {len(spoken)} chars as {self.config.voice}")

        try:
            written = await self._stream_to_file(spoken, output_path)
        except Exception as e:
            raise VoiceError(f"edge-tts synthesis failed: {e}") from e

        if not written:
            output_path.unlink(missing_ok=True)
            raise VoiceError("edge-tts returned no audio")

        estimate = estimate_speech_duration(spoken)
        logger.info(f"Voiceover ready: {output_path.name} ({written} bytes, ~{estimate:.1f}s)")
        return VoiceoverResult(audio_path=output_path, estimated_duration=estimate, characters=len(spoken))

    def generate_sync(self, text: str, output_path: Path) -> VoiceoverResult:
        """Blocking form of generate() for callers without an event loop."""
        return asyncio.run(self.generate(text, output_path))
