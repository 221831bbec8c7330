"""Voice + background music mixing."""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import OutputConfig
from .ffmpeg import FFmpegError, FFmpegRunner, format_seconds
from .models import MediaAsset, MixFailure

logger = logging.getLogger(__name__)


class AudioMixer:
    """Blends a primary (voice) track with an attenuated secondary (music) track.

    The mixed track is always exactly as long as the primary: longer music
    is cut, shorter music leaves silence under the rest of the voice.
    """

    def __init__(
        self,
        runner: Optional[FFmpegRunner] = None,
        output: Optional[OutputConfig] = None,
    ):
        self.runner = runner or FFmpegRunner()
        self.output = output or OutputConfig()

    def mix(
        self,
        primary: Union[MediaAsset, Path],
        secondary: Union[MediaAsset, Path],
        secondary_volume: float,
        output_path: Path,
    ) -> MediaAsset:
        """Mix two audio tracks into one.

        Args:
            primary: Voice track. Sets the output length and is never attenuated.
            secondary: Music track, scaled linearly by secondary_volume.
            secondary_volume: Linear gain for the secondary, 0.0 to 1.0.
            output_path: Where to write the mixed track (.m4a).

        Returns:
            MediaAsset for the mixed track.

        Raises:
            MixFailure: If an input is missing, the volume is out of range,
                or ffmpeg rejects the operation.
        """
        primary = MediaAsset.of(primary)
        secondary = MediaAsset.of(secondary)
        paths = [primary.path, secondary.path]

        if not 0.0 <= secondary_volume <= 1.0:
            raise MixFailure(
                f"Music volume must be between 0 and 1, got {secondary_volume}",
                paths=paths,
            )
        for asset in (primary, secondary):
            if not asset.exists:
                raise MixFailure(f"Audio file not found: {asset.path}", paths=paths)

        # normalize=0 keeps amix from rescaling inputs, so the voice keeps its
        # level and the music gain is exactly secondary_volume
        filter_complex = (
            f"[1:a]volume={float(secondary_volume)!r}[bgm];"
            f"[0:a][bgm]amix=inputs=2:duration=first:dropout_transition=0:normalize=0[aout]"
        )

        logger.info(
            f"Mixing {primary.path.name} with {secondary.path.name} "
            f"(music volume {secondary_volume:.2f})"
        )

        try:
            self.runner.ffmpeg([
                "-i", str(primary.path),
                "-i", str(secondary.path),
                "-filter_complex", filter_complex,
                "-map", "[aout]",
                "-c:a", self.output.audio_codec,
                "-b:a", self.output.audio_bitrate,
                "-ar", str(self.output.audio_sample_rate),
                str(output_path),
            ])
        except FFmpegError as e:
            raise MixFailure(
                "Audio mixing failed",
                paths=paths,
                diagnostic=e.diagnostic,
            ) from e

        return MediaAsset(path=output_path)

    def silence(self, duration_seconds: float, output_path: Path) -> MediaAsset:
        """Generate a silent stereo track, used when no music is available.

        Raises:
            MixFailure: If the duration is not positive or ffmpeg fails.
        """
        if duration_seconds <= 0:
            raise MixFailure(
                f"Silence duration must be positive, got {duration_seconds}",
                paths=[output_path],
            )

        logger.info(f"No music available, generating {duration_seconds:.2f}s of silence")

        try:
            self.runner.ffmpeg([
                "-f", "lavfi",
                "-i", f"anullsrc=r={self.output.audio_sample_rate}:cl=stereo",
                "-t", format_seconds(duration_seconds),
                "-c:a", self.output.audio_codec,
                "-b:a", self.output.audio_bitrate,
                str(output_path),
            ])
        except FFmpegError as e:
            raise MixFailure(
                "Silence generation failed",
                paths=[output_path],
                diagnostic=e.diagnostic,
            ) from e

        return MediaAsset(path=output_path, duration=duration_seconds)
