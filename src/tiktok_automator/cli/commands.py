"""CLI commands - thin wrappers around the orchestrator and pipeline."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from ..config import AutomatorConfig
from ..media import Mood, MusicLibrary, MusicLibraryError
from ..orchestrator import VideoOrchestrator, setup_logging
from ..platforms import CredentialError, CredentialStore
from ..video import CompositionPipeline, CompositionRequest, TextSegment
from .console import console, print_error, print_info, print_success
from .display import (
    show_composition_result,
    show_connections,
    show_content,
    show_generation_result,
    show_token,
)


def load_config() -> AutomatorConfig:
    """Configuration from the environment (.env included)."""
    return AutomatorConfig.from_env()


def load_segments(path: Path) -> list[TextSegment]:
    """Read on-screen text segments from JSON.

    Accepts either a list of segments or an object with a "segments" key
    (such as a post's content.json).

    Raises:
        typer.BadParameter: If the file is unreadable or a segment is invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise typer.BadParameter(f"Cannot read segments from {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("segments", [])
    if not isinstance(data, list):
        raise typer.BadParameter(f"{path} does not contain a list of segments")

    try:
        return [TextSegment.model_validate(item) for item in data]
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid segment in {path}: {e}") from e


def generate(
    day: Optional[int] = typer.Option(None, "--day", "-d", min=1, max=366, help="Day of year for topic (default: today)"),
    no_publish: bool = typer.Option(False, "--no-publish", help="Compose only, do not upload to TikTok"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate today's video and publish it to TikTok."""
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    orchestrator = VideoOrchestrator(load_config())

    async def run():
        try:
            return await orchestrator.generate_and_post(day_of_year=day, publish=not no_publish)
        finally:
            await orchestrator.close()

    result = asyncio.run(run())
    show_generation_result(console, result)
    if not result.success:
        raise typer.Exit(1)


def compose(
    voice: Path = typer.Argument(..., exists=True, dir_okay=False, help="Voiceover audio"),
    video: Path = typer.Argument(..., exists=True, dir_okay=False, help="Background video"),
    output: Path = typer.Option(..., "--output", "-o", help="Output MP4 path"),
    music: Optional[Path] = typer.Option(None, "--music", "-m", exists=True, dir_okay=False, help="Background music"),
    segments: Optional[Path] = typer.Option(None, "--segments", "-s", exists=True, dir_okay=False, help="JSON file with on-screen text"),
    music_volume: float = typer.Option(0.15, "--music-volume", min=0.0, max=1.0, help="Music gain relative to voice"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Compose a video from local voice, footage and (optional) music."""
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    config = load_config()

    request = CompositionRequest(
        voice_path=voice,
        video_path=video,
        output_path=output,
        music_path=music,
        segments=load_segments(segments) if segments else [],
        music_volume=music_volume,
    )
    pipeline = CompositionPipeline(config.composition)

    result = pipeline.compose_sync(request)
    show_composition_result(console, result)
    if not result.success:
        raise typer.Exit(1)


def content(
    day: Optional[int] = typer.Option(None, "--day", "-d", min=1, max=366, help="Day of year for topic (default: today)"),
    save: Optional[Path] = typer.Option(None, "--save", help="Also write the content as JSON"),
) -> None:
    """Preview the content for a day without producing media."""
    orchestrator = VideoOrchestrator(load_config())
    video_content = orchestrator.generate_content(day)
    show_content(console, video_content)
    if save:
        video_content.save(save)
        print_success(f"Saved to {save}")


def check() -> None:
    """Check ffmpeg, Pexels, TikTok and the music library."""
    orchestrator = VideoOrchestrator(load_config())

    async def run():
        try:
            return await orchestrator.check_connections()
        finally:
            await orchestrator.close()

    results = asyncio.run(run())
    show_connections(console, results)
    if not all(ok for ok, _ in results.values()):
        raise typer.Exit(1)


def music_add(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Audio file to add"),
    name: str = typer.Option(..., "--name", "-n", help="Track name"),
    mood: Mood = typer.Option(..., "--mood", help="Track mood"),
    duration: Optional[float] = typer.Option(None, "--duration", help="Track length in seconds"),
) -> None:
    """Add a track to the music library manifest."""
    config = load_config()
    try:
        library = MusicLibrary.load(config.music_dir)
        track = library.add_track(file, name, mood, duration)
    except MusicLibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Added '{track.name}' as {track.id} ({track.mood.value})")
    print_info(f"Library now has {len(library.tracks)} track(s)")


def token(
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Refresh the access token"),
    code: Optional[str] = typer.Option(None, "--code", help="Exchange an OAuth authorization code"),
    redirect_uri: str = typer.Option("", "--redirect-uri", envvar="TIKTOK_REDIRECT_URI", help="Redirect URI used for authorization"),
) -> None:
    """Show, refresh or obtain TikTok OAuth tokens."""
    tiktok = load_config().tiktok
    store = CredentialStore(tiktok.token_file, tiktok.client_key, tiktok.client_secret)

    try:
        if code:
            asyncio.run(store.exchange_code(code, redirect_uri))
            print_success("Authorization code exchanged, tokens saved")
        elif refresh:
            asyncio.run(store.refresh())
            print_success("Access token refreshed")
        show_token(console, store.get())
    except CredentialError as e:
        print_error(str(e), {"token file": tiktok.token_file})
        raise typer.Exit(1)
